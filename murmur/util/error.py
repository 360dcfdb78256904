"""Utility layer errors."""


class UtilError(Exception):
    """Base utility error."""

    pass


class ConfigurationError(UtilError):
    """Configuration error."""

    pass


class InvalidPublicIdError(UtilError):
    """A public identifier could not be decoded."""

    pass

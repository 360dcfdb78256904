"""Domain layer errors."""


class DomainError(Exception):
    """Base domain error."""

    pass


class ValidationError(DomainError):
    """Client input error (malformed ids, bad reply targets, bad lengths)."""

    pass


class PolicyRejectionError(DomainError):
    """Submission refused by a moderation policy."""

    pass


class RateLimitExceededError(PolicyRejectionError):
    """Too many submissions from one address in the current minute."""

    def __init__(self) -> None:
        super().__init__("Commenting too frequently, please try again later")


class NotFoundError(DomainError):
    """Raised when a requested resource is not found."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} not found: {identifier}")


class NotAuthenticatedError(DomainError):
    """No valid access token was presented."""

    pass


class NotAuthorizedError(DomainError):
    """Raised when the caller lacks permission for an operation."""

    pass

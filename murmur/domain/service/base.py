"""Base class for domain services."""


class Service:
    """Base class for all domain services.

    Domain services hold the comment engine's business rules that span
    several entities or collaborators.
    """

    pass

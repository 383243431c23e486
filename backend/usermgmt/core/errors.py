"""Domain-level exceptions.

Components raise these to express business rule violations.
The HTTP layer maps each one to its status code.
"""


class DomainError(Exception):
    """Base class for all domain errors."""

    status_code = 500

    def __init__(self, message: str = "An internal error occurred"):
        self.message = message
        super().__init__(message)


class ValidationError(DomainError):
    """Input is missing a required field."""

    status_code = 400


class UnauthorizedError(DomainError):
    """Bad credentials, or no usable identity on the request."""

    status_code = 401


class NotFoundError(DomainError):
    """Requested entity does not exist."""

    status_code = 404

    def __init__(self, entity: str = "User"):
        super().__init__(f"{entity} not found")


class ConflictError(DomainError):
    """Entity with the same unique key already exists."""

    status_code = 409


class InternalError(DomainError):
    """Hashing or storage failure not otherwise classified."""

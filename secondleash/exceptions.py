"""Exception hierarchy for SecondLeash.

Every failure the core raises is one of these types; the HTTP layer maps
them to status codes in one place.
"""


class SecondLeashError(Exception):
    """Base exception for all SecondLeash errors."""

    status_code = 500
    default_message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class UnauthenticatedError(SecondLeashError):
    """Raised when no caller identity can be resolved for the request."""

    status_code = 401
    default_message = "Authentication required"


class ForbiddenError(SecondLeashError):
    """Raised when the caller lacks the role or shelter scope for an operation."""

    status_code = 403
    default_message = "Insufficient permissions"


class NotFoundError(SecondLeashError):
    """Raised when a record is absent or soft-deleted."""

    status_code = 404
    default_message = "Not found"


class InvalidDogError(SecondLeashError):
    """Raised when dog data handed to the service is incomplete."""

    status_code = 422
    default_message = "Validation failed"


class ConflictError(SecondLeashError):
    """Raised when a microchip id is already used by another live dog."""

    status_code = 409
    default_message = "Conflict"


class StoreError(SecondLeashError):
    """Raised when the record store fails (connectivity, unexpected constraint)."""

    status_code = 500
    default_message = "Storage failure"

"""Domain error codes shared by every bounded context."""

from enum import Enum


class ErrorCode(Enum):
    """Domain error codes."""

    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    ACCESS_DENIED = "ACCESS_DENIED"
    QUOTE_NOT_FOUND = "QUOTE_NOT_FOUND"
    QUOTE_LOCKED = "QUOTE_LOCKED"
    INVALID_QUOTE_STATUS = "INVALID_QUOTE_STATUS"
    INVALID_QUOTE_REVISION = "INVALID_QUOTE_REVISION"
    BOOKING_NOT_FOUND = "BOOKING_NOT_FOUND"
    BOOKING_ALREADY_EXISTS = "BOOKING_ALREADY_EXISTS"
    COMPONENTS_UNAVAILABLE = "COMPONENTS_UNAVAILABLE"
    BOOKING_PERSISTENCE_FAILED = "BOOKING_PERSISTENCE_FAILED"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"
    PAYMENT_NOT_FOUND = "PAYMENT_NOT_FOUND"


class DomainError(Exception):
    """Base domain error with code and user-safe message.

    ``http_status`` is the response status the API layer uses for the error.
    """

    http_status = 400

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict:
        return {"code": self.code.value, "detail": self.message}


class NotAuthenticatedError(DomainError):
    """Raised when an operation runs without a signed-in user."""

    http_status = 401

    def __init__(self) -> None:
        super().__init__(code=ErrorCode.NOT_AUTHENTICATED, message="Not authenticated")


class AccessDeniedError(DomainError):
    """Raised when the caller has no team or the team does not own the record."""

    http_status = 403

    def __init__(self, message: str = "User not part of a team") -> None:
        super().__init__(code=ErrorCode.ACCESS_DENIED, message=message)

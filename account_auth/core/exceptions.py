"""
Domain failures raised by the authentication core.

The transport layer maps each class onto an HTTP status; nothing in the core
knows about HTTP beyond the status hint carried here.
"""
from typing import Optional


class AuthServiceError(Exception):
    """Base class for all client-visible failures of the core."""

    status_code: int = 400
    error_code: str = "AUTH_ERROR"
    default_message: str = "Request failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def error(self) -> str:
        return self.__class__.__name__


class ConflictError(AuthServiceError):
    """An account with the given email already exists."""

    status_code = 409
    error_code = "CONFLICT"
    default_message = "User already exists"


class UnauthenticatedError(AuthServiceError):
    """Bad credentials, unverified email, or an invalid/expired token."""

    status_code = 401
    error_code = "UNAUTHENTICATED"
    default_message = "Invalid credentials"


class InvalidOrExpiredCodeError(AuthServiceError):
    status_code = 400
    error_code = "INVALID_OR_EXPIRED_CODE"
    default_message = "Invalid or expired OTP"


class NotFoundError(AuthServiceError):
    """A referenced account vanished between two steps of a flow."""

    status_code = 404
    error_code = "NOT_FOUND"
    default_message = "Account was not found"


class InfrastructureError(AuthServiceError):
    """
    A backing store failed (connection refused, timeout, ...).

    Kept apart from the domain failures above: the message given to clients
    is always generic, the cause stays in the log.
    """

    status_code = 503
    error_code = "INFRASTRUCTURE_ERROR"
    default_message = "Service temporarily unavailable"

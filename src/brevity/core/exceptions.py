"""Error taxonomy for Brevity.

Every error raised by the domain layer carries the HTTP status and the
machine-readable code it maps to, so the API boundary can render the
uniform ``{success, message, error}`` envelope without knowing the cause.
"""

from typing import Any


class BrevityError(Exception):
    """Base class for all expected application errors."""

    status_code: int = 500
    code: str = "internal_error"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: str | None = None, **extra: Any) -> None:
        self.message = message or self.default_message
        self.extra = extra
        super().__init__(self.message)


class ValidationError(BrevityError):
    """Missing or malformed input."""

    status_code = 400
    code = "validation_error"
    default_message = "Validation error"

    def __init__(
        self,
        message: str | None = None,
        details: list[dict[str, Any]] | None = None,
        **extra: Any,
    ) -> None:
        super().__init__(message, **extra)
        self.details = details or []


class NotFoundError(BrevityError):
    status_code = 404
    code = "not_found"
    default_message = "User not found"


class DuplicateEmailError(BrevityError):
    status_code = 400
    code = "duplicate_email"
    default_message = "User already exists with this email"


class UnauthorizedError(BrevityError):
    """Bad credentials, or an account that may not log in yet."""

    status_code = 401
    code = "unauthorized"
    default_message = "Invalid email or password"


class AccountLockedError(BrevityError):
    status_code = 423
    code = "account_locked"
    default_message = "Account is temporarily locked due to too many failed login attempts"


class AccountSuspendedError(BrevityError):
    status_code = 423
    code = "account_suspended"
    default_message = "Account is suspended"


class ForbiddenError(BrevityError):
    status_code = 403
    code = "forbidden"
    default_message = "Account not found"


class InvalidTokenError(BrevityError):
    """Verification envelope could not be used, for whatever reason."""

    status_code = 400
    code = "invalid_token"
    default_message = "Invalid or expired email verification token"


class InvalidOrExpiredTokenError(BrevityError):
    """Reset code is wrong or past its expiry; the two are not distinguished."""

    status_code = 400
    code = "invalid_or_expired_token"
    default_message = "Invalid or expired password reset token"


class InvalidStatusTransitionError(BrevityError):
    status_code = 409
    code = "invalid_status_transition"
    default_message = "Account status transition is not allowed"


class InternalError(BrevityError):
    status_code = 500
    code = "internal_error"

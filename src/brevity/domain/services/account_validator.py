"""Account field validation and normalization.

Runs on the write path before anything is persisted:
- Email is trimmed, lower-cased and checked against a simple address pattern
- Display name is required and at most 50 characters
- Password must meet the minimum length
- An account needs a password, an external provider binding, or both
"""

import re
from dataclasses import dataclass

from brevity.domain.entities.account import OAuthBinding

EMAIL_PATTERN = re.compile(r"^[\w.-]+@([\w-]+\.)+[\w-]{2,4}$")
DISPLAY_NAME_MAX_LENGTH = 50


@dataclass(frozen=True)
class FieldValidationError:
    """Represents a single field validation error.

    Attributes:
        field: The field name.
        message: Human-readable error message.
        code: Machine-readable error code.
    """

    field: str
    message: str
    code: str

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "message": self.message, "code": self.code}


def normalize_email(email: str) -> str:
    """Trim and lower-case an email address."""
    return email.strip().lower()


class AccountValidator:
    """Validates account fields before they reach the credential store."""

    def __init__(self, password_min_length: int = 8) -> None:
        self.password_min_length = password_min_length

    def validate_email(self, email: str | None) -> list[FieldValidationError]:
        if not email or not email.strip():
            return [FieldValidationError("email", "Email is required", "email_required")]
        if not EMAIL_PATTERN.match(normalize_email(email)):
            return [FieldValidationError("email", "Please enter a valid email", "email_invalid")]
        return []

    def validate_display_name(self, display_name: str | None) -> list[FieldValidationError]:
        if not display_name or not display_name.strip():
            return [
                FieldValidationError(
                    "display_name", "Display name is required", "display_name_required"
                )
            ]
        if len(display_name.strip()) > DISPLAY_NAME_MAX_LENGTH:
            return [
                FieldValidationError(
                    "display_name",
                    f"Display name cannot be more than {DISPLAY_NAME_MAX_LENGTH} characters",
                    "display_name_too_long",
                )
            ]
        return []

    def validate_password(
        self, password: str | None, field: str = "password"
    ) -> list[FieldValidationError]:
        if password is None:
            return []
        if len(password) < self.password_min_length:
            return [
                FieldValidationError(
                    field,
                    f"Password must be at least {self.password_min_length} characters",
                    "password_too_short",
                )
            ]
        return []

    def validate_registration(
        self,
        display_name: str | None,
        email: str | None,
        password: str | None = None,
        oauth_providers: list[OAuthBinding] | None = None,
    ) -> list[FieldValidationError]:
        """Validate all fields of a new account.

        Returns:
            List of validation errors. Empty list if the account is valid.
        """
        errors: list[FieldValidationError] = []
        errors.extend(self.validate_display_name(display_name))
        errors.extend(self.validate_email(email))
        errors.extend(self.validate_password(password))
        if not password and not oauth_providers:
            errors.append(
                FieldValidationError(
                    "password",
                    "Password is required for accounts without an external provider",
                    "credential_required",
                )
            )
        return errors

"""Pydantic schemas for authentication endpoints.

Every response is wrapped in the ``{success, message, data}`` envelope.
Request fields are optional at the schema level so that missing values are
reported by the service with the same messages as other validation failures.
"""

from datetime import datetime
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

from brevity.domain.entities.account import Account

T = TypeVar("T")


class Envelope(BaseModel, Generic[T]):
    """Success envelope."""

    success: bool = True
    message: str | None = None
    data: T | None = None


class ValidationErrorDetail(BaseModel):
    """Detail for a single validation error."""

    field: str = Field(..., description="Field name that failed validation")
    message: str = Field(..., description="Human-readable error message")
    code: str | None = Field(None, description="Machine-readable error code")


class ErrorResponse(BaseModel):
    """Failure envelope."""

    success: bool = False
    message: str = Field(..., description="Human-readable error message")
    error: str = Field(..., description="Machine-readable error code")
    details: list[ValidationErrorDetail] | None = None


class LoginRequest(BaseModel):
    email: str | None = Field(None, description="Account email")
    password: str | None = Field(None, description="Account password")


class LogoutRequest(BaseModel):
    refresh_token: str | None = Field(
        None, description="Token to revoke; omit to sign out on every device"
    )


class RefreshTokenRequest(BaseModel):
    refresh_token: str | None = None


class EmailRequest(BaseModel):
    """Request body carrying only an email (forgot password, resend verification)."""

    email: str | None = None


class ResetPasswordRequest(BaseModel):
    email: str | None = None
    token: str | None = Field(None, description="Reset code received by email")
    new_password: str | None = None


class DeleteAccountRequest(BaseModel):
    password: str | None = Field(None, description="Required for accounts with a password")


class ProfileImageResponse(BaseModel):
    url: str
    public_id: str


class OAuthBindingResponse(BaseModel):
    provider: str
    provider_id: str
    created_at: datetime


class AccountResponse(BaseModel):
    """Account information; never carries the password or tokens."""

    id: str = Field(..., description="Account ID")
    email: str = Field(..., description="Normalized email address")
    display_name: str
    profile_image: ProfileImageResponse | None = None
    oauth_providers: list[OAuthBindingResponse] = Field(default_factory=list)
    status: str
    status_changed_at: datetime
    email_verified: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, account: Account) -> "AccountResponse":
        return cls(
            id=account.id,
            email=account.email,
            display_name=account.display_name,
            profile_image=(
                ProfileImageResponse(
                    url=account.profile_image.url,
                    public_id=account.profile_image.public_id,
                )
                if account.profile_image
                else None
            ),
            oauth_providers=[
                OAuthBindingResponse(
                    provider=binding.provider.value,
                    provider_id=binding.provider_id,
                    created_at=binding.created_at,
                )
                for binding in account.oauth_providers
            ],
            status=account.status.value,
            status_changed_at=account.status_changed_at,
            email_verified=account.email_verified,
            last_login_at=account.last_login_at,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )


class AuthData(BaseModel):
    """Payload of a successful register/login/refresh."""

    user: AccountResponse
    access_token: str = Field(..., description="JWT access token")
    refresh_token: str = Field(..., description="Opaque refresh token")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class UserData(BaseModel):
    user: AccountResponse


class AccountTypeData(BaseModel):
    account_type: str = Field(..., description="'oauth' or 'local'")
    oauth_providers: list[OAuthBindingResponse]
    requires_password_for_deletion: bool


class DeleteAccountData(BaseModel):
    account_type: str

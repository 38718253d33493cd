"""API request and response schemas."""

from brevity.infrastructure.api.schemas.auth_schemas import (
    AccountResponse,
    AccountTypeData,
    AuthData,
    DeleteAccountData,
    DeleteAccountRequest,
    EmailRequest,
    Envelope,
    ErrorResponse,
    LoginRequest,
    LogoutRequest,
    OAuthBindingResponse,
    RefreshTokenRequest,
    ResetPasswordRequest,
    UserData,
    ValidationErrorDetail,
)

__all__ = [
    "AccountResponse",
    "AccountTypeData",
    "AuthData",
    "DeleteAccountData",
    "DeleteAccountRequest",
    "EmailRequest",
    "Envelope",
    "ErrorResponse",
    "LoginRequest",
    "LogoutRequest",
    "OAuthBindingResponse",
    "RefreshTokenRequest",
    "ResetPasswordRequest",
    "UserData",
    "ValidationErrorDetail",
]

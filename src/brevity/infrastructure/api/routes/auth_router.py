"""Authentication API routes.

Provides endpoints for registration, login, session management, email
verification, password reset and account deletion.
"""

from typing import Annotated

from fastapi import APIRouter, Form, Query, UploadFile, status
from fastapi.responses import HTMLResponse

from brevity.core.logging import get_logger
from brevity.domain.entities.account import Account
from brevity.domain.services.session_service import TokenPair
from brevity.infrastructure.api.dependencies import (
    AuthServiceDep,
    CurrentAccount,
    EmailServiceDep,
    PasswordResetServiceDep,
    ProfileImageStorageDep,
)
from brevity.infrastructure.api.schemas import (
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
)

logger = get_logger(__name__)

router = APIRouter()


def _auth_data(account: Account, pair: TokenPair) -> AuthData:
    return AuthData(
        user=AccountResponse.from_entity(account),
        access_token=pair.access_token,
        refresh_token=pair.refresh_token,
        expires_in=pair.expires_in,
    )


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=Envelope[AuthData],
    responses={400: {"model": ErrorResponse, "description": "Validation error or duplicate email"}},
)
async def register(
    auth: AuthServiceDep,
    storage: ProfileImageStorageDep,
    display_name: Annotated[str | None, Form()] = None,
    email: Annotated[str | None, Form()] = None,
    password: Annotated[str | None, Form()] = None,
    profile_image: UploadFile | None = None,
) -> Envelope[AuthData]:
    """Register a new account.

    The account is created inactive and must verify its email before it can
    log in; tokens are still returned so the client can show the account.
    """
    image = None
    if profile_image is not None and profile_image.filename:
        if profile_image.size is not None:
            storage.validate_file_size(profile_image.size)
        image = await storage.save_async(await profile_image.read(), profile_image.content_type)

    try:
        account, pair = await auth.register(display_name, email, password, profile_image=image)
    except Exception:
        if image is not None:
            await storage.delete_async(image.public_id)
        raise

    return Envelope(message="User registered successfully", data=_auth_data(account, pair))


@router.post(
    "/login",
    response_model=Envelope[AuthData],
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials or unverified"},
        403: {"model": ErrorResponse, "description": "Account deleted"},
        423: {"model": ErrorResponse, "description": "Account locked or suspended"},
    },
)
async def login(request: LoginRequest, auth: AuthServiceDep) -> Envelope[AuthData]:
    """Authenticate with email and password.

    Security:
    - Unknown emails and wrong passwords get the same 401 message
    - A password check runs even for unknown emails to equalise timing
    - Repeated failures lock the account temporarily
    """
    account, pair = await auth.login(request.email, request.password)
    return Envelope(message="Login successful", data=_auth_data(account, pair))


@router.post("/logout", response_model=Envelope[None])
async def logout(
    account: CurrentAccount,
    auth: AuthServiceDep,
    request: LogoutRequest | None = None,
) -> Envelope[None]:
    """Revoke the given refresh token, or every token of the account."""
    await auth.logout(account, request.refresh_token if request else None)
    return Envelope(message="Logout successful")


@router.post(
    "/refresh-token",
    response_model=Envelope[AuthData],
    responses={401: {"model": ErrorResponse, "description": "Invalid or expired refresh token"}},
)
async def refresh_token(request: RefreshTokenRequest, auth: AuthServiceDep) -> Envelope[AuthData]:
    """Exchange a refresh token for a new token pair (the old one is spent)."""
    account, pair = await auth.refresh(request.refresh_token)
    return Envelope(message="Token refreshed successfully", data=_auth_data(account, pair))


@router.get("/me", response_model=Envelope[UserData])
async def me(account: CurrentAccount) -> Envelope[UserData]:
    return Envelope(data=UserData(user=AccountResponse.from_entity(account)))


@router.post(
    "/forgot-password",
    response_model=Envelope[None],
    responses={404: {"model": ErrorResponse, "description": "Unknown email"}},
)
async def forgot_password(
    request: EmailRequest, reset: PasswordResetServiceDep
) -> Envelope[None]:
    await reset.send_reset_email(request.email)
    return Envelope(message="Password reset link sent to your email")


@router.post(
    "/reset-password",
    response_model=Envelope[None],
    responses={400: {"model": ErrorResponse, "description": "Invalid or expired code"}},
)
async def reset_password(
    request: ResetPasswordRequest, reset: PasswordResetServiceDep
) -> Envelope[None]:
    """Set a new password with an emailed reset code.

    Signs the account out of every device.
    """
    await reset.reset_password(request.email, request.token, request.new_password)
    return Envelope(message="Password has been reset successfully")


@router.post("/resend-verification", response_model=Envelope[None])
async def resend_verification(request: EmailRequest, auth: AuthServiceDep) -> Envelope[None]:
    await auth.resend_verification(request.email)
    return Envelope(message="Verification email sent successfully")


@router.get(
    "/verify-email",
    response_class=HTMLResponse,
    responses={400: {"model": ErrorResponse, "description": "Invalid or expired token"}},
)
async def verify_email(
    auth: AuthServiceDep,
    email_service: EmailServiceDep,
    token: Annotated[str | None, Query()] = None,
) -> HTMLResponse:
    """Follow a verification link; renders a confirmation page."""
    account = await auth.verify_email(token)
    return HTMLResponse(email_service.render_verification_page(account))


@router.delete(
    "/delete-account",
    response_model=Envelope[DeleteAccountData],
    responses={
        400: {"model": ErrorResponse, "description": "Password required"},
        401: {"model": ErrorResponse, "description": "Invalid password"},
    },
)
async def delete_account(
    account: CurrentAccount,
    auth: AuthServiceDep,
    request: DeleteAccountRequest | None = None,
) -> Envelope[DeleteAccountData]:
    """Soft-delete the caller's account.

    External-provider-only accounts need no password; local accounts must
    confirm theirs.
    """
    account_type = await auth.delete_account(account.id, request.password if request else None)
    return Envelope(
        message="Account deleted successfully",
        data=DeleteAccountData(account_type=account_type),
    )


@router.get("/account-type", response_model=Envelope[AccountTypeData])
async def account_type(account: CurrentAccount, auth: AuthServiceDep) -> Envelope[AccountTypeData]:
    info = auth.account_type(account)
    return Envelope(
        data=AccountTypeData(
            account_type=info["account_type"],
            oauth_providers=[
                OAuthBindingResponse(
                    provider=binding.provider.value,
                    provider_id=binding.provider_id,
                    created_at=binding.created_at,
                )
                for binding in info["oauth_providers"]
            ],
            requires_password_for_deletion=info["requires_password_for_deletion"],
        )
    )

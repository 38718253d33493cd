"""FastAPI dependencies for authentication and service wiring.

Provides the bearer-token dependency and factories for the services used by
the routes. Tests replace the email service and storage through
``app.dependency_overrides``.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from brevity.core.exceptions import ForbiddenError, NotFoundError, UnauthorizedError
from brevity.core.logging import get_logger
from brevity.domain.entities.account import Account
from brevity.domain.services.auth_service import AuthService
from brevity.domain.services.password_reset_service import PasswordResetService
from brevity.infrastructure.auth import JWTError, TokenExpiredError, jwt_service
from brevity.infrastructure.persistence.database import get_db_session
from brevity.infrastructure.persistence.repositories import (
    AccountRepository,
    RefreshTokenRepository,
)
from brevity.infrastructure.services.email_service import EmailService
from brevity.infrastructure.storage import ProfileImageStorage

logger = get_logger(__name__)


@lru_cache
def get_email_service() -> EmailService:
    """Settings-configured email service, shared across requests."""
    return EmailService.from_settings()


@lru_cache
def get_profile_image_storage() -> ProfileImageStorage:
    return ProfileImageStorage()


def get_auth_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
) -> AuthService:
    return AuthService.for_session(session, email_service)


def get_password_reset_service(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    email_service: Annotated[EmailService, Depends(get_email_service)],
) -> PasswordResetService:
    return PasswordResetService(
        session=session,
        account_repo=AccountRepository(session),
        refresh_token_repo=RefreshTokenRepository(session),
        email_service=email_service,
    )


async def get_current_account(
    session: Annotated[AsyncSession, Depends(get_db_session)],
    authorization: Annotated[str | None, Header()] = None,
) -> Account:
    """Resolve the account behind the ``Authorization: Bearer`` header.

    Returns:
        Account: The authenticated account.

    Raises:
        UnauthorizedError: If the header is missing or the token is invalid
            or expired.
        NotFoundError: If the account no longer exists.
        ForbiddenError: If the account has been deleted.
    """
    if authorization is None:
        logger.info("Authentication failed: missing Authorization header")
        raise UnauthorizedError("Missing Authorization header")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        logger.info("Authentication failed: invalid Authorization header format")
        raise UnauthorizedError("Invalid Authorization header")

    try:
        payload = jwt_service.validate_access_token(parts[1])
    except TokenExpiredError:
        logger.info("Authentication failed: token expired")
        raise UnauthorizedError("Token has expired")
    except JWTError as e:
        logger.info("Authentication failed: invalid token", error=str(e))
        raise UnauthorizedError("Invalid token")

    account = await AccountRepository(session).find_by_id(payload["account_id"])
    if account is None:
        raise NotFoundError()
    if account.is_deleted():
        raise ForbiddenError()
    return account


CurrentAccount = Annotated[Account, Depends(get_current_account)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
PasswordResetServiceDep = Annotated[PasswordResetService, Depends(get_password_reset_service)]
EmailServiceDep = Annotated[EmailService, Depends(get_email_service)]
ProfileImageStorageDep = Annotated[ProfileImageStorage, Depends(get_profile_image_storage)]

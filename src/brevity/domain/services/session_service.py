"""Session service: access tokens and the refresh token ledger.

An access token is a short-lived JWT. A refresh token is an opaque random
string whose SHA-256 hash is appended to the owner's ledger; presenting it
later proves the session is still live. Expired ledger entries are rejected
when used but are not purged in the background.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from brevity.core.config import Settings, get_settings
from brevity.core.exceptions import AccountSuspendedError, ForbiddenError, UnauthorizedError
from brevity.core.logging import get_logger
from brevity.domain.entities.account import Account, RefreshTokenEntry
from brevity.infrastructure.auth.jwt_service import JWTService, jwt_service
from brevity.infrastructure.persistence.repositories.account_repository import AccountRepository
from brevity.infrastructure.persistence.repositories.refresh_token_repository import (
    RefreshTokenRepository,
)
from brevity.infrastructure.services.token_service import token_service

logger = get_logger(__name__)

INVALID_REFRESH_TOKEN = "Invalid or expired refresh token"


@dataclass(frozen=True)
class TokenPair:
    """Access/refresh token pair handed to the client."""

    access_token: str
    refresh_token: str
    expires_in: int


class SessionService:
    """Issues, validates, rotates and revokes session tokens."""

    def __init__(
        self,
        account_repo: AccountRepository,
        refresh_token_repo: RefreshTokenRepository,
        jwt: JWTService | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.account_repo = account_repo
        self.refresh_token_repo = refresh_token_repo
        self.jwt = jwt or jwt_service
        self.settings = settings or get_settings()

    @property
    def refresh_ttl(self) -> timedelta:
        return timedelta(days=self.settings.refresh_token_expire_days)

    async def issue(self, account: Account, now: datetime | None = None) -> TokenPair:
        """Create a token pair and append the refresh token to the ledger."""
        access_token = self.jwt.create_access_token(account_id=account.id, email=account.email)
        refresh_token = token_service.generate_urlsafe_token(48)
        await self.refresh_token_repo.create(account.id, refresh_token, created_at=now)
        return TokenPair(
            access_token=access_token,
            refresh_token=refresh_token,
            expires_in=self.jwt.get_expires_in(),
        )

    async def revoke(self, account: Account, refresh_token: str) -> bool:
        """Remove one refresh token from the account's ledger.

        Returns:
            True if the token was in the ledger.
        """
        removed = await self.refresh_token_repo.delete_by_token(account.id, refresh_token)
        if not removed:
            logger.info("Refresh token not in ledger", account_id=account.id)
        return removed

    async def revoke_all(self, account: Account) -> int:
        """Clear the account's ledger, signing it out everywhere."""
        count = await self.refresh_token_repo.delete_all_for_account(account.id)
        logger.info("Refresh tokens revoked", account_id=account.id, count=count)
        return count

    async def validate(self, refresh_token: str, now: datetime | None = None) -> RefreshTokenEntry:
        """Look up a refresh token and check that it has not expired.

        Raises:
            UnauthorizedError: If the token is unknown or expired.
        """
        now = now or datetime.now(timezone.utc)
        entry = await self.refresh_token_repo.get_by_token(refresh_token)
        if entry is None:
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)
        if entry.is_expired(self.refresh_ttl, now):
            logger.info("Refresh token expired", account_id=entry.account_id)
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)
        return entry

    async def rotate(
        self, refresh_token: str, now: datetime | None = None
    ) -> tuple[Account, TokenPair]:
        """Exchange a refresh token for a new pair.

        The presented token is removed from the ledger, so it can be used
        only once.

        Raises:
            UnauthorizedError: If the token is unknown or expired, or the
                account may no longer log in.
            ForbiddenError: If the account has been deleted.
            AccountSuspendedError: If the account is suspended.
        """
        now = now or datetime.now(timezone.utc)
        entry = await self.validate(refresh_token, now)
        account = await self.account_repo.find_by_id(entry.account_id)
        if account is None or account.is_deleted():
            raise ForbiddenError()
        if account.is_suspended():
            raise AccountSuspendedError()
        if not account.can_login(now):
            raise UnauthorizedError(INVALID_REFRESH_TOKEN)

        await self.refresh_token_repo.delete_by_id(entry.id)
        pair = await self.issue(account, now)
        logger.info("Refresh token rotated", account_id=account.id)
        return account, pair

    async def list_entries(self, account: Account) -> list[RefreshTokenEntry]:
        return await self.refresh_token_repo.list_for_account(account.id)

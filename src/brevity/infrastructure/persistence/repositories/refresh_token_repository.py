"""Refresh token ledger repository.

Tokens are never stored in clear: every lookup hashes the presented token
first and matches on the digest.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from brevity.domain.entities.account import RefreshTokenEntry
from brevity.infrastructure.persistence.models import RefreshTokenModel
from brevity.infrastructure.services.token_service import token_service


def hash_token(token: str) -> str:
    """SHA-256 hex digest of a refresh token."""
    return token_service.fingerprint(token)


class RefreshTokenRepository:
    """Repository for the per-account refresh token ledger."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @staticmethod
    def _to_entity(model: RefreshTokenModel) -> RefreshTokenEntry:
        created_at = model.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        return RefreshTokenEntry(
            id=model.id,
            account_id=model.account_id,
            token_hash=model.token_hash,
            created_at=created_at,
        )

    async def create(
        self, account_id: str, token: str, created_at: datetime | None = None
    ) -> RefreshTokenEntry:
        """Append a token to the account's ledger.

        Args:
            account_id: Owner of the token.
            token: Raw refresh token; only its hash is persisted.
            created_at: Issue time, defaults to now.

        Returns:
            The stored ledger entry.
        """
        model = RefreshTokenModel(
            id=str(uuid.uuid4()),
            account_id=account_id,
            token_hash=hash_token(token),
            created_at=created_at or datetime.now(timezone.utc),
        )
        self.session.add(model)
        await self.session.flush()
        return self._to_entity(model)

    async def get_by_token(self, token: str) -> RefreshTokenEntry | None:
        result = await self.session.execute(
            select(RefreshTokenModel).where(RefreshTokenModel.token_hash == hash_token(token))
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model) if model else None

    async def delete_by_token(self, account_id: str, token: str) -> bool:
        """Remove one token from the account's ledger.

        Returns:
            True if a matching entry was removed.
        """
        result = await self.session.execute(
            delete(RefreshTokenModel)
            .where(
                RefreshTokenModel.account_id == account_id,
                RefreshTokenModel.token_hash == hash_token(token),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def delete_by_id(self, entry_id: str) -> bool:
        result = await self.session.execute(
            delete(RefreshTokenModel)
            .where(RefreshTokenModel.id == entry_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def delete_all_for_account(self, account_id: str) -> int:
        """Remove every token of an account.

        Returns:
            Number of entries removed.
        """
        result = await self.session.execute(
            delete(RefreshTokenModel)
            .where(RefreshTokenModel.account_id == account_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def list_for_account(self, account_id: str) -> list[RefreshTokenEntry]:
        result = await self.session.execute(
            select(RefreshTokenModel)
            .where(RefreshTokenModel.account_id == account_id)
            .order_by(RefreshTokenModel.created_at)
        )
        return [self._to_entity(model) for model in result.scalars().all()]

    async def count_for_account(self, account_id: str) -> int:
        result = await self.session.execute(
            select(func.count())
            .select_from(RefreshTokenModel)
            .where(RefreshTokenModel.account_id == account_id)
        )
        return result.scalar_one()

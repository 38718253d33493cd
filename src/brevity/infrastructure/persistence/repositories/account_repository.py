"""Account repository: the credential store.

Every mutating method is a single ``UPDATE ... WHERE id = ?`` that touches only
the columns of its own field group, so concurrent requests for the same
account cannot clobber unrelated fields. Reads always repopulate from the
database, and the password hash is only loaded when explicitly requested.
"""

from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import and_, case, delete, literal, or_, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import undefer

from brevity.core.exceptions import DuplicateEmailError, NotFoundError, ValidationError
from brevity.domain.entities.account import (
    Account,
    AccountStatus,
    OAuthBinding,
    OAuthProvider,
    ProfileImage,
)
from brevity.domain.services.account_validator import normalize_email
from brevity.domain.services.lockout_policy import FailedLoginOutcome
from brevity.infrastructure.persistence.models import (
    AccountModel,
    OAuthBindingModel,
    RefreshTokenModel,
)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class AccountRepository:
    """Repository for account database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self.session = session

    @staticmethod
    def _to_entity(model: AccountModel, include_password: bool = False) -> Account:
        """Convert infrastructure model to domain entity."""
        profile_image = None
        if model.profile_image_url and model.profile_image_public_id:
            profile_image = ProfileImage(
                url=model.profile_image_url,
                public_id=model.profile_image_public_id,
            )

        return Account(
            id=model.id,
            email=model.email,
            display_name=model.display_name,
            password_hash=model.password_hash if include_password else None,
            has_password=bool(model.has_password),
            oauth_providers=[
                OAuthBinding(
                    provider=OAuthProvider(binding.provider),
                    provider_id=binding.provider_id,
                    created_at=_as_utc(binding.created_at),
                )
                for binding in model.oauth_providers
            ],
            profile_image=profile_image,
            status=AccountStatus(model.status),
            status_changed_at=_as_utc(model.status_changed_at),
            status_changed_by=model.status_changed_by,
            email_verified=model.email_verified,
            verification_token=model.verification_token,
            reset_token_hash=model.reset_token_hash,
            reset_token_expiry=_as_utc(model.reset_token_expiry),
            failed_login_count=model.failed_login_count,
            locked_until=_as_utc(model.locked_until),
            last_login_at=_as_utc(model.last_login_at),
            created_at=_as_utc(model.created_at),
            updated_at=_as_utc(model.updated_at),
        )

    @staticmethod
    def _select(include_password: bool):
        stmt = select(AccountModel).execution_options(populate_existing=True)
        if include_password:
            stmt = stmt.options(undefer(AccountModel.password_hash))
        return stmt

    async def find_by_id(
        self, account_id: str, include_password: bool = False
    ) -> Account | None:
        """Get an account by ID.

        Args:
            account_id: Account ID (UUID string).
            include_password: Also load the password hash.

        Returns:
            Account if found, None otherwise.
        """
        result = await self.session.execute(
            self._select(include_password).where(AccountModel.id == account_id)
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model, include_password) if model else None

    async def find_by_email(
        self, email: str, include_password: bool = False
    ) -> Account | None:
        """Get an account by email (normalized before lookup)."""
        result = await self.session.execute(
            self._select(include_password).where(AccountModel.email == normalize_email(email))
        )
        model = result.scalar_one_or_none()
        return self._to_entity(model, include_password) if model else None

    async def get_by_id(self, account_id: str, include_password: bool = False) -> Account:
        """Get an account by ID.

        Raises:
            NotFoundError: If no account has this ID.
        """
        account = await self.find_by_id(account_id, include_password)
        if account is None:
            raise NotFoundError()
        return account

    async def get_by_email(self, email: str, include_password: bool = False) -> Account:
        """Get an account by email.

        Raises:
            NotFoundError: If no account has this email.
        """
        account = await self.find_by_email(email, include_password)
        if account is None:
            raise NotFoundError("User not found with this email")
        return account

    async def email_exists(self, email: str) -> bool:
        result = await self.session.execute(
            select(AccountModel.id).where(AccountModel.email == normalize_email(email)).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def create(self, account: Account, password_hash: str | None = None) -> Account:
        """Create a new account.

        Args:
            account: Account to create.
            password_hash: Digest to store; defaults to ``account.password_hash``.

        Returns:
            The created account, as read back from the store.

        Raises:
            DuplicateEmailError: If the email is already registered.
        """
        email = normalize_email(account.email)
        if await self.email_exists(email):
            raise DuplicateEmailError()

        model = AccountModel(
            id=account.id,
            email=email,
            display_name=account.display_name.strip(),
            password_hash=password_hash or account.password_hash,
            profile_image_url=account.profile_image.url if account.profile_image else None,
            profile_image_public_id=(
                account.profile_image.public_id if account.profile_image else None
            ),
            status=account.status,
            status_changed_at=account.status_changed_at,
            status_changed_by=account.status_changed_by,
            email_verified=account.email_verified,
            verification_token=account.verification_token,
            failed_login_count=0,
            last_login_at=account.last_login_at,
            created_at=account.created_at,
            updated_at=account.updated_at,
        )
        model.oauth_providers = [
            OAuthBindingModel(
                provider=binding.provider.value,
                provider_id=binding.provider_id,
                created_at=binding.created_at,
            )
            for binding in account.oauth_providers
        ]
        self.session.add(model)
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            if await self.email_exists(email):
                raise DuplicateEmailError() from e
            raise ValidationError(
                "External provider identity is already linked to another account"
            ) from e

        return await self.get_by_id(model.id)

    async def update(self, account_id: str, **fields: Any) -> Account:
        """Apply a partial field patch.

        Args:
            account_id: ID of the account to update.
            **fields: Column values to set.

        Returns:
            The updated account.

        Raises:
            NotFoundError: If no account has this ID.
        """
        if fields:
            fields.setdefault("updated_at", datetime.now(timezone.utc))
            result = await self.session.execute(
                update(AccountModel)
                .where(AccountModel.id == account_id)
                .values(**fields)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise NotFoundError()
        return await self.get_by_id(account_id)

    async def record_failed_login(
        self, account_id: str, outcome: FailedLoginOutcome
    ) -> FailedLoginOutcome:
        """Persist a failed login decided by the lockout policy.

        The counter is incremented on the database side and the lock is set
        in the same statement when the stored counter reaches the threshold,
        so overlapping failures read from stale snapshots are all counted
        and cannot skip the lock. Setting the lock is idempotent.

        Returns:
            The outcome as stored: ``attempts`` is the database counter and
            ``locked_until`` is set if the account is now locked.
        """
        values: dict[str, Any] = {"updated_at": outcome.now}
        if outcome.reset_stale_lock:
            values["failed_login_count"] = 1
            values["locked_until"] = None
            if outcome.status is not None:
                values["status"] = outcome.status
                values["status_changed_at"] = outcome.now
        else:
            attempts = AccountModel.failed_login_count + 1
            crosses = and_(
                attempts >= outcome.max_attempts,
                or_(
                    AccountModel.locked_until.is_(None),
                    AccountModel.locked_until <= outcome.now,
                ),
            )
            suspends = and_(crosses, AccountModel.status == AccountStatus.ACTIVE)
            values["failed_login_count"] = attempts
            values["locked_until"] = case(
                (crosses, literal(outcome.lock_expires_at, AccountModel.locked_until.type)),
                else_=AccountModel.locked_until,
            )
            values["status"] = case(
                (suspends, literal(AccountStatus.SUSPENDED, AccountModel.status.type)),
                else_=AccountModel.status,
            )
            values["status_changed_at"] = case(
                (suspends, literal(outcome.now, AccountModel.status_changed_at.type)),
                else_=AccountModel.status_changed_at,
            )

        await self.session.execute(
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

        result = await self.session.execute(
            select(AccountModel.failed_login_count, AccountModel.locked_until).where(
                AccountModel.id == account_id
            )
        )
        row = result.one()
        locked_until = _as_utc(row.locked_until)
        if locked_until is not None and locked_until <= outcome.now:
            locked_until = None
        return replace(outcome, attempts=row.failed_login_count, locked_until=locked_until)

    async def clear_failed_logins(self, account_id: str, patch: dict[str, Any]) -> None:
        """Reset the counter and lock, plus any status change in ``patch``.

        Args:
            account_id: Account to clear.
            patch: Lockout patch from ``LockoutPolicy.record_success`` or
                ``LockoutPolicy.release_stale_lock``.
        """
        values = {"failed_login_count": 0, "locked_until": None}
        values.update(
            {key: value for key, value in patch.items() if key in ("status", "status_changed_at")}
        )
        await self.session.execute(
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )

    async def set_verification_token_if_absent(self, account_id: str, token: str) -> str | None:
        """Store ``token`` unless the account already has one.

        Returns:
            The token now stored on the account (which may be an earlier
            one), or None if the account is already verified or missing.
        """
        await self.session.execute(
            update(AccountModel)
            .where(
                AccountModel.id == account_id,
                AccountModel.verification_token.is_(None),
                AccountModel.email_verified.is_(False),
            )
            .values(verification_token=token)
            .execution_options(synchronize_session=False)
        )
        result = await self.session.execute(
            select(AccountModel.verification_token).where(AccountModel.id == account_id)
        )
        return result.scalar_one_or_none()

    async def consume_verification_token(self, email: str, token: str) -> bool:
        """Mark the email verified if ``token`` still matches.

        The match and the clear happen in one statement, so a token can be
        consumed at most once. An inactive account is activated on the way.
        """
        now = datetime.now(timezone.utc)
        is_inactive = AccountModel.status == AccountStatus.INACTIVE
        result = await self.session.execute(
            update(AccountModel)
            .where(
                AccountModel.email == normalize_email(email),
                AccountModel.verification_token == token,
                AccountModel.status != AccountStatus.DELETED,
            )
            .values(
                email_verified=True,
                verification_token=None,
                status=case(
                    (is_inactive, literal(AccountStatus.ACTIVE, AccountModel.status.type)),
                    else_=AccountModel.status,
                ),
                status_changed_at=case(
                    (is_inactive, literal(now, AccountModel.status_changed_at.type)),
                    else_=AccountModel.status_changed_at,
                ),
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def set_reset_token(
        self, account_id: str, token_hash: str, expires_at: datetime
    ) -> None:
        """Store the hash and expiry of a new reset code, replacing any earlier one."""
        await self.update(account_id, reset_token_hash=token_hash, reset_token_expiry=expires_at)

    async def consume_reset_token(
        self, account_id: str, token_hash: str, new_password_hash: str
    ) -> bool:
        """Set a new password if the reset code hash is still the stored one.

        Clears the reset fields in the same statement.
        """
        result = await self.session.execute(
            update(AccountModel)
            .where(
                AccountModel.id == account_id,
                AccountModel.reset_token_hash == token_hash,
            )
            .values(
                password_hash=new_password_hash,
                reset_token_hash=None,
                reset_token_expiry=None,
                updated_at=datetime.now(timezone.utc),
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def update_last_login(self, account_id: str, now: datetime | None = None) -> None:
        """Update the last_login_at timestamp for an account."""
        await self.session.execute(
            update(AccountModel)
            .where(AccountModel.id == account_id)
            .values(last_login_at=now or datetime.now(timezone.utc))
            .execution_options(synchronize_session=False)
        )

    async def add_oauth_binding(self, account_id: str, binding: OAuthBinding) -> Account:
        """Bind an external provider identity to an existing account.

        Raises:
            ValidationError: If the identity is already bound to an account.
        """
        self.session.add(
            OAuthBindingModel(
                account_id=account_id,
                provider=binding.provider.value,
                provider_id=binding.provider_id,
                created_at=binding.created_at,
            )
        )
        try:
            await self.session.flush()
        except IntegrityError as e:
            await self.session.rollback()
            raise ValidationError(
                "External provider identity is already linked to another account"
            ) from e
        return await self.get_by_id(account_id)

    async def purge(self, account_id: str) -> bool:
        """Physically remove an account.

        Only for development cleanup; the application itself soft-deletes.
        Bindings and ledger entries are removed first, since SQLite does not
        enforce foreign-key cascades by default.
        """
        for model in (OAuthBindingModel, RefreshTokenModel):
            await self.session.execute(
                delete(model)
                .where(model.account_id == account_id)
                .execution_options(synchronize_session=False)
            )
        result = await self.session.execute(
            delete(AccountModel)
            .where(AccountModel.id == account_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

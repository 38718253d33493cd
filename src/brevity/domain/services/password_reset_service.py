"""Service for password reset logic.

Handles code generation, sending reset emails, and resetting passwords.

A reset code is a short numeric code (6 digits by default) that is emailed
to the user. Only its argon2 hash is stored, together with an expiry. Issuing
a new code replaces the previous one.
"""

from datetime import datetime, timedelta, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from brevity.core.config import Settings, get_settings
from brevity.core.exceptions import (
    InternalError,
    InvalidOrExpiredTokenError,
    NotFoundError,
    ValidationError,
)
from brevity.core.logging import get_logger
from brevity.domain.entities.account import Account
from brevity.domain.services.account_validator import AccountValidator
from brevity.infrastructure.auth.password_hasher import SecretHasher, get_secret_hasher
from brevity.infrastructure.persistence.repositories.account_repository import AccountRepository
from brevity.infrastructure.persistence.repositories.refresh_token_repository import (
    RefreshTokenRepository,
)
from brevity.infrastructure.services.email_service import EmailService
from brevity.infrastructure.services.token_service import token_service

logger = get_logger(__name__)


class PasswordResetService:
    """Service for handling password reset business logic."""

    def __init__(
        self,
        session: AsyncSession,
        account_repo: AccountRepository,
        refresh_token_repo: RefreshTokenRepository,
        email_service: EmailService,
        hasher: SecretHasher | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the password reset service.

        Args:
            session: SQLAlchemy async session.
            account_repo: Repository for account operations.
            refresh_token_repo: Repository for refresh token operations.
            email_service: Service for sending emails.
            hasher: Hasher for reset codes and the new password.
            settings: Application settings.
        """
        self.session = session
        self.account_repo = account_repo
        self.refresh_token_repo = refresh_token_repo
        self.email_service = email_service
        self.hasher = hasher or get_secret_hasher()
        self.settings = settings or get_settings()
        self.validator = AccountValidator(password_min_length=self.settings.password_min_length)

    @property
    def code_ttl(self) -> timedelta:
        return timedelta(minutes=self.settings.password_reset_expire_minutes)

    async def _find_account(self, email: str) -> Account:
        account = await self.account_repo.find_by_email(email)
        if account is None or account.is_deleted():
            raise NotFoundError("User not found with this email")
        return account

    async def issue_reset_code(self, account: Account, now: datetime | None = None) -> str:
        """Generate a reset code and store its hash.

        Returns:
            The plain code, to be emailed and never stored.
        """
        now = now or datetime.now(timezone.utc)
        code = token_service.generate_numeric_code(self.settings.reset_code_digits)
        code_hash = await self.hasher.hash_async(code)
        expires_at = now + self.code_ttl
        await self.account_repo.set_reset_token(account.id, code_hash, expires_at)
        account.reset_token_hash = code_hash
        account.reset_token_expiry = expires_at
        return code

    async def consume_reset_code(
        self, account: Account, code: str, now: datetime | None = None
    ) -> bool:
        """Check a reset code against the account's stored hash and expiry.

        A wrong code and an expired one are reported identically.

        Raises:
            InvalidOrExpiredTokenError: If the code does not verify or has expired.
        """
        now = now or datetime.now(timezone.utc)
        if not await self.hasher.verify_async(code, account.reset_token_hash):
            raise InvalidOrExpiredTokenError()
        if not account.has_valid_reset_token(now):
            raise InvalidOrExpiredTokenError()
        return True

    async def send_reset_email(self, email: str | None) -> None:
        """Issue a reset code and email it.

        Raises:
            ValidationError: If no email was given.
            NotFoundError: If no live account has this email.
            InternalError: If the email could not be sent.
        """
        if not email:
            raise ValidationError("Email is required")

        account = await self._find_account(email)
        code = await self.issue_reset_code(account)
        await self.session.commit()

        logger.info("Sending password reset email", account_id=account.id)
        if not await self.email_service.send_password_reset_code(account, code):
            logger.error("Failed to send password reset email", account_id=account.id)
            raise InternalError("Failed to send password reset email")

    async def reset_password(
        self, email: str | None, code: str | None, new_password: str | None
    ) -> None:
        """Set a new password using a reset code.

        On success the reset code is spent, every refresh token of the
        account is revoked and a confirmation email is sent.

        Raises:
            ValidationError: If a field is missing or the password is too weak.
            NotFoundError: If no live account has this email.
            InvalidOrExpiredTokenError: If the code is wrong or expired.
        """
        if not email or not code or not new_password:
            raise ValidationError("Email, token, and new password are required")

        errors = self.validator.validate_password(new_password, field="new_password")
        if errors:
            raise ValidationError(errors[0].message, details=[e.to_dict() for e in errors])

        account = await self._find_account(email)
        await self.consume_reset_code(account, code)

        new_hash = await self.hasher.hash_async(new_password)
        # Conditional on the hash we verified, so a code cannot be used twice
        if not await self.account_repo.consume_reset_token(
            account.id, account.reset_token_hash, new_hash
        ):
            raise InvalidOrExpiredTokenError()

        revoked = await self.refresh_token_repo.delete_all_for_account(account.id)
        await self.session.commit()
        logger.info("Password reset", account_id=account.id, sessions_revoked=revoked)

        if not await self.email_service.send_password_reset_success(account):
            logger.warning("Password reset confirmation email not sent", account_id=account.id)

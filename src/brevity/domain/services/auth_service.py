"""Authentication service.

Orchestrates registration, login, logout, session refresh and account
deletion over the credential store, the lockout policy, the session ledger
and the email verification service. Each public operation commits once,
after every check has passed; failures leave the session uncommitted, except
that a failed login is always recorded.
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from brevity.core.config import Settings, get_settings
from brevity.core.exceptions import (
    AccountLockedError,
    AccountSuspendedError,
    DuplicateEmailError,
    ForbiddenError,
    InternalError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from brevity.core.logging import get_logger
from brevity.domain.entities.account import (
    Account,
    AccountStatus,
    OAuthBinding,
    OAuthProvider,
    ProfileImage,
)
from brevity.domain.services.account_state_machine import AccountStateMachine
from brevity.domain.services.account_validator import (
    AccountValidator,
    FieldValidationError,
    normalize_email,
)
from brevity.domain.services.email_verification_service import EmailVerificationService
from brevity.domain.services.lockout_policy import LockoutPolicy
from brevity.domain.services.session_service import SessionService, TokenPair
from brevity.infrastructure.auth.password_hasher import (
    SecretHasher,
    get_secret_hasher,
)
from brevity.infrastructure.persistence.repositories.account_repository import AccountRepository
from brevity.infrastructure.persistence.repositories.refresh_token_repository import (
    RefreshTokenRepository,
)
from brevity.infrastructure.services.email_service import EmailService

logger = get_logger(__name__)

VERIFY_EMAIL_MESSAGE = "Please verify your email to activate your account"
INACTIVE_MESSAGE = "Account is not active"


def _raise_validation(errors: list[FieldValidationError]) -> None:
    if errors:
        raise ValidationError(errors[0].message, details=[e.to_dict() for e in errors])


class AuthService:
    """Account lifecycle operations exposed by the auth API."""

    def __init__(
        self,
        session: AsyncSession,
        account_repo: AccountRepository,
        refresh_token_repo: RefreshTokenRepository,
        email_service: EmailService,
        hasher: SecretHasher | None = None,
        lockout: LockoutPolicy | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.session = session
        self.account_repo = account_repo
        self.refresh_token_repo = refresh_token_repo
        self.email_service = email_service
        self.settings = settings or get_settings()
        self.hasher = hasher or get_secret_hasher()
        self.lockout = lockout or LockoutPolicy.from_settings(self.settings)
        self.validator = AccountValidator(password_min_length=self.settings.password_min_length)
        self.sessions = SessionService(account_repo, refresh_token_repo, settings=self.settings)
        self.verification = EmailVerificationService(account_repo, email_service)

    @classmethod
    def for_session(cls, session: AsyncSession, email_service: EmailService) -> "AuthService":
        """Build the service with repositories bound to ``session``."""
        return cls(
            session=session,
            account_repo=AccountRepository(session),
            refresh_token_repo=RefreshTokenRepository(session),
            email_service=email_service,
        )

    async def register(
        self,
        display_name: str | None,
        email: str | None,
        password: str | None,
        profile_image: ProfileImage | None = None,
    ) -> tuple[Account, TokenPair]:
        """Create a local account and sign it in.

        The account starts inactive and unverified; a verification email is
        sent, and a failure to send it does not fail the registration.

        Raises:
            ValidationError: If a field is missing or invalid.
            DuplicateEmailError: If the email is already registered.
        """
        if password is None:
            password = ""
        _raise_validation(self.validator.validate_registration(display_name, email, password))

        email = normalize_email(email)
        if await self.account_repo.email_exists(email):
            logger.info("Registration failed: email exists")
            raise DuplicateEmailError()
        password_hash = await self.hasher.hash_async(password)

        account = await self.account_repo.create(
            Account(
                id=str(uuid.uuid4()),
                email=email,
                display_name=display_name.strip(),
                profile_image=profile_image,
                status=AccountStatus.INACTIVE,
                email_verified=False,
            ),
            password_hash=password_hash,
        )

        sent = await self.verification.send_verification_email(account)
        if not sent:
            logger.warning("Registered without verification email", account_id=account.id)

        now = datetime.now(timezone.utc)
        pair = await self.sessions.issue(account, now)
        await self.account_repo.update_last_login(account.id, now)
        await self.session.commit()

        account = await self.account_repo.get_by_id(account.id)
        logger.info("Account registered", account_id=account.id)
        return account, pair

    async def login(self, email: str | None, password: str | None) -> tuple[Account, TokenPair]:
        """Authenticate with email and password.

        Raises:
            ValidationError: If email or password is missing.
            UnauthorizedError: Unknown email, wrong password, unverified or
                inactive account.
            ForbiddenError: If the account has been deleted.
            AccountLockedError: If the account is locked, including by this
                attempt.
            AccountSuspendedError: If the account is suspended.
        """
        if not email or not password:
            raise ValidationError("Email and password are required")

        now = datetime.now(timezone.utc)
        account = await self.account_repo.find_by_email(email, include_password=True)
        if account is None:
            # Same work as a wrong password
            await self.hasher.verify_dummy_async(password)
            logger.info("Login failed: account not found")
            raise UnauthorizedError()

        released = self.lockout.release_stale_lock(account, now)
        if released is not None:
            await self.account_repo.clear_failed_logins(account.id, released)
            logger.info("Expired login lock released", account_id=account.id)

        self._check_can_login(account, now)

        if not account.has_password:
            await self.hasher.verify_dummy_async(password)
            logger.info("Login failed: account has no password", account_id=account.id)
            raise UnauthorizedError()

        if not await self.hasher.verify_async(password, account.password_hash):
            outcome = await self.account_repo.record_failed_login(
                account.id, self.lockout.record_failed_login(account, now)
            )
            await self.session.commit()
            if outcome.locked:
                logger.warning(
                    "Account locked after failed logins",
                    account_id=account.id,
                    attempts=outcome.attempts,
                )
                raise AccountLockedError()
            logger.info(
                "Login failed: invalid password",
                account_id=account.id,
                attempts=outcome.attempts,
            )
            raise UnauthorizedError()

        if account.failed_login_count > 0 or account.locked_until is not None:
            await self.account_repo.clear_failed_logins(
                account.id, self.lockout.record_success(account, now)
            )

        pair = await self.sessions.issue(account, now)
        await self.account_repo.update_last_login(account.id, now)
        if self.hasher.needs_rehash(account.password_hash):
            await self.account_repo.update(
                account.id, password_hash=await self.hasher.hash_async(password)
            )
            logger.info("Password hash upgraded", account_id=account.id)
        await self.session.commit()

        account = await self.account_repo.get_by_id(account.id)
        logger.info("Login successful", account_id=account.id)
        return account, pair

    @staticmethod
    def _check_can_login(account: Account, now: datetime) -> None:
        if account.is_deleted():
            logger.info("Login failed: account deleted", account_id=account.id)
            raise ForbiddenError()
        if account.is_locked(now):
            logger.info("Login failed: account locked", account_id=account.id)
            raise AccountLockedError()
        if account.is_suspended():
            logger.info("Login failed: account suspended", account_id=account.id)
            raise AccountSuspendedError()
        if not account.email_verified:
            logger.info("Login failed: email not verified", account_id=account.id)
            raise UnauthorizedError(VERIFY_EMAIL_MESSAGE)
        if account.is_inactive():
            logger.info("Login failed: account inactive", account_id=account.id)
            raise UnauthorizedError(INACTIVE_MESSAGE)

    async def logout(self, account: Account, refresh_token: str | None = None) -> None:
        """Revoke one refresh token, or all of them when none is given."""
        if refresh_token:
            await self.sessions.revoke(account, refresh_token)
        else:
            await self.sessions.revoke_all(account)
        await self.session.commit()
        logger.info("Logout", account_id=account.id, everywhere=not refresh_token)

    async def refresh(self, refresh_token: str | None) -> tuple[Account, TokenPair]:
        """Rotate a refresh token into a new token pair."""
        if not refresh_token:
            raise ValidationError("Refresh token is required")
        account, pair = await self.sessions.rotate(refresh_token)
        await self.session.commit()
        return account, pair

    async def verify_email(self, envelope: str | None) -> Account:
        if not envelope:
            raise ValidationError("Token is required for email verification")
        account = await self.verification.verify_email(envelope)
        await self.session.commit()
        return account

    async def resend_verification(self, email: str | None) -> None:
        """Send a fresh verification email.

        Raises:
            ValidationError: If no email was given or it is already verified.
            NotFoundError: If no live account has this email.
            InternalError: If the email could not be sent.
        """
        if not email:
            raise ValidationError("Email is required")
        account = await self.account_repo.find_by_email(email)
        if account is None or account.is_deleted():
            raise NotFoundError("User not found with this email")
        if account.email_verified:
            raise ValidationError("Email is already verified")

        if not await self.verification.send_verification_email(account, resend=True):
            raise InternalError("Failed to resend verification email")
        await self.session.commit()

    async def delete_account(self, account_id: str, password: str | None = None) -> str:
        """Soft-delete the caller's own account.

        Accounts that sign in only through an external provider are deleted
        without a password; local accounts must confirm theirs.

        Returns:
            ``"oauth"`` or ``"local"``.

        Raises:
            NotFoundError: If the account does not exist.
            ForbiddenError: If it is already deleted.
            ValidationError: If a local account gave no password.
            UnauthorizedError: If the password is wrong.
        """
        account = await self.account_repo.get_by_id(account_id, include_password=True)
        if account.is_deleted():
            raise ForbiddenError()

        account_type = "oauth" if account.is_oauth_only() else "local"
        if account_type == "local":
            if not password:
                raise ValidationError(
                    "Password is required for account deletion", account_type="local"
                )
            if not await self.hasher.verify_async(password, account.password_hash):
                logger.info("Account deletion refused: invalid password", account_id=account.id)
                raise UnauthorizedError("Invalid password")

        patch = AccountStateMachine.soft_delete(account, changed_by=account.id)
        await self.account_repo.update(account.id, **patch)
        await self.sessions.revoke_all(account)
        await self.session.commit()
        logger.info("Account deleted", account_id=account.id, account_type=account_type)
        return account_type

    @staticmethod
    def account_type(account: Account) -> dict[str, Any]:
        oauth_only = account.is_oauth_only()
        return {
            "account_type": "oauth" if oauth_only else "local",
            "oauth_providers": account.oauth_providers,
            "requires_password_for_deletion": not oauth_only,
        }

    async def create_oauth_account(
        self,
        display_name: str,
        email: str,
        provider: OAuthProvider | str,
        provider_id: str,
    ) -> Account:
        """Create an active, verified account bound to an external provider.

        Raises:
            ValidationError: If a field is invalid or the provider identity
                is already bound.
            DuplicateEmailError: If the email is already registered.
        """
        binding = OAuthBinding(provider=OAuthProvider(provider), provider_id=provider_id)
        _raise_validation(
            self.validator.validate_registration(display_name, email, None, [binding])
        )
        account = await self.account_repo.create(
            Account(
                id=str(uuid.uuid4()),
                email=normalize_email(email),
                display_name=display_name.strip(),
                oauth_providers=[binding],
                status=AccountStatus.ACTIVE,
                email_verified=True,
            )
        )
        await self.session.commit()
        logger.info("External provider account created", account_id=account.id)
        return account

    async def link_oauth_provider(
        self, email: str, provider: OAuthProvider | str, provider_id: str
    ) -> Account:
        """Bind an external provider identity to an existing account.

        Raises:
            NotFoundError: If no account has this email.
            ForbiddenError: If the account has been deleted.
            ValidationError: If the provider id is blank or already bound.
        """
        if not provider_id or not provider_id.strip():
            raise ValidationError("Provider id is required")
        account = await self.account_repo.get_by_email(email)
        if account.is_deleted():
            raise ForbiddenError()

        binding = OAuthBinding(provider=OAuthProvider(provider), provider_id=provider_id.strip())
        account = await self.account_repo.add_oauth_binding(account.id, binding)
        await self.session.commit()
        logger.info(
            "External provider linked",
            account_id=account.id,
            provider=binding.provider.value,
        )
        return account

    async def change_status(
        self,
        account_id: str,
        status: AccountStatus | str,
        changed_by: str | None = None,
    ) -> Account:
        """Apply an administrative status change.

        Reactivating clears any login lock; deleting revokes every session.

        Raises:
            NotFoundError: If the account does not exist.
            InvalidStatusTransitionError: If the transition is not allowed.
        """
        account = await self.account_repo.get_by_id(account_id)
        target = AccountStatus(status)
        patch = AccountStateMachine.transition(account, target, changed_by=changed_by)
        if not patch:
            return account

        if target == AccountStatus.ACTIVE:
            patch.update({"failed_login_count": 0, "locked_until": None})
        await self.account_repo.update(account.id, **patch)
        if target == AccountStatus.DELETED:
            await self.sessions.revoke_all(account)
        await self.session.commit()
        logger.info("Account status changed", account_id=account.id, status=target.value)
        return await self.account_repo.get_by_id(account.id)

"""Account entity: identity and security state.

An account holds a local password, one or more external-provider bindings,
or both. Its status drives login eligibility; lock state, verification and
reset tokens live on the account itself while refresh tokens are kept in a
separate per-account ledger.
"""

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AccountStatus(str, Enum):
    """Lifecycle states of an account."""

    ACTIVE = "active"
    INACTIVE = "inactive"
    SUSPENDED = "suspended"
    DELETED = "deleted"


class OAuthProvider(str, Enum):
    """External identity providers an account can be bound to."""

    GOOGLE = "google"
    GITHUB = "github"
    FACEBOOK = "facebook"
    TWITTER = "twitter"


@dataclass
class OAuthBinding:
    """Link between an account and an external identity provider."""

    provider: OAuthProvider
    provider_id: str
    created_at: datetime = field(default_factory=utcnow)


@dataclass
class ProfileImage:
    """Uploaded profile image reference.

    Attributes:
        url: Where the stored image can be fetched from.
        public_id: Storage identifier, used to delete the image.
    """

    url: str
    public_id: str


@dataclass
class RefreshTokenEntry:
    """One entry of an account's refresh token ledger.

    Only the SHA-256 hash of the token is kept; expiry is decided at use
    time from ``created_at`` and the configured time-to-live.
    """

    id: str
    account_id: str
    token_hash: str
    created_at: datetime

    def is_expired(self, ttl: timedelta, now: datetime | None = None) -> bool:
        now = now or utcnow()
        return now >= self.created_at + ttl


@dataclass
class Account:
    """Account entity.

    Attributes:
        id: Unique identifier (UUID string), immutable.
        email: Normalized (trimmed, lower-cased) unique email.
        display_name: Name shown to other users (max 50 chars).
        password_hash: Argon2 digest. ``None`` when the account has no local
            password or when the password was not requested from the store.
        has_password: Whether a local password exists, independent of whether
            the digest itself was loaded.
        oauth_providers: External provider bindings.
        status: Lifecycle state.
        status_changed_at: When the status last changed.
        status_changed_by: Who changed it (account ID), if known.
        email_verified: Whether the email address has been confirmed.
        verification_token: Single-use token, present only while unverified.
        reset_token_hash: Hash of the active password reset code.
        reset_token_expiry: When the reset code stops being valid.
        failed_login_count: Consecutive failed logins.
        locked_until: Lock expiry; the account is locked while now < locked_until.
        last_login_at: Timestamp of the last successful login.
    """

    id: str
    email: str
    display_name: str
    password_hash: str | None = None
    has_password: bool = False
    oauth_providers: list[OAuthBinding] = field(default_factory=list)
    profile_image: ProfileImage | None = None
    status: AccountStatus = AccountStatus.INACTIVE
    status_changed_at: datetime = field(default_factory=utcnow)
    status_changed_by: str | None = None
    email_verified: bool = False
    verification_token: str | None = None
    reset_token_hash: str | None = None
    reset_token_expiry: datetime | None = None
    failed_login_count: int = 0
    locked_until: datetime | None = None
    last_login_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        if self.password_hash is not None:
            self.has_password = True
        if self.failed_login_count < 0:
            raise ValueError("failed_login_count cannot be negative")

    def is_locked(self, now: datetime | None = None) -> bool:
        """Check whether a login lock is currently in force."""
        now = now or utcnow()
        return self.locked_until is not None and now < self.locked_until

    def has_stale_lock(self, now: datetime | None = None) -> bool:
        """Check whether a lock is recorded but has already expired."""
        now = now or utcnow()
        return self.locked_until is not None and self.locked_until <= now

    def is_suspended_by_lockout(self) -> bool:
        # Explicit suspensions never record a lock
        return self.status == AccountStatus.SUSPENDED and self.locked_until is not None

    def is_active(self) -> bool:
        return self.status == AccountStatus.ACTIVE

    def is_inactive(self) -> bool:
        return self.status == AccountStatus.INACTIVE

    def is_suspended(self) -> bool:
        return self.status == AccountStatus.SUSPENDED

    def is_deleted(self) -> bool:
        return self.status == AccountStatus.DELETED

    def can_login(self, now: datetime | None = None) -> bool:
        """Login requires an active, verified and unlocked account."""
        return self.is_active() and self.email_verified and not self.is_locked(now)

    def is_oauth_only(self) -> bool:
        """Account authenticates only through external providers."""
        return bool(self.oauth_providers) and not self.has_password

    def has_valid_reset_token(self, now: datetime | None = None) -> bool:
        now = now or utcnow()
        return (
            self.reset_token_hash is not None
            and self.reset_token_expiry is not None
            and now < self.reset_token_expiry
        )

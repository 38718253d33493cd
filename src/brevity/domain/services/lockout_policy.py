"""Login lockout policy.

Counts consecutive failed logins, locks and suspends the account once the
threshold is reached, and lifts the lockout on success or once the lock has
expired. The policy only decides; persisting its decisions is left to the
credential store, which applies each one as a single atomic update and
checks the threshold against the stored counter, not the one read here.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from brevity.core.config import Settings, get_settings
from brevity.domain.entities.account import Account, AccountStatus


@dataclass(frozen=True)
class FailedLoginOutcome:
    """Result of recording one failed login.

    Attributes:
        reset_stale_lock: An expired lock was found and cleared; the counter
            restarts at 1 instead of being incremented.
        attempts: Counter value after this failure.
        locked_until: Set when the account is locked after this failure.
        status: New status, when this failure changed it.
        now: Time the failure was recorded.
        max_attempts: Threshold the stored counter is checked against.
        lock_expires_at: Lock expiry applied if the stored counter reaches
            ``max_attempts``.
    """

    reset_stale_lock: bool
    attempts: int
    locked_until: datetime | None
    status: AccountStatus | None
    now: datetime
    max_attempts: int
    lock_expires_at: datetime

    @property
    def locked(self) -> bool:
        return self.locked_until is not None


class LockoutPolicy:
    """Failed-login counting and temporary account lockout."""

    def __init__(
        self,
        max_attempts: int = 5,
        lock_duration: timedelta = timedelta(minutes=30),
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.lock_duration = lock_duration

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "LockoutPolicy":
        settings = settings or get_settings()
        return cls(
            max_attempts=settings.max_login_attempts,
            lock_duration=timedelta(minutes=settings.lock_time_minutes),
        )

    def record_failed_login(
        self, account: Account, now: datetime | None = None
    ) -> FailedLoginOutcome:
        """Register a failed login against ``account``.

        A stale lock is treated as the start of a new series: the counter
        restarts at 1 and the lockout suspension is lifted. Otherwise the
        counter is incremented, and reaching ``max_attempts`` on an unlocked
        account locks it for ``lock_duration`` and suspends it.
        """
        now = now or datetime.now(timezone.utc)

        if account.has_stale_lock(now):
            lifted = self._lift_lockout(account, now)
            account.failed_login_count = 1
            return FailedLoginOutcome(
                reset_stale_lock=True,
                attempts=1,
                locked_until=None,
                status=lifted.get("status"),
                now=now,
                max_attempts=self.max_attempts,
                lock_expires_at=now + self.lock_duration,
            )

        attempts = account.failed_login_count + 1
        account.failed_login_count = attempts
        locked_until = None
        status = None
        if attempts >= self.max_attempts and not account.is_locked(now):
            locked_until = now + self.lock_duration
            status = AccountStatus.SUSPENDED
            account.locked_until = locked_until
            account.status = status
            account.status_changed_at = now

        return FailedLoginOutcome(
            reset_stale_lock=False,
            attempts=attempts,
            locked_until=locked_until,
            status=status,
            now=now,
            max_attempts=self.max_attempts,
            lock_expires_at=now + self.lock_duration,
        )

    def record_success(
        self, account: Account, now: datetime | None = None
    ) -> dict[str, Any]:
        """Clear the counter and lock after a successful login.

        Returns:
            Field patch for the store.
        """
        now = now or datetime.now(timezone.utc)
        patch = self._lift_lockout(account, now)
        account.failed_login_count = 0
        patch.update({"failed_login_count": 0, "locked_until": None})
        return patch

    def release_stale_lock(
        self, account: Account, now: datetime | None = None
    ) -> dict[str, Any] | None:
        """Lift an expired lock so the account can be evaluated afresh.

        Returns:
            Field patch for the store, or ``None`` if there is no stale lock.
        """
        now = now or datetime.now(timezone.utc)
        if not account.has_stale_lock(now):
            return None
        patch = self._lift_lockout(account, now)
        account.failed_login_count = 0
        patch.update({"failed_login_count": 0, "locked_until": None})
        return patch

    @staticmethod
    def _lift_lockout(account: Account, now: datetime) -> dict[str, Any]:
        patch: dict[str, Any] = {}
        if account.is_suspended_by_lockout():
            account.status = AccountStatus.ACTIVE
            account.status_changed_at = now
            patch = {"status": AccountStatus.ACTIVE, "status_changed_at": now}
        account.locked_until = None
        return patch

"""Account status state machine.

Allowed transitions::

    inactive  -> active | deleted
    active    -> suspended | inactive | deleted
    suspended -> active | deleted
    deleted   -> (terminal)

Every transition stamps ``status_changed_at`` and, when an actor is known,
``status_changed_by``. The machine mutates the in-memory entity and returns
the field patch the credential store should persist.
"""

from datetime import datetime, timezone
from typing import Any

from brevity.core.exceptions import InvalidStatusTransitionError
from brevity.domain.entities.account import Account, AccountStatus

ALLOWED_TRANSITIONS: dict[AccountStatus, frozenset[AccountStatus]] = {
    AccountStatus.INACTIVE: frozenset({AccountStatus.ACTIVE, AccountStatus.DELETED}),
    AccountStatus.ACTIVE: frozenset(
        {AccountStatus.SUSPENDED, AccountStatus.INACTIVE, AccountStatus.DELETED}
    ),
    AccountStatus.SUSPENDED: frozenset({AccountStatus.ACTIVE, AccountStatus.DELETED}),
    AccountStatus.DELETED: frozenset(),
}


class AccountStateMachine:
    """Applies status transitions to accounts."""

    @staticmethod
    def can_transition(current: AccountStatus, target: AccountStatus) -> bool:
        """Check whether ``current -> target`` is permitted.

        Same-state requests are permitted except from ``deleted``.
        """
        if current == target:
            return current != AccountStatus.DELETED
        return target in ALLOWED_TRANSITIONS[current]

    @classmethod
    def transition(
        cls,
        account: Account,
        target: AccountStatus,
        changed_by: str | None = None,
        now: datetime | None = None,
    ) -> dict[str, Any]:
        """Move an account to ``target``.

        Args:
            account: Account to mutate.
            target: Desired status.
            changed_by: ID of the account performing the change.
            now: Timestamp to stamp; defaults to the current time.

        Returns:
            Field patch for the store. Empty when the account is already
            in ``target``.

        Raises:
            InvalidStatusTransitionError: If the transition is not allowed.
        """
        target = AccountStatus(target)
        if not cls.can_transition(account.status, target):
            raise InvalidStatusTransitionError(
                f"Cannot change account status from {account.status.value} to {target.value}",
                current=account.status.value,
                target=target.value,
            )
        if account.status == target:
            return {}

        now = now or datetime.now(timezone.utc)
        account.status = target
        account.status_changed_at = now
        patch: dict[str, Any] = {"status": target, "status_changed_at": now}
        if changed_by:
            account.status_changed_by = changed_by
            patch["status_changed_by"] = changed_by
        return patch

    @classmethod
    def activate(cls, account: Account, changed_by: str | None = None) -> dict[str, Any]:
        return cls.transition(account, AccountStatus.ACTIVE, changed_by)

    @classmethod
    def deactivate(cls, account: Account, changed_by: str | None = None) -> dict[str, Any]:
        return cls.transition(account, AccountStatus.INACTIVE, changed_by)

    @classmethod
    def suspend(cls, account: Account, changed_by: str | None = None) -> dict[str, Any]:
        return cls.transition(account, AccountStatus.SUSPENDED, changed_by)

    @classmethod
    def soft_delete(cls, account: Account, changed_by: str | None = None) -> dict[str, Any]:
        return cls.transition(account, AccountStatus.DELETED, changed_by)

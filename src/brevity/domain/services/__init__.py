"""Domain services for Brevity.

The services exported here contain business rules only and have no
dependencies on infrastructure. Services that orchestrate repositories and
providers are imported from their own modules.
"""

from brevity.domain.services.account_state_machine import (
    ALLOWED_TRANSITIONS,
    AccountStateMachine,
)
from brevity.domain.services.account_validator import (
    AccountValidator,
    FieldValidationError,
    normalize_email,
)
from brevity.domain.services.lockout_policy import FailedLoginOutcome, LockoutPolicy

__all__ = [
    "ALLOWED_TRANSITIONS",
    "AccountStateMachine",
    "AccountValidator",
    "FailedLoginOutcome",
    "FieldValidationError",
    "LockoutPolicy",
    "normalize_email",
]

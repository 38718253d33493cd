"""Domain entities for Brevity.

Entities are pure Python dataclasses that represent core business concepts.
They have no dependencies on infrastructure or external frameworks.
"""

from brevity.domain.entities.account import (
    Account,
    AccountStatus,
    OAuthBinding,
    OAuthProvider,
    ProfileImage,
    RefreshTokenEntry,
)

__all__ = [
    "Account",
    "AccountStatus",
    "OAuthBinding",
    "OAuthProvider",
    "ProfileImage",
    "RefreshTokenEntry",
]

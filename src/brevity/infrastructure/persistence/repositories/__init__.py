"""Persistence repositories for database operations."""

from brevity.infrastructure.persistence.repositories.account_repository import (
    AccountRepository,
)
from brevity.infrastructure.persistence.repositories.refresh_token_repository import (
    RefreshTokenRepository,
    hash_token,
)

__all__ = [
    "AccountRepository",
    "RefreshTokenRepository",
    "hash_token",
]

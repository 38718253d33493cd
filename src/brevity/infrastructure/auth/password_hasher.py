"""Password and reset-code hashing using Argon2.

Provides salted, cost-parameterised one-way hashing using the Argon2id
algorithm, the winner of the Password Hashing Competition and recommended by
OWASP. Secrets are never compared directly; verification goes through
argon2's own constant-time check.
"""

import asyncio
import secrets
from functools import cached_property, lru_cache

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from brevity.core.config import Settings, get_settings


class SecretHasher:
    """Hashes and verifies passwords and reset codes."""

    def __init__(
        self,
        time_cost: int = 3,
        memory_cost: int = 65536,
        parallelism: int = 4,
    ) -> None:
        """Initialize the hasher.

        Args:
            time_cost: Number of argon2 iterations.
            memory_cost: Memory usage in KiB.
            parallelism: Number of parallel lanes.
        """
        self._hasher = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
        )

    @classmethod
    def from_settings(cls, settings: Settings | None = None) -> "SecretHasher":
        settings = settings or get_settings()
        return cls(
            time_cost=settings.password_hash_time_cost,
            memory_cost=settings.password_hash_memory_cost,
            parallelism=settings.password_hash_parallelism,
        )

    def hash(self, secret: str) -> str:
        """Hash a secret.

        Example:
            >>> hasher = SecretHasher()
            >>> hasher.hash("password123").startswith("$argon2id$")
            True
        """
        return self._hasher.hash(secret)

    def verify(self, secret: str, digest: str | None) -> bool:
        """Verify a secret against a digest.

        A missing or malformed digest never verifies.

        Example:
            >>> hasher = SecretHasher()
            >>> digest = hasher.hash("password123")
            >>> hasher.verify("password123", digest)
            True
            >>> hasher.verify("wrong", digest)
            False
        """
        if not digest:
            return False
        try:
            return self._hasher.verify(digest, secret)
        except (VerificationError, InvalidHashError):
            return False

    def needs_rehash(self, digest: str) -> bool:
        """Check if a digest was produced with outdated parameters."""
        return self._hasher.check_needs_rehash(digest)

    async def hash_async(self, secret: str) -> str:
        """Hash in a worker thread so the event loop is not blocked."""
        return await asyncio.to_thread(self.hash, secret)

    @cached_property
    def dummy_hash(self) -> str:
        """Digest of a random secret, made with this hasher's parameters.

        Verified against when the email is unknown, so that lookups of
        missing accounts cost the same as a wrong password.
        """
        return self.hash(secrets.token_urlsafe(16))

    async def verify_async(self, secret: str, digest: str | None) -> bool:
        """Verify in a worker thread so the event loop is not blocked."""
        return await asyncio.to_thread(self.verify, secret, digest)

    async def verify_dummy_async(self, secret: str) -> bool:
        """Spend one verification on the dummy digest; never matches."""
        return await asyncio.to_thread(lambda: self.verify(secret, self.dummy_hash))


@lru_cache
def get_secret_hasher() -> SecretHasher:
    """Get the settings-configured hasher instance."""
    return SecretHasher.from_settings()

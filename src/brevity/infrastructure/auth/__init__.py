"""Authentication infrastructure components.

This module provides password hashing, JWT token services, and
other authentication-related utilities.
"""

from brevity.infrastructure.auth.jwt_service import (
    JWTError,
    JWTService,
    TokenDecodeError,
    TokenExpiredError,
    jwt_service,
)
from brevity.infrastructure.auth.password_hasher import (
    SecretHasher,
    get_secret_hasher,
)

__all__ = [
    "JWTError",
    "JWTService",
    "SecretHasher",
    "TokenDecodeError",
    "TokenExpiredError",
    "get_secret_hasher",
    "jwt_service",
]

"""Token generation service.

Provides cryptographically secure random values for verification tokens,
refresh tokens and numeric password reset codes.
"""

import hashlib
import secrets


class TokenService:
    """Service for generating secure random tokens."""

    @staticmethod
    def generate_token(length: int = 32) -> str:
        """Generate a cryptographically secure random token.

        Args:
            length: Number of bytes for the token. Default is 32 bytes (64 hex chars).

        Returns:
            Hexadecimal token string.
        """
        return secrets.token_hex(length)

    @staticmethod
    def generate_urlsafe_token(length: int = 48) -> str:
        """Generate a URL-safe cryptographically secure random token."""
        return secrets.token_urlsafe(length)

    @staticmethod
    def generate_numeric_code(digits: int = 6) -> str:
        """Generate a zero-padded numeric code, e.g. ``"004271"``."""
        return str(secrets.randbelow(10**digits)).zfill(digits)

    @staticmethod
    def fingerprint(token: str) -> str:
        """SHA-256 hex digest used to store high-entropy tokens at rest."""
        return hashlib.sha256(token.encode()).hexdigest()


# Default token service instance
token_service = TokenService()

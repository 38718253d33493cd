"""JWT token service.

Signs and validates the two kinds of JWT Brevity hands out: short-lived
access tokens and the email verification envelope that carries
``{email, token}`` inside the verification link.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from brevity.core.config import get_settings


class JWTError(Exception):
    """Base exception for JWT-related errors."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class TokenDecodeError(JWTError):
    """Raised when a token is malformed, tampered with, or of the wrong type."""

    pass


class JWTService:
    """Service for creating and validating JWT tokens."""

    ALGORITHM = "HS256"
    ISSUER = "brevity"

    ACCESS = "access"
    EMAIL_VERIFICATION = "email_verification"

    def __init__(self, secret_key: str | None = None) -> None:
        """Initialize the JWT service.

        Args:
            secret_key: Secret key for signing tokens. If not provided,
                        uses the configured secret key from settings.
        """
        self._secret_key = secret_key

    @property
    def secret_key(self) -> str:
        """Get the secret key for signing tokens."""
        if self._secret_key:
            return self._secret_key
        return get_settings().secret_key

    def _encode(self, payload: dict[str, Any], expires_delta: timedelta) -> str:
        now = datetime.now(timezone.utc)
        claims = {"iss": self.ISSUER, "iat": now, "exp": now + expires_delta, **payload}
        return jwt.encode(claims, self.secret_key, algorithm=self.ALGORITHM)

    def create_access_token(
        self,
        account_id: str,
        email: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create an access token.

        Args:
            account_id: The account's unique identifier.
            email: The account's email address.
            expires_delta: Custom expiration time. Defaults to config value.

        Returns:
            Encoded JWT access token.
        """
        if expires_delta is None:
            expires_delta = timedelta(minutes=get_settings().access_token_expire_minutes)
        return self._encode(
            {"sub": account_id, "account_id": account_id, "email": email, "type": self.ACCESS},
            expires_delta,
        )

    def create_verification_envelope(
        self,
        email: str,
        token: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Wrap a stored verification token for transport in an email link."""
        if expires_delta is None:
            expires_delta = timedelta(hours=get_settings().email_verification_expire_hours)
        return self._encode(
            {"email": email, "token": token, "type": self.EMAIL_VERIFICATION},
            expires_delta,
        )

    def decode_token(self, token: str) -> dict[str, Any]:
        """Decode and validate a JWT token.

        Raises:
            TokenExpiredError: If the token has expired.
            TokenDecodeError: If the token is invalid.
        """
        try:
            return jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.ALGORITHM],
                issuer=self.ISSUER,
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise TokenDecodeError("Invalid token") from e

    def validate_access_token(self, token: str) -> dict[str, Any]:
        """Decode a token and require it to be an access token."""
        payload = self.decode_token(token)
        if payload.get("type") != self.ACCESS:
            raise TokenDecodeError("Not an access token")
        return payload

    def decode_verification_envelope(self, envelope: str) -> tuple[str, str]:
        """Decode a verification envelope into ``(email, token)``.

        Raises:
            TokenExpiredError: If the envelope has expired.
            TokenDecodeError: If it is invalid or lacks its claims.
        """
        payload = self.decode_token(envelope)
        if payload.get("type") != self.EMAIL_VERIFICATION:
            raise TokenDecodeError("Not a verification token")
        email = payload.get("email")
        token = payload.get("token")
        if not email or not token:
            raise TokenDecodeError("Invalid token format")
        return email, token

    def get_expires_in(self, expires_delta: timedelta | None = None) -> int:
        """Get the access token lifetime in seconds."""
        if expires_delta is None:
            expires_delta = timedelta(minutes=get_settings().access_token_expire_minutes)
        return int(expires_delta.total_seconds())


# Default JWT service instance
jwt_service = JWTService()

"""Brevity - account lifecycle and authentication backend.

Registration, login with lockout, email verification, password reset,
refresh token sessions and soft deletion behind a JSON HTTP API.
"""

__version__ = "0.1.0"

from brevity.infrastructure.api.app import app

__all__ = ["app", "__version__"]

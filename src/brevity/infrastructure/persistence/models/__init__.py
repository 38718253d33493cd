"""SQLAlchemy models for Brevity.

All models inherit from the Base class defined in database.py and are
created on application startup outside production.
"""

from brevity.infrastructure.persistence.models.account import AccountModel
from brevity.infrastructure.persistence.models.oauth_binding import OAuthBindingModel
from brevity.infrastructure.persistence.models.refresh_token import RefreshTokenModel

__all__ = [
    "AccountModel",
    "OAuthBindingModel",
    "RefreshTokenModel",
]

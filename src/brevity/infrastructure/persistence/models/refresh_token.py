"""SQLAlchemy model for the refresh token ledger.

Each row is one issued refresh token. Only a SHA-256 hash of the token is
stored, indexed for lookup at use time.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, func
from sqlalchemy.orm import Mapped, mapped_column

from brevity.infrastructure.persistence.database import Base


class RefreshTokenModel(Base):
    """Refresh token ledger entry.

    Rows are appended on login and removed on logout; expiry is derived from
    ``created_at`` when the token is used.
    """

    __tablename__ = "refresh_tokens"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    token_hash: Mapped[str] = mapped_column(
        String(64),
        nullable=False,
        unique=True,
        index=True,
    )
    account_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"RefreshTokenModel(id={self.id!r}, account_id={self.account_id!r})"

"""SQLAlchemy model for external identity provider bindings."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from brevity.infrastructure.persistence.database import Base


class OAuthBindingModel(Base):
    """Binding of an account to an external provider identity.

    A provider identity can belong to one account only.
    """

    __tablename__ = "account_oauth_providers"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        default=lambda: str(uuid.uuid4()),
    )
    account_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("accounts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    provider: Mapped[str] = mapped_column(String(20), nullable=False)
    provider_id: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    account = relationship("AccountModel", back_populates="oauth_providers")

    __table_args__ = (
        UniqueConstraint("provider", "provider_id", name="uq_oauth_provider_identity"),
    )

    def __repr__(self) -> str:
        return f"OAuthBindingModel(provider={self.provider!r}, account_id={self.account_id!r})"

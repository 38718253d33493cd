"""SQLAlchemy model for the accounts table."""

from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum, Index, Integer, String, func
from sqlalchemy.orm import Mapped, column_property, mapped_column, relationship

from brevity.domain.entities.account import AccountStatus
from brevity.infrastructure.persistence.database import Base


class AccountModel(Base):
    """SQLAlchemy model for the accounts table.

    The password hash is deferred with raiseload: it is only ever read when a
    query explicitly undefers it, and touching it otherwise raises instead of
    silently issuing a lazy load.

    Attributes:
        id: Primary key (UUID string).
        email: Normalized email address, unique.
        display_name: Display name, at most 50 characters.
        password_hash: Argon2 digest, NULL for external-provider-only accounts.
        has_password: Computed ``password_hash IS NOT NULL``.
        status: Lifecycle state.
        failed_login_count: Consecutive failed logins.
        locked_until: Lock expiry timestamp.
    """

    __tablename__ = "accounts"

    id: Mapped[str] = mapped_column(
        String(36),
        primary_key=True,
        comment="Account ID (UUID)",
    )
    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        comment="Normalized email address",
    )
    display_name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    password_hash: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        deferred=True,
        deferred_raiseload=True,
        comment="Hashed password (argon2)",
    )
    has_password: Mapped[bool] = column_property(password_hash.is_not(None))

    profile_image_url: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    profile_image_public_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    status: Mapped[AccountStatus] = mapped_column(
        Enum(AccountStatus, native_enum=False, length=16, values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=AccountStatus.INACTIVE,
    )
    status_changed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    status_changed_by: Mapped[str | None] = mapped_column(String(36), nullable=True)

    email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verification_token: Mapped[str | None] = mapped_column(String(64), nullable=True)
    reset_token_hash: Mapped[str | None] = mapped_column(String(255), nullable=True)
    reset_token_expiry: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    failed_login_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    locked_until: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        comment="Timestamp of last successful login",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    oauth_providers: Mapped[list["OAuthBindingModel"]] = relationship(  # noqa: F821
        "OAuthBindingModel",
        back_populates="account",
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by="OAuthBindingModel.created_at",
    )

    __table_args__ = (
        Index("ix_accounts_verification_token", "verification_token"),
        Index("ix_accounts_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, email={self.email}, status={self.status})>"

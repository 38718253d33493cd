"""Pytest configuration for all tests."""

import os
import re
import tempfile
from typing import AsyncGenerator
from urllib.parse import unquote

# Settings are cached on first use, so the test environment must be in place
# before anything from brevity is imported
os.environ.setdefault("BREVITY_ENVIRONMENT", "testing")
os.environ.setdefault("BREVITY_SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("BREVITY_LOG_LEVEL", "WARNING")
os.environ.setdefault("BREVITY_PASSWORD_HASH_TIME_COST", "1")
os.environ.setdefault("BREVITY_PASSWORD_HASH_MEMORY_COST", "8")
os.environ.setdefault("BREVITY_PASSWORD_HASH_PARALLELISM", "1")
os.environ.setdefault("BREVITY_STORAGE_PATH", tempfile.mkdtemp(prefix="brevity-test-"))
os.environ.setdefault("BREVITY_DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from brevity.infrastructure.persistence import models  # noqa: F401
from brevity.infrastructure.persistence.database import Base
from brevity.infrastructure.services.email import EmailMessage, EmailProvider
from brevity.infrastructure.services.email_service import EmailService
from brevity.infrastructure.storage import ProfileImageStorage


class CapturingEmailProvider(EmailProvider):
    """Keeps sent messages in memory; can be switched to fail."""

    def __init__(self) -> None:
        self.messages: list[EmailMessage] = []
        self.fail = False

    async def send_email(self, message: EmailMessage) -> bool:
        if self.fail:
            raise OSError("Connection refused")
        self.messages.append(message)
        return True

    def last(self, subject: str | None = None, to: str | None = None) -> EmailMessage:
        for message in reversed(self.messages):
            if subject is not None and message.subject != subject:
                continue
            if to is not None and message.to != to:
                continue
            return message
        raise AssertionError(f"No email captured (subject={subject!r}, to={to!r})")


def extract_verification_envelope(message: EmailMessage) -> str:
    match = re.search(r"token=([\w.%-]+)", message.text_body)
    assert match, "verification link missing from email"
    return unquote(match.group(1))


def extract_reset_code(message: EmailMessage) -> str:
    match = re.search(r"\b(\d{6})\b", message.text_body)
    assert match, "reset code missing from email"
    return match.group(1)


@pytest_asyncio.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite engine with all tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    session_factory = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )

    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def email_provider() -> CapturingEmailProvider:
    return CapturingEmailProvider()


@pytest.fixture
def email_service(email_provider: CapturingEmailProvider) -> EmailService:
    return EmailService(email_provider)


@pytest.fixture
def profile_image_storage(tmp_path) -> ProfileImageStorage:
    from brevity.core.config import get_settings

    settings = get_settings().model_copy(update={"storage_path": str(tmp_path)})
    return ProfileImageStorage(settings)


@pytest_asyncio.fixture
async def client(
    db_session: AsyncSession,
    email_service: EmailService,
    profile_image_storage: ProfileImageStorage,
) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client with overridden database and email dependencies."""
    from brevity.infrastructure.api.app import app
    from brevity.infrastructure.api.dependencies import (
        get_email_service,
        get_profile_image_storage,
    )
    from brevity.infrastructure.persistence.database import get_db_session

    app.dependency_overrides[get_db_session] = lambda: db_session
    app.dependency_overrides[get_email_service] = lambda: email_service
    app.dependency_overrides[get_profile_image_storage] = lambda: profile_image_storage

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides = {}


@pytest.fixture
def envelope_from():
    """Pull the verification envelope out of a captured email."""
    return extract_verification_envelope


@pytest.fixture
def reset_code_from():
    """Pull the reset code out of a captured email."""
    return extract_reset_code

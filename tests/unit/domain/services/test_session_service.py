"""Unit tests for SessionService."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest

from brevity.core.config import get_settings
from brevity.core.exceptions import AccountSuspendedError, ForbiddenError, UnauthorizedError
from brevity.domain.entities.account import Account, AccountStatus, RefreshTokenEntry
from brevity.domain.services.session_service import SessionService
from brevity.infrastructure.auth.jwt_service import JWTService

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def mock_account_repo():
    return AsyncMock()


@pytest.fixture
def mock_refresh_token_repo():
    return AsyncMock()


@pytest.fixture
def jwt() -> JWTService:
    return JWTService(secret_key="unit-test-secret")


@pytest.fixture
def session_service(mock_account_repo, mock_refresh_token_repo, jwt):
    settings = get_settings().model_copy(update={"refresh_token_expire_days": 30})
    return SessionService(mock_account_repo, mock_refresh_token_repo, jwt=jwt, settings=settings)


def make_account(**overrides) -> Account:
    fields = {
        "id": "acc-1",
        "email": "jane@example.com",
        "display_name": "Jane",
        "status": AccountStatus.ACTIVE,
        "email_verified": True,
        "has_password": True,
    }
    fields.update(overrides)
    return Account(**fields)


def make_entry(created_at: datetime = NOW) -> RefreshTokenEntry:
    return RefreshTokenEntry(id="entry-1", account_id="acc-1", token_hash="h", created_at=created_at)


@pytest.mark.asyncio
async def test_issue_appends_to_ledger(session_service, mock_refresh_token_repo, jwt):
    pair = await session_service.issue(make_account(), NOW)

    mock_refresh_token_repo.create.assert_awaited_once_with("acc-1", pair.refresh_token, created_at=NOW)
    assert jwt.validate_access_token(pair.access_token)["account_id"] == "acc-1"
    assert pair.expires_in == jwt.get_expires_in()
    assert pair.refresh_token != pair.access_token


@pytest.mark.asyncio
async def test_issue_generates_distinct_refresh_tokens(session_service):
    first = await session_service.issue(make_account(), NOW)
    second = await session_service.issue(make_account(), NOW)

    assert first.refresh_token != second.refresh_token


@pytest.mark.asyncio
async def test_validate_unknown_token(session_service, mock_refresh_token_repo):
    mock_refresh_token_repo.get_by_token.return_value = None

    with pytest.raises(UnauthorizedError) as exc_info:
        await session_service.validate("nope", NOW)

    assert exc_info.value.message == "Invalid or expired refresh token"


@pytest.mark.asyncio
async def test_validate_expired_token(session_service, mock_refresh_token_repo):
    mock_refresh_token_repo.get_by_token.return_value = make_entry(NOW - timedelta(days=30))

    with pytest.raises(UnauthorizedError):
        await session_service.validate("old", NOW)


@pytest.mark.asyncio
async def test_validate_live_token(session_service, mock_refresh_token_repo):
    entry = make_entry(NOW - timedelta(days=29))
    mock_refresh_token_repo.get_by_token.return_value = entry

    assert await session_service.validate("live", NOW) is entry


@pytest.mark.asyncio
async def test_rotate_spends_old_token(session_service, mock_account_repo, mock_refresh_token_repo):
    mock_refresh_token_repo.get_by_token.return_value = make_entry()
    mock_account_repo.find_by_id.return_value = make_account()

    account, pair = await session_service.rotate("old", NOW)

    assert account.id == "acc-1"
    mock_refresh_token_repo.delete_by_id.assert_awaited_once_with("entry-1")
    mock_refresh_token_repo.create.assert_awaited_once_with("acc-1", pair.refresh_token, created_at=NOW)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "account,error",
    [
        (None, ForbiddenError),
        (make_account(status=AccountStatus.DELETED), ForbiddenError),
        (make_account(status=AccountStatus.SUSPENDED), AccountSuspendedError),
        (make_account(status=AccountStatus.INACTIVE), UnauthorizedError),
        (make_account(email_verified=False), UnauthorizedError),
        (make_account(locked_until=NOW + timedelta(minutes=5)), UnauthorizedError),
    ],
)
async def test_rotate_refused(
    session_service, mock_account_repo, mock_refresh_token_repo, account, error
):
    mock_refresh_token_repo.get_by_token.return_value = make_entry()
    mock_account_repo.find_by_id.return_value = account

    with pytest.raises(error):
        await session_service.rotate("old", NOW)

    mock_refresh_token_repo.delete_by_id.assert_not_awaited()
    mock_refresh_token_repo.create.assert_not_awaited()


@pytest.mark.asyncio
async def test_revoke(session_service, mock_refresh_token_repo):
    mock_refresh_token_repo.delete_by_token.return_value = False

    assert await session_service.revoke(make_account(), "unknown") is False
    mock_refresh_token_repo.delete_by_token.assert_awaited_once_with("acc-1", "unknown")


@pytest.mark.asyncio
async def test_revoke_all(session_service, mock_refresh_token_repo):
    mock_refresh_token_repo.delete_all_for_account.return_value = 3

    assert await session_service.revoke_all(make_account()) == 3


@pytest.mark.asyncio
async def test_list_entries(session_service, mock_refresh_token_repo):
    mock_refresh_token_repo.list_for_account.return_value = [make_entry()]

    entries = await session_service.list_entries(make_account())

    assert [entry.id for entry in entries] == ["entry-1"]

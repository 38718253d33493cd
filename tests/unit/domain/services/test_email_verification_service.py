"""Unit tests for EmailVerificationService."""

from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from brevity.core.exceptions import InvalidTokenError
from brevity.domain.entities.account import Account, AccountStatus
from brevity.domain.services.email_verification_service import EmailVerificationService
from brevity.infrastructure.auth.jwt_service import JWTService


@pytest.fixture
def mock_account_repo():
    return AsyncMock()


@pytest.fixture
def mock_email_service():
    service = AsyncMock()
    service.send_verification_email.return_value = True
    return service


@pytest.fixture
def jwt() -> JWTService:
    return JWTService(secret_key="unit-test-secret")


@pytest.fixture
def verification_service(mock_account_repo, mock_email_service, jwt):
    return EmailVerificationService(mock_account_repo, mock_email_service, jwt=jwt)


@pytest.fixture
def account() -> Account:
    return Account(id="acc-1", email="jane@example.com", display_name="Jane")


@pytest.mark.asyncio
async def test_issue_token_wraps_stored_token(verification_service, mock_account_repo, jwt, account):
    mock_account_repo.set_verification_token_if_absent.return_value = "stored-token"

    envelope = await verification_service.issue_token(account)

    assert jwt.decode_verification_envelope(envelope) == ("jane@example.com", "stored-token")
    assert account.verification_token == "stored-token"
    candidate = mock_account_repo.set_verification_token_if_absent.call_args[0][1]
    assert len(candidate) == 64


@pytest.mark.asyncio
async def test_issue_token_refused_when_verified(verification_service, mock_account_repo, account):
    mock_account_repo.set_verification_token_if_absent.return_value = None

    with pytest.raises(InvalidTokenError) as exc_info:
        await verification_service.issue_token(account)

    assert exc_info.value.message == "Email is already verified"


@pytest.mark.asyncio
async def test_send_verification_email(
    verification_service, mock_account_repo, mock_email_service, account
):
    mock_account_repo.set_verification_token_if_absent.return_value = "stored-token"

    assert await verification_service.send_verification_email(account, resend=True) is True

    sent_account, envelope = mock_email_service.send_verification_email.call_args[0]
    assert sent_account is account
    assert mock_email_service.send_verification_email.call_args[1] == {"resend": True}


@pytest.mark.asyncio
async def test_send_verification_email_failure(
    verification_service, mock_account_repo, mock_email_service, account
):
    mock_account_repo.set_verification_token_if_absent.return_value = "stored-token"
    mock_email_service.send_verification_email.return_value = False

    assert await verification_service.send_verification_email(account) is False


@pytest.mark.asyncio
async def test_verify_email(verification_service, mock_account_repo, jwt):
    verified = Account(
        id="acc-1",
        email="jane@example.com",
        display_name="Jane",
        status=AccountStatus.ACTIVE,
        email_verified=True,
    )
    mock_account_repo.consume_verification_token.return_value = True
    mock_account_repo.get_by_email.return_value = verified

    envelope = jwt.create_verification_envelope("jane@example.com", "stored-token")
    result = await verification_service.verify_email(envelope)

    assert result is verified
    mock_account_repo.consume_verification_token.assert_awaited_once_with(
        "jane@example.com", "stored-token"
    )


@pytest.mark.asyncio
async def test_verify_email_token_already_used(verification_service, mock_account_repo, jwt):
    mock_account_repo.consume_verification_token.return_value = False

    with pytest.raises(InvalidTokenError):
        await verification_service.verify_email(
            jwt.create_verification_envelope("jane@example.com", "stored-token")
        )

    mock_account_repo.get_by_email.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "envelope_factory",
    [
        lambda jwt: "garbage",
        lambda jwt: JWTService(secret_key="forged").create_verification_envelope("a@b.io", "t"),
        lambda jwt: jwt.create_verification_envelope("a@b.io", "t", timedelta(seconds=-1)),
        lambda jwt: jwt.create_access_token("acc-1", "a@b.io"),
    ],
)
async def test_verify_email_bad_envelope(
    verification_service, mock_account_repo, jwt, envelope_factory
):
    with pytest.raises(InvalidTokenError) as exc_info:
        await verification_service.verify_email(envelope_factory(jwt))

    assert exc_info.value.message == "Invalid or expired email verification token"
    mock_account_repo.consume_verification_token.assert_not_awaited()

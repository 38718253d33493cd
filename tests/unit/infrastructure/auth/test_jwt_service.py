"""Unit tests for JWTService."""

from datetime import timedelta

import jwt
import pytest

from brevity.infrastructure.auth.jwt_service import (
    JWTService,
    TokenDecodeError,
    TokenExpiredError,
)


@pytest.fixture
def service() -> JWTService:
    return JWTService(secret_key="unit-test-secret")


class TestAccessToken:
    def test_claims(self, service):
        token = service.create_access_token(account_id="acc-1", email="jane@example.com")

        payload = service.validate_access_token(token)

        assert payload["sub"] == "acc-1"
        assert payload["account_id"] == "acc-1"
        assert payload["email"] == "jane@example.com"
        assert payload["type"] == "access"
        assert payload["iss"] == "brevity"

    def test_expired(self, service):
        token = service.create_access_token(
            account_id="acc-1", email="jane@example.com", expires_delta=timedelta(seconds=-1)
        )

        with pytest.raises(TokenExpiredError):
            service.validate_access_token(token)

    def test_wrong_secret(self, service):
        token = JWTService(secret_key="other-secret").create_access_token("acc-1", "j@example.com")

        with pytest.raises(TokenDecodeError):
            service.validate_access_token(token)

    def test_malformed(self, service):
        with pytest.raises(TokenDecodeError):
            service.decode_token("not.a.jwt")

    def test_verification_envelope_is_not_an_access_token(self, service):
        envelope = service.create_verification_envelope("jane@example.com", "abc")

        with pytest.raises(TokenDecodeError):
            service.validate_access_token(envelope)

    def test_expires_in(self, service):
        assert service.get_expires_in(timedelta(minutes=15)) == 900


class TestVerificationEnvelope:
    def test_round_trip(self, service):
        envelope = service.create_verification_envelope("jane@example.com", "token-123")

        assert service.decode_verification_envelope(envelope) == ("jane@example.com", "token-123")

    def test_access_token_rejected(self, service):
        token = service.create_access_token("acc-1", "jane@example.com")

        with pytest.raises(TokenDecodeError):
            service.decode_verification_envelope(token)

    def test_missing_claims_rejected(self, service):
        forged = jwt.encode(
            {"iss": "brevity", "type": "email_verification", "email": "jane@example.com"},
            "unit-test-secret",
            algorithm="HS256",
        )

        with pytest.raises(TokenDecodeError):
            service.decode_verification_envelope(forged)

    def test_unsigned_envelope_rejected(self, service):
        forged = jwt.encode(
            {"iss": "brevity", "type": "email_verification", "email": "a@b.io", "token": "t"},
            "attacker-secret",
            algorithm="HS256",
        )

        with pytest.raises(TokenDecodeError):
            service.decode_verification_envelope(forged)

    def test_expired(self, service):
        envelope = service.create_verification_envelope(
            "jane@example.com", "token-123", expires_delta=timedelta(seconds=-1)
        )

        with pytest.raises(TokenExpiredError):
            service.decode_verification_envelope(envelope)

"""Integration tests for verification links and resending them."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_verification_link_is_single_use(
    client: AsyncClient, register, email_provider, envelope_from
):
    await register()
    envelope = envelope_from(email_provider.last(subject="Email Verification"))

    first = await client.get("/api/v1/auth/verify-email", params={"token": envelope})
    second = await client.get("/api/v1/auth/verify-email", params={"token": envelope})

    assert first.status_code == 200
    assert "Jane" in first.text
    assert second.status_code == 400
    assert second.json()["error"] == "invalid_token"


@pytest.mark.asyncio
async def test_tampered_envelope_rejected(
    client: AsyncClient, register, login, email_provider, envelope_from
):
    await register()
    envelope = envelope_from(email_provider.last(subject="Email Verification"))
    header, payload, signature = envelope.split(".")
    tampered = ".".join([header, payload, signature[::-1]])

    res = await client.get("/api/v1/auth/verify-email", params={"token": tampered})

    assert res.status_code == 400
    assert res.json()["message"] == "Invalid or expired email verification token"
    assert (await login()).status_code == 401


@pytest.mark.asyncio
async def test_verify_email_requires_token(client: AsyncClient):
    res = await client.get("/api/v1/auth/verify-email")

    assert res.status_code == 400
    assert res.json()["message"] == "Token is required for email verification"


@pytest.mark.asyncio
async def test_resend_reuses_pending_token(
    client: AsyncClient, register, login, email_provider, envelope_from
):
    await register()
    original = envelope_from(email_provider.last(subject="Email Verification"))

    res = await client.post("/api/v1/auth/resend-verification", json={"email": "jane@example.com"})
    assert res.status_code == 200
    assert res.json()["message"] == "Verification email sent successfully"
    resent = envelope_from(email_provider.last(subject="Resend Email Verification"))

    # both links carry the same stored token; whichever is followed first wins
    res = await client.get("/api/v1/auth/verify-email", params={"token": resent})
    assert res.status_code == 200
    res = await client.get("/api/v1/auth/verify-email", params={"token": original})
    assert res.status_code == 400
    assert (await login()).status_code == 200


@pytest.mark.asyncio
async def test_resend_after_verification(client: AsyncClient, register_verified):
    await register_verified()

    res = await client.post("/api/v1/auth/resend-verification", json={"email": "jane@example.com"})

    assert res.status_code == 400
    assert res.json()["message"] == "Email is already verified"


@pytest.mark.asyncio
async def test_resend_unknown_email(client: AsyncClient):
    res = await client.post(
        "/api/v1/auth/resend-verification", json={"email": "nobody@example.com"}
    )

    assert res.status_code == 404


@pytest.mark.asyncio
async def test_resend_email_outage(client: AsyncClient, register, email_provider):
    await register()
    email_provider.fail = True

    res = await client.post("/api/v1/auth/resend-verification", json={"email": "jane@example.com"})

    assert res.status_code == 500
    assert res.json()["success"] is False

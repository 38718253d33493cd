"""Integration tests for the forgot-password / reset-password flow."""

import pytest
from httpx import AsyncClient

NEW_PASSWORD = "NewPassword456!"


@pytest.mark.asyncio
async def test_reset_password_flow(
    client: AsyncClient, register_verified, login, email_provider, reset_code_from
):
    data = await register_verified()

    res = await client.post("/api/v1/auth/forgot-password", json={"email": "JANE@example.com"})
    assert res.status_code == 200
    assert res.json()["message"] == "Password reset link sent to your email"
    code = reset_code_from(email_provider.last(subject="Password Reset"))

    res = await client.post(
        "/api/v1/auth/reset-password",
        json={"email": "jane@example.com", "token": code, "new_password": NEW_PASSWORD},
    )
    assert res.status_code == 200
    assert res.json()["success"] is True
    assert res.json()["message"] == "Password has been reset successfully"
    email_provider.last(subject="Password Reset Successful")

    assert (await login()).status_code == 401
    assert (await login(password=NEW_PASSWORD)).status_code == 200

    # every session from before the reset is gone
    res = await client.post(
        "/api/v1/auth/refresh-token", json={"refresh_token": data["refresh_token"]}
    )
    assert res.status_code == 401

    # the code is single use
    res = await client.post(
        "/api/v1/auth/reset-password",
        json={"email": "jane@example.com", "token": code, "new_password": "Another789!"},
    )
    assert res.status_code == 400
    assert res.json()["error"] == "invalid_or_expired_token"


@pytest.mark.asyncio
async def test_reset_password_wrong_code(client: AsyncClient, register_verified, login):
    await register_verified()
    await client.post("/api/v1/auth/forgot-password", json={"email": "jane@example.com"})

    res = await client.post(
        "/api/v1/auth/reset-password",
        json={"email": "jane@example.com", "token": "not-a-code", "new_password": NEW_PASSWORD},
    )

    assert res.status_code == 400
    assert res.json()["message"] == "Invalid or expired password reset token"
    assert (await login()).status_code == 200


@pytest.mark.asyncio
async def test_newer_code_replaces_older(
    client: AsyncClient, register_verified, email_provider, reset_code_from
):
    await register_verified()
    await client.post("/api/v1/auth/forgot-password", json={"email": "jane@example.com"})
    first = reset_code_from(email_provider.last(subject="Password Reset"))
    await client.post("/api/v1/auth/forgot-password", json={"email": "jane@example.com"})
    second = reset_code_from(email_provider.last(subject="Password Reset"))

    if first != second:
        res = await client.post(
            "/api/v1/auth/reset-password",
            json={"email": "jane@example.com", "token": first, "new_password": NEW_PASSWORD},
        )
        assert res.status_code == 400

    res = await client.post(
        "/api/v1/auth/reset-password",
        json={"email": "jane@example.com", "token": second, "new_password": NEW_PASSWORD},
    )
    assert res.status_code == 200


@pytest.mark.asyncio
async def test_forgot_password_unknown_email(client: AsyncClient, email_provider):
    res = await client.post("/api/v1/auth/forgot-password", json={"email": "nobody@example.com"})

    assert res.status_code == 404
    assert res.json()["message"] == "User not found with this email"
    assert email_provider.messages == []


@pytest.mark.asyncio
async def test_forgot_password_email_outage(client: AsyncClient, register_verified, email_provider):
    await register_verified()
    email_provider.fail = True

    res = await client.post("/api/v1/auth/forgot-password", json={"email": "jane@example.com"})

    assert res.status_code == 500
    assert res.json()["message"] == "Failed to send password reset email"


@pytest.mark.asyncio
async def test_reset_password_missing_fields(client: AsyncClient):
    res = await client.post("/api/v1/auth/reset-password", json={"email": "jane@example.com"})

    assert res.status_code == 400
    assert res.json()["success"] is False

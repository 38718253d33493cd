"""Integration tests for refresh token rotation, logout and /me."""

from datetime import timedelta

import pytest
from httpx import AsyncClient

from brevity.infrastructure.auth.jwt_service import jwt_service


@pytest.mark.asyncio
async def test_refresh_rotates_token(client: AsyncClient, register_verified, login):
    await register_verified()
    tokens = (await login()).json()["data"]

    res = await client.post(
        "/api/v1/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]}
    )
    assert res.status_code == 200
    body = res.json()
    assert body["message"] == "Token refreshed successfully"
    assert body["data"]["refresh_token"] != tokens["refresh_token"]
    assert body["data"]["expires_in"] == 15 * 60

    replay = await client.post(
        "/api/v1/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]}
    )
    assert replay.status_code == 401

    again = await client.post(
        "/api/v1/auth/refresh-token", json={"refresh_token": body["data"]["refresh_token"]}
    )
    assert again.status_code == 200


@pytest.mark.asyncio
async def test_refresh_requires_token(client: AsyncClient):
    res = await client.post("/api/v1/auth/refresh-token", json={})

    assert res.status_code == 400
    assert res.json()["message"] == "Refresh token is required"


@pytest.mark.asyncio
async def test_refresh_unknown_token(client: AsyncClient):
    res = await client.post("/api/v1/auth/refresh-token", json={"refresh_token": "made-up"})

    assert res.status_code == 401
    assert res.json()["error"] == "unauthorized"


@pytest.mark.asyncio
async def test_logout_single_device(client: AsyncClient, register_verified, login, auth_headers):
    await register_verified()
    first = (await login()).json()["data"]
    second = (await login()).json()["data"]

    res = await client.post(
        "/api/v1/auth/logout",
        json={"refresh_token": first["refresh_token"]},
        headers=auth_headers(first["access_token"]),
    )
    assert res.status_code == 200
    assert res.json()["message"] == "Logout successful"

    revoked = await client.post(
        "/api/v1/auth/refresh-token", json={"refresh_token": first["refresh_token"]}
    )
    kept = await client.post(
        "/api/v1/auth/refresh-token", json={"refresh_token": second["refresh_token"]}
    )
    assert revoked.status_code == 401
    assert kept.status_code == 200


@pytest.mark.asyncio
async def test_logout_everywhere(client: AsyncClient, register_verified, login, auth_headers):
    await register_verified()
    first = (await login()).json()["data"]
    second = (await login()).json()["data"]

    res = await client.post("/api/v1/auth/logout", headers=auth_headers(first["access_token"]))
    assert res.status_code == 200

    for tokens in (first, second):
        res = await client.post(
            "/api/v1/auth/refresh-token", json={"refresh_token": tokens["refresh_token"]}
        )
        assert res.status_code == 401


@pytest.mark.asyncio
async def test_me(client: AsyncClient, register_verified, login, auth_headers):
    await register_verified()
    tokens = (await login()).json()["data"]

    res = await client.get("/api/v1/auth/me", headers=auth_headers(tokens["access_token"]))

    assert res.status_code == 200
    user = res.json()["data"]["user"]
    assert user["email"] == "jane@example.com"
    assert user["display_name"] == "Jane"
    assert user["status"] == "active"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "headers,message",
    [
        ({}, "Missing Authorization header"),
        ({"Authorization": "Token abc"}, "Invalid Authorization header"),
        ({"Authorization": "Bearer not.a.jwt"}, "Invalid token"),
    ],
)
async def test_me_rejects_bad_credentials(client: AsyncClient, headers, message):
    res = await client.get("/api/v1/auth/me", headers=headers)

    assert res.status_code == 401
    assert res.json()["message"] == message


@pytest.mark.asyncio
async def test_me_rejects_expired_token(client: AsyncClient, register_verified, auth_headers):
    data = await register_verified()
    expired = jwt_service.create_access_token(
        data["user"]["id"], data["user"]["email"], expires_delta=timedelta(seconds=-1)
    )

    res = await client.get("/api/v1/auth/me", headers=auth_headers(expired))

    assert res.status_code == 401
    assert res.json()["message"] == "Token has expired"

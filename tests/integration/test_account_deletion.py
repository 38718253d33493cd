"""Integration tests for account deletion and account type."""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from brevity.domain.services.auth_service import AuthService
from brevity.infrastructure.auth.jwt_service import jwt_service
from brevity.infrastructure.persistence.repositories import AccountRepository

PASSWORD = "Password123!"


async def delete_account(client: AsyncClient, access_token: str, body: dict | None = None):
    return await client.request(
        "DELETE",
        "/api/v1/auth/delete-account",
        json=body,
        headers={"Authorization": f"Bearer {access_token}"},
    )


@pytest.mark.asyncio
async def test_delete_local_account(
    client: AsyncClient, db_session: AsyncSession, register_verified, login, auth_headers
):
    data = await register_verified()
    token = data["access_token"]

    res = await delete_account(client, token)
    assert res.status_code == 400
    assert res.json()["message"] == "Password is required for account deletion"
    assert res.json()["account_type"] == "local"

    res = await delete_account(client, token, {"password": "WrongPassword!"})
    assert res.status_code == 401
    assert res.json()["message"] == "Invalid password"

    res = await delete_account(client, token, {"password": PASSWORD})
    assert res.status_code == 200
    assert res.json()["message"] == "Account deleted successfully"
    assert res.json()["data"]["account_type"] == "local"

    account = await AccountRepository(db_session).get_by_id(data["user"]["id"])
    assert account.status.value == "deleted"
    assert account.status_changed_by == data["user"]["id"]

    res = await client.get("/api/v1/auth/me", headers=auth_headers(token))
    assert res.status_code == 403

    res = await client.post(
        "/api/v1/auth/refresh-token", json={"refresh_token": data["refresh_token"]}
    )
    assert res.status_code == 401

    res = await client.post("/api/v1/auth/forgot-password", json={"email": "jane@example.com"})
    assert res.status_code == 404


@pytest.mark.asyncio
async def test_email_is_not_reusable_after_deletion(client: AsyncClient, register_verified, register):
    data = await register_verified()
    await delete_account(client, data["access_token"], {"password": PASSWORD})

    res = await register()

    assert res.status_code == 400
    assert res.json()["error"] == "duplicate_email"


@pytest.mark.asyncio
async def test_delete_oauth_account(
    client: AsyncClient, db_session: AsyncSession, email_service, auth_headers
):
    auth = AuthService.for_session(db_session, email_service)
    account = await auth.create_oauth_account("Sam", "sam@example.com", "google", "google-123")
    token = jwt_service.create_access_token(account.id, account.email)

    res = await client.get("/api/v1/auth/account-type", headers=auth_headers(token))
    assert res.status_code == 200
    info = res.json()["data"]
    assert info["account_type"] == "oauth"
    assert info["requires_password_for_deletion"] is False
    assert info["oauth_providers"][0]["provider"] == "google"
    assert info["oauth_providers"][0]["provider_id"] == "google-123"

    res = await delete_account(client, token)
    assert res.status_code == 200
    assert res.json()["data"]["account_type"] == "oauth"


@pytest.mark.asyncio
async def test_account_type_local(client: AsyncClient, register_verified, auth_headers):
    data = await register_verified()

    res = await client.get("/api/v1/auth/account-type", headers=auth_headers(data["access_token"]))

    assert res.status_code == 200
    assert res.json()["data"]["account_type"] == "local"
    assert res.json()["data"]["requires_password_for_deletion"] is True
    assert res.json()["data"]["oauth_providers"] == []

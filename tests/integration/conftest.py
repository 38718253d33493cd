"""Fixtures shared by the HTTP integration tests."""

import pytest
from httpx import AsyncClient

PASSWORD = "Password123!"


@pytest.fixture
def register(client: AsyncClient):
    """Register an account through the API and return the response."""

    async def _register(
        email: str = "jane@example.com",
        password: str = PASSWORD,
        display_name: str = "Jane",
    ):
        return await client.post(
            "/api/v1/auth/register",
            data={"display_name": display_name, "email": email, "password": password},
        )

    return _register


@pytest.fixture
def register_verified(client: AsyncClient, register, email_provider, envelope_from):
    """Register an account and follow the link from its verification email."""

    async def _register_verified(email: str = "jane@example.com", password: str = PASSWORD):
        response = await register(email=email, password=password)
        assert response.status_code == 201, response.text
        envelope = envelope_from(email_provider.last(subject="Email Verification", to=email))
        verified = await client.get("/api/v1/auth/verify-email", params={"token": envelope})
        assert verified.status_code == 200, verified.text
        return response.json()["data"]

    return _register_verified


@pytest.fixture
def login(client: AsyncClient):
    async def _login(email: str = "jane@example.com", password: str = PASSWORD):
        return await client.post("/api/v1/auth/login", json={"email": email, "password": password})

    return _login


def bearer(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture
def auth_headers():
    return bearer

"""Integration tests for health and root endpoints."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    res = await client.get("/health")

    assert res.status_code == 200
    assert res.json()["status"] == "healthy"
    assert res.json()["service"] == "Brevity"


@pytest.mark.asyncio
async def test_api_root(client: AsyncClient):
    res = await client.get("/api/v1")

    assert res.status_code == 200
    assert res.json()["api_version"] == "v1"


@pytest.mark.asyncio
async def test_correlation_id_echoed(client: AsyncClient):
    res = await client.get("/health", headers={"X-Correlation-ID": "abc-123"})

    assert res.headers["X-Correlation-ID"] == "abc-123"


@pytest.mark.asyncio
async def test_unknown_route(client: AsyncClient):
    res = await client.get("/api/v1/auth/does-not-exist")

    assert res.status_code == 404

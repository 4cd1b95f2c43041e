"""Tests for health check endpoints."""

from unittest.mock import AsyncMock

from httpx import AsyncClient


async def test_health_check(client: AsyncClient):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert "version" in data


async def test_liveness(client: AsyncClient):
    response = await client.get("/health/live")
    assert response.json() == {"status": "alive"}


async def test_readiness_ok(client: AsyncClient):
    response = await client.get("/health/ready")

    data = response.json()
    assert data["status"] == "ready"
    assert data["checks"]["database"] == "ok"
    assert data["checks"]["email"] == "ok"


async def test_readiness_reports_unreachable_email(client: AsyncClient, notifier):
    notifier.healthy = False

    data = (await client.get("/health/ready")).json()

    assert data["status"] == "ready"
    assert data["checks"]["email"] == "unreachable"


async def test_readiness_email_does_not_gate(client: AsyncClient, notifier):
    notifier.configured = False

    data = (await client.get("/health/ready")).json()

    assert data["status"] == "ready"
    assert data["checks"]["email"] == "not_configured"


async def test_readiness_database_failed(client: AsyncClient, app):
    app.state.db.is_healthy = AsyncMock(return_value=False)

    data = (await client.get("/health/ready")).json()

    assert data["status"] == "not_ready"
    assert data["checks"]["database"] == "failed"

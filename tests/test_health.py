"""Tests for health endpoints and error envelopes."""

from conftest import API

from app.api.v1.endpoints import health


async def test_health_check(client):
    response = await client.get(f"{API}/health")

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["data"]["status"] == "healthy"
    assert body["error"] is None


async def test_ping(client):
    response = await client.get(f"{API}/ping")
    assert response.json()["message"] == "pong"


async def test_detailed_health_reports_degraded(client, monkeypatch):
    async def healthy() -> bool:
        return True

    async def unhealthy() -> bool:
        return False

    monkeypatch.setattr(health, "check_database_connection", healthy)
    monkeypatch.setattr(health, "check_redis_connection", unhealthy)

    response = await client.get(f"{API}/health/detailed")

    data = response.json()["data"]
    assert data["status"] == "degraded"
    assert data["database"] == "healthy"
    assert data["redis"] == "unhealthy"


async def test_unknown_route_uses_envelope(client):
    response = await client.get(f"{API}/does-not-exist")

    assert response.status_code == 404
    assert response.json()["success"] is False


async def test_request_id_is_echoed(client):
    response = await client.get(f"{API}/ping", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert "X-Process-Time" in response.headers

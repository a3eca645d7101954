"""Tests for health endpoints."""

from tests.conftest import HEADERS


class TestHealthEndpoints:
    async def test_health_check(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "slotwise"

    async def test_liveness_check(self, client):
        response = await client.get("/health/live")
        assert response.status_code == 200
        assert response.json()["status"] == "alive"

    async def test_health_needs_no_owner(self, client):
        response = await client.get("/health", headers={k: "" for k in HEADERS})
        assert response.status_code == 200

    async def test_process_time_header(self, client):
        response = await client.get("/health")
        assert "X-Process-Time" in response.headers

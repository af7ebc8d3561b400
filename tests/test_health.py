"""Smoke tests for health and app wiring."""

import pytest
from httpx import AsyncClient

from app.api.v1.endpoints import health


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200, status ok and the app version."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data.get("status") == "ok"
    assert data.get("version")


async def test_ready_when_database_answers(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def _ok() -> None:
        return None

    monkeypatch.setattr(health, "check_database", _ok)
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


async def test_not_ready_when_database_is_down(
    client: AsyncClient, monkeypatch: pytest.MonkeyPatch
) -> None:
    async def _down() -> None:
        raise ConnectionRefusedError("connection refused")

    monkeypatch.setattr(health, "check_database", _down)
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 503
    assert response.json()["status"] == "not_ready"


async def test_unknown_route_is_json_404(client: AsyncClient) -> None:
    response = await client.get("/api/v1/nope")
    assert response.status_code == 404
    assert response.json()["error"] == "HTTP_ERROR"

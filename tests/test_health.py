"""Smoke tests for health and app wiring."""

from httpx import AsyncClient

from tests.fakes import FakeRecordStore


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    data = response.json()
    assert data.get("status") == "ok"


async def test_ready_reports_record_store_and_cache(client: AsyncClient) -> None:
    """GET /api/v1/health/ready returns 200 with realtime disabled in tests."""
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    data = response.json()
    assert data["realtime"] == "disabled"
    assert data["cached_queries"] == 0


async def test_ready_fails_when_record_store_down(
    client: AsyncClient, record_store: FakeRecordStore
) -> None:
    """Readiness is 503 when the record store cannot be reached."""
    record_store.fail = True
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 503

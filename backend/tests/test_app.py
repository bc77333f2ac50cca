"""
Tests for the health, metrics and request logging plumbing.
"""

import pytest
from httpx import AsyncClient

from booking_api.core.config import Settings
from booking_api.core.logging import _service_fields


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


@pytest.mark.asyncio
async def test_request_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert response.headers["X-Response-Time"].endswith("ms")


@pytest.mark.asyncio
async def test_request_id_is_generated(client: AsyncClient):
    response = await client.get("/health")
    assert len(response.headers["X-Request-ID"]) == 8


@pytest.mark.asyncio
async def test_metrics_count_operations(client: AsyncClient, test_booking):
    await client.get(f"/api/v1/bookings/{test_booking.id}")
    await client.get("/api/v1/bookings/99999")

    response = await client.get("/metrics")
    assert response.status_code == 200
    text = response.text
    assert 'booking_operations_total{operation="get",result="success"}' in text
    assert 'booking_operations_total{operation="get",result="not_found"}' in text


@pytest.mark.asyncio
async def test_unknown_route_uses_envelope(client: AsyncClient):
    response = await client.get("/api/v1/rooms/")
    assert response.status_code == 404
    assert response.json() == {"status": 404, "message": "Not Found"}


@pytest.mark.asyncio
async def test_wrong_method_uses_envelope(client: AsyncClient):
    response = await client.put("/api/v1/bookings/1", json={})
    assert response.status_code == 405
    assert response.json() == {"status": 405, "message": "Method Not Allowed"}
    assert "Allow" in response.headers


def test_log_events_carry_service_fields():
    settings = Settings(APP_NAME="Bookings Test", APP_VERSION="9.9.9", ENVIRONMENT="ci")
    add_fields = _service_fields(settings)
    event = add_fields(None, "info", {"event": "booking_created", "version": "explicit"})
    assert event["service"] == "Bookings Test"
    assert event["env"] == "ci"
    assert event["version"] == "explicit"

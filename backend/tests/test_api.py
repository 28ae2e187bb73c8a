"""
Tests for the HTTP surface shared by every endpoint.
"""

import pytest
from httpx import AsyncClient

from lesson_booking.core.logging import mask_customer_emails, mask_email

ENDPOINTS = [
    "/api/v1/book-time-slot",
    "/api/v1/cancel-booking",
    "/api/v1/create-free-admin-package",
    "/api/v1/create-free-package",
]


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ENDPOINTS)
async def test_preflight(client: AsyncClient, path):
    response = await client.options(path)
    assert response.status_code == 200
    assert response.content == b""


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ENDPOINTS)
async def test_browser_preflight(client: AsyncClient, path):
    """A real CORS preflight also gets an empty 200."""
    response = await client.options(path, headers={
        "Origin": "https://lessons.example.com",
        "Access-Control-Request-Method": "POST",
        "Access-Control-Request-Headers": "content-type",
    })
    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert "POST" in response.headers["access-control-allow-methods"]


@pytest.mark.asyncio
async def test_browser_preflight_for_unsupported_method(client: AsyncClient):
    response = await client.options("/api/v1/book-time-slot", headers={
        "Origin": "https://lessons.example.com",
        "Access-Control-Request-Method": "DELETE",
    })
    assert response.status_code == 200
    assert response.content == b""


@pytest.mark.asyncio
@pytest.mark.parametrize("path", ENDPOINTS)
@pytest.mark.parametrize("method", ["GET", "PUT", "DELETE"])
async def test_wrong_method(client: AsyncClient, path, method):
    response = await client.request(method, path)
    assert response.status_code == 405
    assert response.json() == {"error": "Method not allowed"}


@pytest.mark.asyncio
async def test_request_id_header(client: AsyncClient):
    response = await client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"
    assert response.headers["X-Response-Time"].endswith("ms")


@pytest.mark.asyncio
async def test_health(client: AsyncClient):
    response = await client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["database"] == "ok"


@pytest.mark.asyncio
async def test_metrics_exposed(client: AsyncClient, paid_package, time_slot):
    await client.post("/api/v1/book-time-slot", json={
        "packageCode": "NOPE",
        "timeSlotId": time_slot.id,
        "studentName": "Mia",
        "customerName": "Sam",
        "customerEmail": "sam@example.com",
    })

    response = await client.get("/metrics")
    assert response.status_code == 200
    assert 'booking_attempts_total{status="rejected"}' in response.text
    assert "request_latency_seconds" in response.text


@pytest.mark.parametrize("raw,masked", [
    ("sam.jones@example.com", "s***@example.com"),
    ("a@b.io", "a***@b.io"),
    ("not-an-email", "not-an-email"),
    ("@example.com", "@example.com"),
])
def test_mask_email(raw, masked):
    assert mask_email(raw) == masked


def test_log_events_mask_email_fields():
    event = {"event": "booking_created", "customer_email": "sam@example.com", "booking_id": 7}
    masked = mask_customer_emails(None, "info", event)
    assert masked["customer_email"] == "s***@example.com"
    assert masked["booking_id"] == 7

"""
Tests for free package issuance and package code generation.
"""

import re
from decimal import Decimal

import pytest
from httpx import AsyncClient
from sqlalchemy import select

from lesson_booking.core.config import get_settings
from lesson_booking.models import Customer, Package
from lesson_booking.services import package_service


async def _load_package(db_session, code: str) -> Package:
    result = await db_session.execute(
        select(Package).where(Package.code == code).execution_options(populate_existing=True)
    )
    return result.scalar_one()


@pytest.mark.asyncio
@pytest.mark.parametrize("promo_code", ["ADMIN", "admin", "Admin"])
async def test_admin_package(client: AsyncClient, db_session, promo_code):
    response = await client.post("/api/v1/create-free-admin-package", json={
        "program": "Advanced Swim",
        "lessons": 5,
        "customerEmail": "coach@example.com",
        "promoCode": promo_code,
    })
    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["message"] == "Admin free package created successfully"
    assert re.fullmatch(r"ADMIN-\d+-[0-9A-Z]{5}", data["packageCode"])

    package = await _load_package(db_session, data["packageCode"])
    assert package.program == "Advanced Swim"
    assert package.lessons_total == 5
    assert package.lessons_remaining == 5
    assert package.amount_paid == Decimal("0")
    assert package.status == "paid"


@pytest.mark.asyncio
async def test_admin_package_wrong_code(client: AsyncClient, db_session):
    response = await client.post("/api/v1/create-free-admin-package", json={
        "program": "Advanced Swim",
        "lessons": 5,
        "customerEmail": "coach@example.com",
        "promoCode": "wrong",
    })
    assert response.status_code == 400
    assert response.json()["error"] == "Invalid promo code for free package"
    assert (await db_session.execute(select(Package))).first() is None


@pytest.mark.asyncio
async def test_admin_package_creates_placeholder_customer(client: AsyncClient, db_session):
    await client.post("/api/v1/create-free-admin-package", json={
        "program": "Advanced Swim",
        "lessons": 2,
        "customerEmail": "new@example.com",
        "promoCode": "admin",
    })
    name = (await db_session.execute(select(Customer.name).where(Customer.email == "new@example.com"))).scalar_one()
    assert name == "Admin Package Customer"


@pytest.mark.asyncio
async def test_admin_package_keeps_existing_customer_name(client: AsyncClient, db_session):
    db_session.add(Customer(email="sam@example.com", name="Sam Jones", phone="+44 1"))
    await db_session.commit()

    response = await client.post("/api/v1/create-free-admin-package", json={
        "program": "Advanced Swim",
        "lessons": 2,
        "customerEmail": "sam@example.com",
        "promoCode": "admin",
    })
    assert response.status_code == 200

    row = (await db_session.execute(
        select(Customer.name, Customer.phone).where(Customer.email == "sam@example.com")
    )).one()
    assert row.name == "Sam Jones"
    assert row.phone == "+44 1"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [
    {"lessons": 5, "customerEmail": "coach@example.com", "promoCode": "admin"},
    {"program": "Advanced Swim", "lessons": 0, "customerEmail": "coach@example.com", "promoCode": "admin"},
    {"program": "Advanced Swim", "lessons": 5, "promoCode": "admin"},
    {"program": "Advanced Swim", "lessons": 5, "customerEmail": "coach@example.com", "promoCode": ""},
])
async def test_admin_package_missing_fields(client: AsyncClient, payload):
    response = await client.post("/api/v1/create-free-admin-package", json=payload)
    assert response.status_code == 400
    assert response.json()["error"] == "Missing required fields"


@pytest.mark.asyncio
async def test_promo_package(client: AsyncClient, db_session):
    response = await client.post("/api/v1/create-free-package", json={
        "program": "X",
        "promoCode": "SUMMER10",
    })
    assert response.status_code == 200
    data = response.json()
    assert data["message"] == "Free lesson package created successfully"
    assert re.fullmatch(r"FREE-\d+-[0-9A-Z]{5}", data["packageCode"])

    package = await _load_package(db_session, data["packageCode"])
    assert package.program == "X"
    assert package.lessons_total == 1
    assert package.lessons_remaining == 1
    assert package.amount_paid == Decimal("0")
    assert package.status == "paid"
    assert "SUMMER10" in package.payment_intent_id


@pytest.mark.asyncio
async def test_promo_package_does_not_touch_customers(client: AsyncClient, db_session):
    await client.post("/api/v1/create-free-package", json={"program": "X", "promoCode": "SUMMER10"})
    assert (await db_session.execute(select(Customer))).first() is None


@pytest.mark.asyncio
async def test_promo_package_missing_code(client: AsyncClient):
    response = await client.post("/api/v1/create-free-package", json={"program": "X"})
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_promo_package_allow_list(client: AsyncClient, monkeypatch):
    monkeypatch.setattr(get_settings(), "PUBLIC_PROMO_CODES", "SUMMER10, WINTER5")

    accepted = await client.post("/api/v1/create-free-package", json={"program": "X", "promoCode": "summer10"})
    rejected = await client.post("/api/v1/create-free-package", json={"program": "X", "promoCode": "BOGUS"})

    assert accepted.status_code == 200
    assert rejected.status_code == 400
    assert rejected.json()["error"] == "Invalid promo code for free package"


@pytest.mark.asyncio
async def test_promo_package_booked_end_to_end(client: AsyncClient, time_slot):
    """A freshly issued promo package is immediately bookable, once."""
    code = (await client.post(
        "/api/v1/create-free-package", json={"program": "X", "promoCode": "SUMMER10"}
    )).json()["packageCode"]

    payload = {
        "packageCode": code,
        "timeSlotId": time_slot.id,
        "studentName": "Mia Jones",
        "customerName": "Sam Jones",
        "customerEmail": "sam@example.com",
    }
    first = await client.post("/api/v1/book-time-slot", json=payload)
    assert first.status_code == 200
    assert first.json()["lessonsRemaining"] == 0

    payload["customerEmail"] = "alex@example.com"
    second = await client.post("/api/v1/book-time-slot", json=payload)
    assert second.status_code == 400
    assert second.json()["error"] == "No remaining lessons in this package"


def test_package_codes_differ_within_one_millisecond(monkeypatch):
    monkeypatch.setattr(package_service, "_epoch_ms", lambda: 1760000000123)

    codes = {package_service.generate_package_code("FREE") for _ in range(50)}

    assert len(codes) == 50
    for code in codes:
        assert code.startswith("FREE-1760000000123-")
        assert code == code.upper()


@pytest.mark.asyncio
async def test_code_collision_is_retried(client: AsyncClient, db_session, paid_package, monkeypatch):
    taken = paid_package.code
    fresh = "FREE-1-ABCDE"
    codes = iter([taken, fresh])
    monkeypatch.setattr(package_service, "generate_package_code", lambda prefix: next(codes))

    response = await client.post("/api/v1/create-free-package", json={"program": "X", "promoCode": "SUMMER10"})

    assert response.status_code == 200
    assert response.json()["packageCode"] == fresh


@pytest.mark.asyncio
async def test_code_collision_gives_up(client: AsyncClient, db_session, paid_package, monkeypatch):
    taken = paid_package.code
    monkeypatch.setattr(package_service, "generate_package_code", lambda prefix: taken)

    response = await client.post("/api/v1/create-free-package", json={"program": "X", "promoCode": "SUMMER10"})

    assert response.status_code == 500
    assert response.json() == {
        "error": "Failed to create free package",
        "details": "Could not generate a unique package code",
    }

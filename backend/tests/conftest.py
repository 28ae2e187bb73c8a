"""
Pytest fixtures for test database, client, and seeded records.

Each test gets a fresh in-memory SQLite database (aiosqlite driver, one
shared connection via StaticPool). The same session backs both the fixtures
and the app, so rows seeded here are visible to the endpoints.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import datetime, timezone, timedelta
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from lesson_booking.main import app
from lesson_booking.db.base import Base
from lesson_booking.db.session import get_db
from lesson_booking.models import Package, TimeSlot
from lesson_booking.services.interfaces.notifier import Notifier
from lesson_booking.services.strategy_factory import get_notifier

TEST_DATABASE_URL = "sqlite+aiosqlite://"


class RecordingNotifier(Notifier):
    """Collects confirmations instead of sending them."""

    def __init__(self):
        self.sent = []

    async def send_booking_confirmation(self, booking, time_slot) -> None:
        self.sent.append((booking.id, time_slot.id, booking.customer_email))


class FailingNotifier(Notifier):
    async def send_booking_confirmation(self, booking, time_slot) -> None:
        raise RuntimeError("smtp relay down")


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create tables in a fresh database, yield a session, then dispose."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest_asyncio.fixture(scope="function")
async def client(db_session: AsyncSession, notifier: Notifier) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the DB and notifier dependencies overridden."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


async def _add(db_session: AsyncSession, obj):
    db_session.add(obj)
    await db_session.commit()
    await db_session.refresh(obj)
    return obj


@pytest_asyncio.fixture
async def paid_package(db_session: AsyncSession) -> Package:
    """A paid five-lesson package."""
    return await _add(db_session, Package(
        code="PKG-PAID-5",
        program="Beginner Swim",
        lessons_total=5,
        lessons_remaining=5,
        amount_paid=150,
        payment_intent_id="pi_paid_5",
        status="paid",
    ))


@pytest_asyncio.fixture
async def empty_package(db_session: AsyncSession) -> Package:
    """A paid package with every lesson already used."""
    return await _add(db_session, Package(
        code="PKG-EMPTY",
        program="Beginner Swim",
        lessons_total=3,
        lessons_remaining=0,
        amount_paid=90,
        status="paid",
    ))


@pytest_asyncio.fixture
async def time_slot(db_session: AsyncSession) -> TimeSlot:
    """A slot with plenty of room."""
    return await _add(db_session, TimeSlot(
        program="Beginner Swim",
        starts_at=datetime.now(timezone.utc) + timedelta(days=7),
        location="Pool A",
        max_capacity=6,
        current_enrollment=2,
    ))


@pytest_asyncio.fixture
async def last_seat_slot(db_session: AsyncSession) -> TimeSlot:
    """A slot with exactly one seat left."""
    return await _add(db_session, TimeSlot(
        program="Beginner Swim",
        starts_at=datetime.now(timezone.utc) + timedelta(days=3),
        location="Pool B",
        max_capacity=4,
        current_enrollment=3,
    ))


@pytest_asyncio.fixture
async def full_slot(db_session: AsyncSession) -> TimeSlot:
    return await _add(db_session, TimeSlot(
        program="Beginner Swim",
        starts_at=datetime.now(timezone.utc) + timedelta(days=3),
        location="Pool C",
        max_capacity=4,
        current_enrollment=4,
    ))


def make_pending_package(code: str, minutes_old: float, lessons_total: int = 1) -> Package:
    """Card purchase still waiting for the payment webhook."""
    return Package(
        code=code,
        program="Beginner Swim",
        lessons_total=lessons_total,
        lessons_remaining=lessons_total,
        amount_paid=35,
        payment_intent_id=f"pi_{code.lower()}",
        status="pending",
        created_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_old),
    )


def booking_payload(package_code: str, time_slot_id: int, **overrides) -> dict:
    payload = {
        "packageCode": package_code,
        "timeSlotId": time_slot_id,
        "studentName": "Mia Jones",
        "studentAge": 7,
        "customerName": "Sam Jones",
        "customerEmail": "sam@example.com",
        "customerPhone": "+44 7700 900123",
        "notes": "First lesson",
    }
    payload.update(overrides)
    return payload


async def fetch_lessons_remaining(db_session: AsyncSession, code: str) -> int:
    result = await db_session.execute(select(Package.lessons_remaining).where(Package.code == code))
    return result.scalar_one()


async def fetch_enrollment(db_session: AsyncSession, slot_id: int) -> int:
    result = await db_session.execute(select(TimeSlot.current_enrollment).where(TimeSlot.id == slot_id))
    return result.scalar_one()

"""
Pytest fixtures for the test database, HTTP client and email delivery.

Each test gets its own in-memory SQLite database (aiosqlite) with the
schema created from the models, so no database server is needed.
"""

from datetime import datetime, timezone
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

from booking_api.main import app
from booking_api.db.base import Base
from booking_api.db import session as db_session_module
from booking_api.db.session import get_db
from booking_api.models.booking import Booking, BookingStatus
from booking_api.services.notification_service import get_email_sender

TEST_DATABASE_URL = "sqlite+aiosqlite://"


class FakeEmailSender:
    """Records the bookings it was asked to confirm; `succeed` decides the outcome."""

    def __init__(self):
        self.sent: list[Booking] = []
        self.succeed = True

    async def __call__(self, booking: Booking) -> bool:
        self.sent.append(booking)
        return self.succeed


@pytest_asyncio.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Fresh schema per test; the engine is thrown away afterwards."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def email_sender() -> FakeEmailSender:
    return FakeEmailSender()


@pytest_asyncio.fixture(scope="function")
async def client(
    db_session: AsyncSession,
    email_sender: FakeEmailSender,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client with the DB session and email delivery overridden."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def test_booking(db_session: AsyncSession) -> Booking:
    """A stored booking with a note, last touched well in the past."""
    booking = Booking(
        created_at=datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc),
        updated_at=datetime(2026, 1, 5, 9, 0, tzinfo=timezone.utc),
        org_id="7b0c4a52-5b1e-4a39-9a0e-2f1d3c4b5a61",
        status_id=BookingStatus.PENDING.value,
        contact_name="Ada Lovelace",
        contact_email="a@b.com",
        event_title="Team Offsite",
        event_location_id="c2f9e8d7-1a2b-4c3d-8e9f-0a1b2c3d4e5f",
        event_start=datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc),
        event_end=datetime(2026, 3, 1, 18, 0, tzinfo=timezone.utc),
        event_details="Full day workshop",
        request_note="Vegetarian lunch please",
    )
    db_session.add(booking)
    await db_session.commit()
    await db_session.refresh(booking)
    return booking


@pytest.fixture
def booking_payload() -> dict:
    return {
        "contact_name": "Grace Hopper",
        "contact_email": "grace@example.com",
        "event_title": "Compiler Meetup",
        "event_start": "2026-05-10T17:00:00+02:00",
        "event_end": "2026-05-10T20:00:00+02:00",
        "event_details": "Talks and pizza",
        "request_note": "Projector needed",
    }


@pytest_asyncio.fixture
async def file_session_factory(tmp_path, monkeypatch) -> AsyncGenerator[async_sessionmaker, None]:
    """
    A file-backed database wired into the real get_db, so commits and
    rollbacks are visible from a separate session.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    monkeypatch.setattr(db_session_module, "get_session_factory", lambda: session_factory)
    yield session_factory

    await engine.dispose()


@pytest_asyncio.fixture
async def committing_client(
    file_session_factory,
    email_sender: FakeEmailSender,
) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client that keeps the production get_db dependency."""
    app.dependency_overrides[get_email_sender] = lambda: email_sender

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()

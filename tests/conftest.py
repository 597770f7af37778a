"""
Shared test fixtures.

Uses an in-memory SQLite database (via aiosqlite) so tests run without
Docker / PostgreSQL / Redis.  The production models are created as-is; a
``StaticPool`` keeps every session on the one in-memory connection.
"""

from typing import AsyncGenerator

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ridehail.domain.entities import BookingRequest
from ridehail.domain.enums import ActorRole, VehicleType
from ridehail.domain.pricing import FareEngine, PricingConfig
from ridehail.infrastructure.database import Base
from ridehail.infrastructure.models import DriverProfileModel, UserModel
from ridehail.services.trips import TripService

TEST_DB_URL = "sqlite+aiosqlite:///:memory:"

RIDER_ID = 1
OTHER_RIDER_ID = 2
DRIVER_ID = 3
OTHER_DRIVER_ID = 4
UNREGISTERED_DRIVER_ID = 5  # DRIVER user without a driver profile

# Chennai Central -> Anna Nagar
PICKUP = (13.0827, 80.2707)
DROP = (13.0878, 80.2085)


async def seed_users(session: AsyncSession) -> None:
    session.add_all(
        [
            UserModel(id=RIDER_ID, email="rider@example.com", name="Rider", role=ActorRole.RIDER),
            UserModel(id=OTHER_RIDER_ID, email="other@example.com", name="Other", role=ActorRole.RIDER),
            UserModel(id=DRIVER_ID, email="driver@example.com", name="Driver", role=ActorRole.DRIVER),
            UserModel(id=OTHER_DRIVER_ID, email="driver2@example.com", name="Driver 2", role=ActorRole.DRIVER),
            UserModel(id=UNREGISTERED_DRIVER_ID, email="new@example.com", name="New", role=ActorRole.DRIVER),
        ]
    )
    await session.flush()
    session.add_all(
        [
            DriverProfileModel(
                user_id=DRIVER_ID,
                name="Demo Driver",
                vehicle_type=VehicleType.SEDAN,
                vehicle_number="KA 01 AB 1234",
                is_online=True,
            ),
            DriverProfileModel(
                user_id=OTHER_DRIVER_ID,
                name="Ravi Kumar",
                vehicle_type=VehicleType.SUV,
                vehicle_number="TN 09 CD 5678",
                is_online=True,
            ),
        ]
    )
    await session.commit()


def make_booking(**overrides) -> BookingRequest:
    """A valid 5 km MINI booking; the surge-free quote is 100."""
    values = dict(
        pickup_lat=PICKUP[0],
        pickup_lng=PICKUP[1],
        drop_lat=DROP[0],
        drop_lng=DROP[1],
        pickup_address="Chennai Central",
        drop_address="Anna Nagar",
        distance_km=5.0,
        duration_min=18.0,
        client_fare=100,
        vehicle_type=VehicleType.MINI,
    )
    values.update(overrides)
    return BookingRequest(**values)


def booking_payload(**overrides) -> dict:
    body = {
        "pickup_lat": PICKUP[0],
        "pickup_lng": PICKUP[1],
        "drop_lat": DROP[0],
        "drop_lng": DROP[1],
        "pickup_address": "Chennai Central",
        "drop_address": "Anna Nagar",
        "distance_km": 5.0,
        "duration_min": 18.0,
        "fare": 100,
        "vehicle_type": "MINI",
    }
    body.update(overrides)
    return body


def headers(user_id: int, role: ActorRole) -> dict[str, str]:
    return {"X-User-Id": str(user_id), "X-User-Role": role.value}


# ── Fixtures ──────────────────────────────────────────────────────────


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker, None]:
    """Fresh in-memory schema with seeded riders and drivers."""
    engine = create_async_engine(
        TEST_DB_URL,
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        await seed_users(session)

    yield factory

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def service(db_session: AsyncSession) -> TripService:
    """Service with surge disabled so fares do not depend on the clock."""
    return TripService(
        db_session, fare_engine=FareEngine(PricingConfig(surge_windows=()))
    )


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """AsyncClient backed by the seeded SQLite database."""
    from ridehail.api.app import create_app
    from ridehail.api.dependencies import get_db
    from ridehail.api.middleware import limiter

    async def _test_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app = create_app()
    app.dependency_overrides[get_db] = _test_db
    limiter.reset()

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

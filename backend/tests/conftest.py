"""Test fixtures for the ParkShift backend."""
from __future__ import annotations

import os
from collections.abc import AsyncIterator
from decimal import Decimal

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine

os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///./test.db")

from parkshift.core.config import get_settings
from parkshift.core.security import create_access_token
from parkshift.db.base import Base
from parkshift.db.session import dispose_engine, get_sessionmaker
from parkshift.main import app
from parkshift.models import ParkingSpace, Profile, Vehicle


@pytest.fixture(scope="session")
def db_url(tmp_path_factory: pytest.TempPathFactory) -> str:
    """Provide a temporary SQLite database URL for the test session."""
    db_path = tmp_path_factory.mktemp("db") / "test.db"
    return f"sqlite+aiosqlite:///{db_path}"


@pytest_asyncio.fixture()
async def reset_database(db_url: str) -> AsyncIterator[None]:
    """Drop and recreate the database schema for an isolated test."""
    os.environ["DATABASE_URL"] = db_url
    get_settings.cache_clear()
    get_settings()

    await dispose_engine(db_url)
    engine = create_async_engine(db_url, future=True)
    async with engine.begin() as connection:
        await connection.run_sync(Base.metadata.drop_all)
        await connection.run_sync(Base.metadata.create_all)
    await engine.dispose()
    yield
    await dispose_engine(db_url)


def auth_headers(profile_id: object) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(str(profile_id))}"}


@pytest_asyncio.fixture()
async def app_context(
    reset_database: AsyncIterator[None], db_url: str
) -> AsyncIterator[dict[str, object]]:
    """Yield an async client plus a seeded owner, renter, space and vehicle."""
    sessionmaker = get_sessionmaker(db_url)

    async with sessionmaker() as session:
        owner = Profile(
            email="olivia.owner@example.com", first_name="Olivia", last_name="Owner"
        )
        renter = Profile(
            email="ron.renter@example.com", first_name="Ron", last_name="Renter"
        )
        session.add_all([owner, renter])
        await session.flush()

        space = ParkingSpace(
            owner_id=owner.id,
            title="Covered bay near the station",
            address="Stationsplein 1, Amsterdam",
            latitude=52.3791,
            longitude=4.9003,
            length_cm=500,
            width_cm=250,
            height_cm=210,
            max_weight_kg=2500,
            hourly_price=Decimal("2.50"),
            daily_price=Decimal("8.00"),
            minimum_duration_hours=1,
            maximum_duration_hours=720,
            amenities={"covered": True, "ev_charging": False},
        )
        vehicle = Vehicle(
            user_id=renter.id,
            make="Volkswagen",
            model="Golf",
            license_plate="AB-123-C",
            length_cm=430,
            width_cm=180,
            height_cm=150,
            weight_kg=1300,
            is_primary=True,
        )
        session.add_all([space, vehicle])
        await session.commit()

        context: dict[str, object] = {
            "owner_id": owner.id,
            "renter_id": renter.id,
            "space_id": space.id,
            "vehicle_id": vehicle.id,
            "owner_headers": auth_headers(owner.id),
            "renter_headers": auth_headers(renter.id),
        }

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        context["client"] = client
        yield context

import os

# Settings are read at import time, so the environment must be ready first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("API_KEY", "test-api-key")

import pytest
from typing import AsyncGenerator
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool, StaticPool

from app.core.config import settings
from app.db.session import Base, get_db
from app.models.orm import Activity, Building, Organization, OrganizationPhone
from main import app

TEST_DATABASE_URL = os.environ.get("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def make_test_engine():
    # in-memory sqlite lives as long as its single connection
    if TEST_DATABASE_URL.startswith("sqlite"):
        return create_async_engine(
            TEST_DATABASE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    return create_async_engine(TEST_DATABASE_URL, poolclass=NullPool)


@pytest.fixture
async def session() -> AsyncGenerator[AsyncSession, None]:
    """
    A session on a freshly created schema, dropped after the test.
    """
    engine = make_test_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False
    )
    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest.fixture
async def client(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    An authorized client against the application with the DB dependency
    pointed at the test session.
    """
    async def override_get_db():
        yield session

    app.dependency_overrides[get_db] = override_get_db

    headers = {"X-API-Key": settings.API_KEY}
    base_url = f"http://test{settings.API_PREFIX}"

    async with AsyncClient(transport=ASGITransport(app=app), base_url=base_url) as ac:
        ac.headers.update(headers)
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
async def directory(session: AsyncSession) -> dict:
    """
    Small directory with fixed ids:

    activities: 3 -> {8, 9}, 9 -> {12}; 20 is an unrelated root
    buildings: 1 (Moscow centre), 2 (~50 km north of it)
    organizations: 5 and 7 in building 1, 11 in building 2
    """
    food = Activity(id=3, name="Food", level=1)
    meat = Activity(id=8, name="Meat", level=2, parent=food)
    dairy = Activity(id=9, name="Dairy", level=2, parent=food)
    cheese = Activity(id=12, name="Cheese", level=3, parent=dairy)
    cars = Activity(id=20, name="Cars", level=1)

    centre = Building(id=1, address="Lenina 1", latitude=55.75, longitude=37.62)
    north = Building(id=2, address="Far Away 50", latitude=56.2, longitude=37.62)

    horns = Organization(
        id=5,
        name="Horns and Hooves",
        building=centre,
        phones=[OrganizationPhone(phone_number="2-222-222"), OrganizationPhone(phone_number="8-923-666-13-13")],
        activities=[meat],
    )
    cheesy = Organization(id=7, name="Cheese Corner", building=centre, phones=[], activities=[cheese, cars])
    garage = Organization(
        id=11,
        name="Garage 24",
        building=north,
        phones=[OrganizationPhone(phone_number="8-800-555-35-35")],
        activities=[cars],
    )

    session.add_all([food, cars, centre, north, horns, cheesy, garage])
    await session.commit()
    return {
        "activities": [food, meat, dairy, cheese, cars],
        "buildings": [centre, north],
        "organizations": [horns, cheesy, garage],
    }

"""
Test configuration and fixtures.
"""
import datetime

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from pressure_forecast.classifier import ABSOLUTE_DELTA
from pressure_forecast.db import Base
from pressure_forecast.main import app, get_weather_service
from pressure_forecast.service import WeatherService

from helpers import FakeClock, FakeUpstream

# Use in-memory async SQLite for tests
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def session_factory():
    """Fresh in-memory database with all tables created."""
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
def upstream():
    return FakeUpstream()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def service(upstream, clock):
    return WeatherService(
        fetch_raw_series=upstream,
        policy=ABSOLUTE_DELTA,
        window_size=24,
        server_ttl=30 * 60,
        client_ttl=5 * 60,
        tz=datetime.timezone.utc,
        clock=clock,
    )


@pytest.fixture
def client(service):
    """TestClient wired to the in-memory service; startup hooks are not run."""
    app.dependency_overrides[get_weather_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()

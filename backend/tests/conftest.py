"""Pytest configuration and fixtures for Voyage Planner tests.

The API runs against an in-memory SQLite database (aiosqlite) and the
Redis list cache is disabled, so the suite needs no external services.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("FORM_TIMEZONE", "UTC")

from typing import AsyncGenerator

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from voyage_planner.client.api import VoyageApiClient
from voyage_planner.client.notifications import NotificationCenter
from voyage_planner.client.query_cache import QueryCache
from voyage_planner.database import Base, get_db
from voyage_planner.main import app
from voyage_planner.models import UnitType, Vessel


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine():
    """Fresh in-memory database per test."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine) -> AsyncGenerator[AsyncSession, None]:
    session_factory = async_sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def client(db_session) -> AsyncGenerator[httpx.AsyncClient, None]:
    """HTTP client bound to the app with get_db overridden."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def api(db_session) -> AsyncGenerator[VoyageApiClient, None]:
    """VoyageApiClient talking to the app in-process."""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with VoyageApiClient(
        base_url="http://test", transport=httpx.ASGITransport(app=app)
    ) as api_client:
        yield api_client

    app.dependency_overrides.clear()


# ── Test Data Fixtures ───────────────────────────────────────────

@pytest_asyncio.fixture
async def reference_data(db_session: AsyncSession) -> dict:
    """Two vessels and three unit types with fixed ids."""
    vessels = [
        Vessel(id="v1", name="Crown Seaways"),
        Vessel(id="v2", name="Pearl Seaways"),
    ]
    unit_types = [
        UnitType(id="u1", name="Trailer", default_length=13.6),
        UnitType(id="u2", name="Car", default_length=4.5),
        UnitType(id="u3", name="Van", default_length=6.0),
    ]
    db_session.add_all(vessels + unit_types)
    await db_session.commit()
    return {"vessels": vessels, "unit_types": unit_types}


@pytest.fixture
def valid_payload() -> dict:
    return {
        "departure": "2025-01-01T10:00:00.000Z",
        "arrival": "2025-01-02T10:00:00.000Z",
        "portOfLoading": "Copenhagen",
        "portOfDischarge": "Oslo",
        "vessel": "v1",
        "unitTypes": ["u1", "u2"],
    }


@pytest.fixture
def query_cache() -> QueryCache:
    return QueryCache()


@pytest.fixture
def notifications() -> NotificationCenter:
    return NotificationCenter()


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
    config.addinivalue_line("markers", "api: API endpoint tests")

# ==== SHARED TEST FIXTURES AND CONFIGURATION ==== #

"""
Shared test fixtures and configuration.

Every test that touches storage gets a fresh in-memory SQLite database;
API tests drive the FastAPI application through an httpx ASGI transport.
"""

import os
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ==== FORCE ENVIRONMENT SETUP BEFORE ANY IMPORTS ==== #

# Set environment variables BEFORE importing any application modules
os.environ.update({
    "APP_ENV": "test",
    "DATABASE_URL": "sqlite+aiosqlite:///:memory:",
    "LOG_LEVEL": "WARNING",
    "CURRENCY_CODE": "INR",
    "CURRENCY_LOCALE": "en_IN",
})

import boxship.storage.db as db_module  # noqa: E402
from boxship.main import create_app  # noqa: E402
from boxship.services.box_store import BoxStore  # noqa: E402
from boxship.storage.db import create_tables, close_database, get_session, init_database  # noqa: E402


# ==== DATABASE FIXTURES ==== #


@pytest_asyncio.fixture
async def database():
    """
    Fresh in-memory database with all tables created.

    The engine is disposed afterwards so the next test starts empty.
    """
    db_module.engine = None
    db_module.SessionLocal = None

    init_database()
    await create_tables()
    yield
    await close_database()


@pytest_asyncio.fixture
async def db_session(database):
    """Database session bound to the fresh database."""
    async with get_session() as session:
        yield session


@pytest.fixture
def fixed_clock():
    """
    Clock returning strictly increasing timestamps one minute apart.

    Returns:
        Callable[[], datetime]: Deterministic clock for the box store
    """
    start = datetime(2025, 8, 16, 10, 0, 0, tzinfo=timezone.utc)
    ticks = {"count": 0}

    def clock() -> datetime:
        value = start + timedelta(minutes=ticks["count"])
        ticks["count"] += 1
        return value

    return clock


@pytest.fixture
def box_store(db_session, fixed_clock):
    """Box store with a deterministic clock."""
    return BoxStore(db_session, clock=fixed_clock)


# ==== APPLICATION FIXTURES ==== #


@pytest_asyncio.fixture
async def app(database):
    """FastAPI application wired to the fresh database."""
    return create_app()


@pytest_asyncio.fixture
async def client(app):
    """
    Create test client.

    Returns:
        AsyncClient: HTTP test client instance
    """
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# ==== FORM DATA FIXTURES ==== #


@pytest.fixture
def valid_form():
    """Box form data that passes every validation rule."""
    return {
        "receiver_name": " Alice ",
        "weight": 2.5,
        "box_color": "255,0,0",
        "destination_country": "SWEDEN",
    }


@pytest.fixture
def empty_form():
    """Untouched box form with every field blank."""
    return {
        "receiver_name": "",
        "weight": 0,
        "box_color": "",
        "destination_country": "",
    }

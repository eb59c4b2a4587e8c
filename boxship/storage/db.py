# ==== DATABASE CONNECTION AND SESSION MANAGEMENT ==== #

"""
Database connection and session management for Boxship.

This module provides async SQLAlchemy connectivity, driver normalization
for Postgres URLs, table creation and session lifecycle management.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    create_async_engine,
    async_sessionmaker,
    AsyncSession,
    AsyncEngine
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from boxship.settings import settings
from boxship.observability.metrics import db_connections_active


# ==== SQLALCHEMY CONFIGURATION ==== #

# SQLAlchemy base for model definitions
Base = declarative_base()

# Global engine and session factory instances
engine: AsyncEngine | None = None
SessionLocal: async_sessionmaker[AsyncSession] | None = None


# ==== DATABASE INITIALIZATION ==== #

def normalize_database_url(db_url: str) -> str:
    """
    Rewrite Postgres URLs to use the asyncpg driver.

    Args:
        db_url (str): Configured database URL

    Returns:
        str: URL usable by ``create_async_engine``
    """
    if db_url.startswith("postgresql") and not db_url.startswith("postgresql+asyncpg://"):
        db_url = db_url.replace("postgresql+psycopg://", "postgresql+asyncpg://")
        db_url = db_url.replace("postgresql://", "postgresql+asyncpg://")

    # asyncpg spells the SSL parameter differently
    if "sslmode=require" in db_url:
        db_url = db_url.replace("sslmode=require", "ssl=require")

    return db_url


def init_database(db_url: str | None = None) -> None:
    """
    Initialize database engine and session factory.

    Args:
        db_url (str | None): Override for ``settings.DATABASE_URL``
    """
    global engine, SessionLocal

    if engine is not None:
        return

    db_url = normalize_database_url(db_url or settings.DATABASE_URL)

    engine_kwargs = {"echo": settings.DATABASE_ECHO}

    # In-memory SQLite lives inside a single connection
    if db_url.startswith("sqlite") and ":memory:" in db_url:
        engine_kwargs["poolclass"] = StaticPool
        engine_kwargs["connect_args"] = {"check_same_thread": False}

    engine = create_async_engine(db_url, **engine_kwargs)

    SessionLocal = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def create_tables() -> None:
    """Create all tables registered on ``Base`` if they do not exist."""
    if engine is None:
        init_database()

    # Register models on the metadata
    from boxship.storage import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@asynccontextmanager
async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session with automatic cleanup.

    Yields:
        AsyncSession: Database session

    Raises:
        Exception: If the unit of work fails; the session is rolled back
    """
    if SessionLocal is None:
        init_database()

    async with SessionLocal() as session:
        db_connections_active.inc()
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            db_connections_active.dec()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency for database sessions.

    Yields:
        AsyncSession: Database session for request handling
    """
    async with get_session() as session:
        yield session


async def close_database() -> None:
    """Close database connections on shutdown."""
    global engine, SessionLocal
    if engine is not None:
        await engine.dispose()
        engine = None
        SessionLocal = None

"""Async database session management.

This module provides the async SQLAlchemy engine, the session factory
and first-time PostGIS setup. The engine is created on first use so
the in-memory store backend never needs a database driver connection.
"""

from functools import lru_cache
from typing import AsyncGenerator

from loguru import logger
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from rentgeo.core.config import settings
from rentgeo.models.base import Base
from rentgeo.models.location import Location  # noqa: F401
from rentgeo.models.property import Property  # noqa: F401


@lru_cache
def get_engine() -> AsyncEngine:
    """Create the async engine with connection pooling.

    ``statement_timeout`` makes PostgreSQL cancel runaway spatial
    queries and surface an error instead of hanging the request.
    """
    return create_async_engine(
        settings.SQLALCHEMY_DATABASE_URI,
        echo=settings.DEBUG,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        connect_args={
            "server_settings": {"statement_timeout": str(settings.STATEMENT_TIMEOUT_MS)},
        },
    )


@lru_cache
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=get_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Provide an async database session.

    This is a FastAPI dependency that yields an async session, commits
    when the request succeeds and rolls back when it fails, so a failed
    location update never leaves a partial write.

    Yields:
        AsyncSession: SQLAlchemy async session for database operations.
    """
    async with get_session_factory()() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def init_database(engine: AsyncEngine | None = None) -> None:
    """Enable PostGIS and create all tables.

    Safe to run repeatedly; both steps are idempotent.

    Args:
        engine: Engine to initialize, defaults to the application engine.
    """
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.execute(text("CREATE EXTENSION IF NOT EXISTS postgis"))
        logger.info("PostGIS extension enabled")
        await conn.run_sync(Base.metadata.create_all)
        logger.info("Tables created: {}", ", ".join(sorted(Base.metadata.tables)))

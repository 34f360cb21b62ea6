"""Async database engine and session factory.

Provides async connectivity using the SQLAlchemy 2.0 asyncio extension
(asyncpg for PostgreSQL, aiosqlite for local runs and tests).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from scribe.config import settings

# Module-level engine (initialized lazily)
_engine: AsyncEngine | None = None
_session_factory: async_sessionmaker[AsyncSession] | None = None


def get_engine() -> AsyncEngine:
    """Get or create the async database engine."""
    global _engine
    if _engine is None:
        options: dict[str, Any] = {"echo": settings.db_echo}
        # SQLite uses a static pool without sizing options
        if not settings.database_url.startswith("sqlite"):
            options.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_timeout=settings.db_pool_timeout,
                pool_recycle=settings.db_pool_recycle,
                pool_pre_ping=True,
            )
        _engine = create_async_engine(settings.database_url, **options)
    return _engine


def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Get or create the session factory."""
    global _session_factory
    if _session_factory is None:
        _session_factory = async_sessionmaker(
            get_engine(),
            class_=AsyncSession,
            expire_on_commit=False,
        )
    return _session_factory


@asynccontextmanager
async def session_context() -> AsyncIterator[AsyncSession]:
    """Provide a transactional scope around a series of operations.

    Usage:
        async with session_context() as session:
            service = ArticleService(session, cache, invalidator)
            await service.update(1, ArticleUpdate(title="x"), user_id=7)
    """
    session = get_session_factory()()
    try:
        yield session
        await session.commit()
    except Exception:
        await session.rollback()
        raise
    finally:
        await session.close()


async def init_db() -> None:
    """Create tables if they don't exist.

    For production, use migrations instead.
    """
    from scribe.persistence.tables import Base

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        _session_factory = None


async def health_check() -> bool:
    """Check database connectivity."""
    try:
        async with session_context() as session:
            await session.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError):
        return False

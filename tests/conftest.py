"""Global pytest configuration and fixtures.

Provides an in-memory CacheStore and an in-memory SQLite session so the
cache core and the article service can be tested without Redis or
PostgreSQL.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import datetime, timezone
from fnmatch import fnmatchcase

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from scribe.errors import CacheUnavailableError
from scribe.models import Article, AuthorSummary
from scribe.persistence.tables import Base


class FakeCacheStore:
    """Dict-backed CacheStore with Redis glob matching.

    Failures can be switched on per operation (fail_ops) or per key
    (fail_keys); every call is recorded in calls. Failures raise
    CacheUnavailableError unless raw_errors is set, in which case the plain
    ConnectionError a third-party client would raise escapes instead.
    """

    def __init__(self) -> None:
        self.data: dict[str, bytes] = {}
        self.ttls: dict[str, int] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_ops: set[str] = set()
        self.fail_keys: set[str] = set()
        self.raw_errors = False

    def _record(self, operation: str, key: str) -> None:
        self.calls.append((operation, key))
        if operation in self.fail_ops or key in self.fail_keys:
            error = ConnectionError("connection refused")
            if self.raw_errors:
                raise error
            raise CacheUnavailableError(operation, key, error)

    async def get(self, key: str) -> bytes | None:
        self._record("get", key)
        return self.data.get(key)

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        self._record("set", key)
        self.data[key] = value
        self.ttls[key] = ttl_seconds

    async def delete(self, key: str) -> int:
        self._record("delete", key)
        self.ttls.pop(key, None)
        return 1 if self.data.pop(key, None) is not None else 0

    async def keys(self, pattern: str) -> list[str]:
        self._record("scan", pattern)
        return [key for key in self.data if fnmatchcase(key, pattern)]

    async def exists(self, key: str) -> bool:
        self._record("exists", key)
        return key in self.data

    async def ping(self) -> bool:
        return "ping" not in self.fail_ops

    def calls_for(self, operation: str) -> list[str]:
        return [key for op, key in self.calls if op == operation]


@pytest.fixture
def cache_store() -> FakeCacheStore:
    return FakeCacheStore()


@pytest.fixture
def failing_store() -> FakeCacheStore:
    """Store that raises CacheUnavailableError on every call."""
    store = FakeCacheStore()
    store.fail_ops = {"get", "set", "delete", "scan", "exists", "ping"}
    return store


@pytest.fixture
def raw_failing_store(failing_store: FakeCacheStore) -> FakeCacheStore:
    """Store whose failures are plain ConnectionErrors."""
    failing_store.raw_errors = True
    return failing_store


@pytest.fixture
def make_article():
    """Factory for Article models."""

    def _make(
        article_id: int = 1,
        author_id: int = 7,
        title: str = "Test Article",
        published_at: datetime | None = None,
    ) -> Article:
        return Article(
            id=article_id,
            title=title,
            description="Test Description",
            published_at=published_at or datetime(2025, 9, 29, 6, 33, 48, 13000, tzinfo=timezone.utc),
            author_id=author_id,
            author=AuthorSummary(id=author_id, email=f"author{author_id}@example.com"),
        )

    return _make


@pytest_asyncio.fixture
async def db_engine() -> AsyncIterator[AsyncEngine]:
    """Async engine on a fresh in-memory SQLite database with tables created."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    factory = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        try:
            yield session
        finally:
            await session.rollback()

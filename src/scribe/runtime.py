"""Application wiring for Scribe.

Builds the cache components from settings and manages the lifecycle of the
Redis and database connections. Library code never reaches for these
globals: the cache store is always passed in, so tests and alternative hosts
can wire their own.

Usage:
    async with lifespan() as runtime:
        async with session_context() as session:
            page = await runtime.service(session).find_all(page=1, limit=10)
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession

from scribe.cache.invalidation import ArticleCacheInvalidator
from scribe.cache.read_through import ReadThroughCache
from scribe.cache.redis import CacheStore, RedisCacheStore, close_redis, get_redis
from scribe.config import settings
from scribe.observability.logging import configure_logging
from scribe.observability.metrics import get_metrics
from scribe.persistence.db import close_db
from scribe.services.articles import ArticleService

logger = logging.getLogger(__name__)

PROBE_KEY = "scribe:probe"


@dataclass
class Runtime:
    """Cache components shared by all requests of one process."""

    store: CacheStore | None = None
    cache: ReadThroughCache | None = None
    invalidator: ArticleCacheInvalidator | None = None

    def service(self, session: AsyncSession) -> ArticleService:
        """Article service bound to one session."""
        return ArticleService(session, cache=self.cache, invalidator=self.invalidator)


def build_runtime(store: CacheStore | None) -> Runtime:
    """Assemble read and invalidation paths around one cache store."""
    if store is None:
        return Runtime()
    return Runtime(
        store=store,
        cache=ReadThroughCache(store),
        invalidator=ArticleCacheInvalidator(store),
    )


async def probe(store: CacheStore) -> bool:
    """Write and read back a short-lived key to confirm the cache works."""
    await store.set(PROBE_KEY, b"pong", 5)
    return await store.get(PROBE_KEY) == b"pong"


@asynccontextmanager
async def lifespan() -> AsyncIterator[Runtime]:
    """Manage process lifecycle.

    On startup:
    - Configure logging
    - Initialize Prometheus metrics
    - Connect to Redis (when caching is enabled) and check it answers

    On shutdown:
    - Close Redis connection
    - Close database connections
    """
    configure_logging(json_format=settings.log_json, level=settings.log_level)
    get_metrics()
    logger.info(f"Starting {settings.app_name} ({settings.env})")

    store: CacheStore | None = None
    if settings.cache_enabled:
        store = RedisCacheStore(await get_redis())
        # The service stays correct without Redis, so an unreachable cache is not fatal
        if not await store.ping():
            logger.warning("Redis is not reachable, reads will fall through to the database")
    else:
        logger.info("Article cache disabled")

    try:
        yield build_runtime(store)
    finally:
        await close_redis()
        await close_db()
        logger.info("Shutdown complete")

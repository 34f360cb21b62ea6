"""Read-through access to cached articles.

Implements get-or-load-and-cache for single articles and list pages:
1. Build the cache key
2. Return the cached value on hit (the loader is not called)
3. On miss, call the loader, store the result with a TTL, return it

The cache is an optimization, never a dependency for correctness: a failing
GET is treated as a miss and a failing SET is logged and ignored. Absence is
never cached, so a NotFoundError always comes from a fresh store lookup.

There is no single-flight coordination: concurrent misses on the same key
each call the loader and each write the cache (last write wins).
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from pydantic import BaseModel

from scribe.cache.keys import CacheKeys
from scribe.cache.redis import CacheStore, record_store_failure
from scribe.cache.serialization import CorruptCacheValue, decode, encode
from scribe.config import settings
from scribe.errors import NotFoundError
from scribe.models import Article, ArticleFilters, ArticlePage
from scribe.observability.metrics import record_cache_hit, record_cache_miss

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

ItemLoader = Callable[[int], Awaitable[Article | None]]
ListLoader = Callable[[int, int, ArticleFilters], Awaitable[tuple[list[Article], int]]]


class ReadThroughCache:
    """Cache-aside reads for articles."""

    def __init__(
        self,
        store: CacheStore,
        item_ttl: int | None = None,
        list_ttl: int | None = None,
    ):
        self.store = store
        self.item_ttl = item_ttl if item_ttl is not None else settings.cache_item_ttl
        self.list_ttl = list_ttl if list_ttl is not None else settings.cache_list_ttl

    async def get_item(self, article_id: int, loader: ItemLoader) -> Article:
        """Get one article, loading it on cache miss.

        Raises:
            NotFoundError: if the loader finds no article.
        """
        key = CacheKeys.item_key(article_id)
        cached = await self._read(key, Article, "item")
        if cached is not None:
            return cached

        article = await loader(article_id)
        if article is None:
            raise NotFoundError("Article", article_id)

        await self._write(key, article, self.item_ttl)
        return article

    async def get_list(
        self,
        page: int,
        limit: int,
        filters: ArticleFilters,
        loader: ListLoader,
    ) -> ArticlePage:
        """Get one page of articles, running the query on cache miss."""
        key = CacheKeys.list_key(page, limit, filters)
        cached = await self._read(key, ArticlePage, "list")
        if cached is not None:
            return cached

        items, total = await loader(page, limit, filters)
        result = ArticlePage(items=items, total=total, page=page, limit=limit)

        await self._write(key, result, self.list_ttl)
        return result

    async def _read(self, key: str, model_type: type[M], cache_type: str) -> M | None:
        try:
            data = await self.store.get(key)
        except Exception as e:
            logger.warning(f"Cache read failed, falling back to store: {e}")
            record_store_failure("get", e)
            record_cache_miss(cache_type)
            return None

        if data is None:
            logger.debug(f"Cache miss: {key}")
            record_cache_miss(cache_type)
            return None

        try:
            value = decode(model_type, data)
        except CorruptCacheValue as e:
            logger.warning(f"Discarding undecodable cache value for {key}: {e}")
            record_cache_miss(cache_type)
            return None

        logger.debug(f"Cache hit: {key}")
        record_cache_hit(cache_type)
        return value

    async def _write(self, key: str, value: BaseModel, ttl: int) -> None:
        try:
            await self.store.set(key, encode(value), ttl)
        except Exception as e:
            logger.warning(f"Cache write failed, serving uncached result: {e}")
            record_store_failure("set", e)

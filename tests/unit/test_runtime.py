"""Tests for runtime wiring."""

from unittest.mock import AsyncMock, patch

import pytest

from scribe.cache.invalidation import ArticleCacheInvalidator
from scribe.cache.read_through import ReadThroughCache
from scribe.runtime import PROBE_KEY, build_runtime, lifespan, probe


class TestBuildRuntime:
    def test_with_store(self, cache_store) -> None:
        runtime = build_runtime(cache_store)

        assert runtime.store is cache_store
        assert isinstance(runtime.cache, ReadThroughCache)
        assert isinstance(runtime.invalidator, ArticleCacheInvalidator)
        assert runtime.cache.store is runtime.invalidator.store

    def test_without_store(self) -> None:
        runtime = build_runtime(None)

        assert runtime.cache is None
        assert runtime.invalidator is None

    def test_service_shares_components(self, cache_store) -> None:
        runtime = build_runtime(cache_store)
        service = runtime.service(AsyncMock())

        assert service.cache is runtime.cache
        assert service.invalidator is runtime.invalidator


class TestProbe:
    @pytest.mark.asyncio
    async def test_round_trip(self, cache_store) -> None:
        assert await probe(cache_store) is True
        assert cache_store.ttls[PROBE_KEY] == 5

    @pytest.mark.asyncio
    async def test_value_mismatch(self, cache_store) -> None:
        cache_store.get = AsyncMock(return_value=None)
        assert await probe(cache_store) is False


class TestLifespan:
    @pytest.mark.asyncio
    async def test_unreachable_cache_is_not_fatal(self, failing_store) -> None:
        """Startup continues with a store that doesn't answer PING."""
        with (
            patch("scribe.runtime.configure_logging"),
            patch("scribe.runtime.get_redis", AsyncMock()),
            patch("scribe.runtime.RedisCacheStore", return_value=failing_store),
            patch("scribe.runtime.close_redis", AsyncMock()) as close_redis,
            patch("scribe.runtime.close_db", AsyncMock()) as close_db,
        ):
            async with lifespan() as runtime:
                assert runtime.store is failing_store
                assert runtime.cache is not None

        close_redis.assert_awaited_once()
        close_db.assert_awaited_once()

"""Tests for Prometheus metrics recording."""

from unittest.mock import AsyncMock

import pytest

from scribe.cache.read_through import ReadThroughCache
from scribe.observability.metrics import (
    MetricsRegistry,
    get_metrics,
    record_cache_error,
    record_keys_invalidated,
)


def _sample(name: str, labels: dict[str, str] | None = None) -> float:
    value = get_metrics()._registry.get_sample_value(name, labels or {})
    return value or 0.0


class TestMetricsRegistry:
    def test_initialize_is_idempotent(self) -> None:
        registry = MetricsRegistry()
        registry.initialize()
        counter = registry.cache_hits_total
        registry.initialize()
        assert registry.cache_hits_total is counter

    def test_exposition_format(self) -> None:
        output = get_metrics().generate_latest()
        assert b"scribe_cache_hits_total" in output
        assert b"scribe_db_query_duration_seconds" in output


class TestRecorders:
    def test_cache_error(self) -> None:
        before = _sample("scribe_cache_errors_total", {"operation": "scan"})
        record_cache_error("scan")
        assert _sample("scribe_cache_errors_total", {"operation": "scan"}) == before + 1

    def test_keys_invalidated_ignores_zero(self) -> None:
        before = _sample("scribe_cache_keys_invalidated_total")
        record_keys_invalidated(0)
        record_keys_invalidated(3)
        assert _sample("scribe_cache_keys_invalidated_total") == before + 3

    @pytest.mark.asyncio
    async def test_read_through_counts_hits_and_misses(self, cache_store, make_article) -> None:
        hits = _sample("scribe_cache_hits_total", {"cache_type": "item"})
        misses = _sample("scribe_cache_misses_total", {"cache_type": "item"})
        cache = ReadThroughCache(cache_store)
        loader = AsyncMock(return_value=make_article(5))

        await cache.get_item(5, loader)
        await cache.get_item(5, loader)

        assert _sample("scribe_cache_misses_total", {"cache_type": "item"}) == misses + 1
        assert _sample("scribe_cache_hits_total", {"cache_type": "item"}) == hits + 1

    @pytest.mark.asyncio
    async def test_foreign_store_errors_counted(self, raw_failing_store, make_article) -> None:
        """Errors a store raises without wrapping are still counted."""
        before = _sample("scribe_cache_errors_total", {"operation": "get"})
        cache = ReadThroughCache(raw_failing_store)

        await cache.get_item(5, AsyncMock(return_value=make_article(5)))

        assert _sample("scribe_cache_errors_total", {"operation": "get"}) == before + 1

    @pytest.mark.asyncio
    async def test_wrapped_errors_not_counted_twice(self, failing_store, make_article) -> None:
        """CacheUnavailableError was already counted by RedisCacheStore."""
        before = _sample("scribe_cache_errors_total", {"operation": "get"})
        cache = ReadThroughCache(failing_store)

        await cache.get_item(5, AsyncMock(return_value=make_article(5)))

        assert _sample("scribe_cache_errors_total", {"operation": "get"}) == before

"""Prometheus metrics for Scribe.

Provides metrics collection and exposure:
- Cache metrics (hits, misses, errors, latency, invalidated keys)
- Database metrics (query time)

Usage:
    from scribe.observability.metrics import get_metrics

    metrics = get_metrics()
    metrics.cache_hits_total.labels(cache_type="item").inc()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from prometheus_client import CollectorRegistry, Counter, Histogram, generate_latest

from scribe.config import settings

logger = logging.getLogger(__name__)


@dataclass
class MetricsRegistry:
    """Registry for Prometheus metrics."""

    # Cache metrics
    cache_hits_total: Any = None
    cache_misses_total: Any = None
    cache_errors_total: Any = None
    cache_operation_duration_seconds: Any = None
    cache_keys_invalidated_total: Any = None

    # Database metrics
    db_query_duration_seconds: Any = None

    # Internal state
    _initialized: bool = field(default=False, repr=False)
    _registry: CollectorRegistry | None = field(default=None, repr=False)

    def initialize(self) -> None:
        """Initialize Prometheus metrics."""
        if self._initialized:
            return

        if not settings.enable_metrics:
            logger.info("Metrics are disabled")
            self._initialized = True
            return

        self._registry = CollectorRegistry()

        self.cache_hits_total = Counter(
            "scribe_cache_hits_total",
            "Cache hits",
            ["cache_type"],
            registry=self._registry,
        )

        self.cache_misses_total = Counter(
            "scribe_cache_misses_total",
            "Cache misses",
            ["cache_type"],
            registry=self._registry,
        )

        self.cache_errors_total = Counter(
            "scribe_cache_errors_total",
            "Cache store failures (swallowed)",
            ["operation"],
            registry=self._registry,
        )

        self.cache_operation_duration_seconds = Histogram(
            "scribe_cache_operation_duration_seconds",
            "Cache operation latency in seconds",
            ["operation"],
            buckets=(0.0001, 0.0005, 0.001, 0.005, 0.01, 0.025, 0.05),
            registry=self._registry,
        )

        self.cache_keys_invalidated_total = Counter(
            "scribe_cache_keys_invalidated_total",
            "Cache keys deleted by write invalidation",
            registry=self._registry,
        )

        self.db_query_duration_seconds = Histogram(
            "scribe_db_query_duration_seconds",
            "Database query latency in seconds",
            ["operation"],
            buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
            registry=self._registry,
        )

        self._initialized = True
        logger.info("Prometheus metrics initialized")

    def generate_latest(self) -> bytes:
        """Generate Prometheus metrics in exposition format."""
        if self._registry is None:
            return b"# Metrics disabled\n"
        return generate_latest(self._registry)


# Global metrics registry
metrics_registry = MetricsRegistry()


def get_metrics() -> MetricsRegistry:
    """Get the global metrics registry.

    Initializes metrics on first access.
    """
    if not metrics_registry._initialized:
        metrics_registry.initialize()
    return metrics_registry


def record_cache_hit(cache_type: str) -> None:
    """Record cache hit."""
    metrics = get_metrics()
    if metrics.cache_hits_total:
        metrics.cache_hits_total.labels(cache_type=cache_type).inc()


def record_cache_miss(cache_type: str) -> None:
    """Record cache miss."""
    metrics = get_metrics()
    if metrics.cache_misses_total:
        metrics.cache_misses_total.labels(cache_type=cache_type).inc()


def record_cache_error(operation: str) -> None:
    metrics = get_metrics()
    if metrics.cache_errors_total:
        metrics.cache_errors_total.labels(operation=operation).inc()


def record_cache_operation(operation: str, duration: float) -> None:
    """Record cache operation duration.

    Args:
        operation: Cache operation (get, set, delete, scan, exists)
        duration: Operation duration in seconds
    """
    metrics = get_metrics()
    if metrics.cache_operation_duration_seconds:
        metrics.cache_operation_duration_seconds.labels(operation=operation).observe(duration)


def record_keys_invalidated(count: int) -> None:
    metrics = get_metrics()
    if metrics.cache_keys_invalidated_total and count:
        metrics.cache_keys_invalidated_total.inc(count)


def record_db_query(operation: str, duration: float) -> None:
    """Record database query metrics.

    Args:
        operation: Query operation (get, list, create, update, delete)
        duration: Query duration in seconds
    """
    metrics = get_metrics()
    if metrics.db_query_duration_seconds:
        metrics.db_query_duration_seconds.labels(operation=operation).observe(duration)

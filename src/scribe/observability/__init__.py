"""Observability module for Scribe.

Provides structured logging and Prometheus metrics:
- JSON / console logging with request context
- Cache hit, miss and error counters
"""

from scribe.observability.logging import (
    LogContext,
    configure_logging,
    request_id_var,
    user_id_var,
)
from scribe.observability.metrics import get_metrics, metrics_registry

__all__ = [
    # Logging
    "configure_logging",
    "LogContext",
    "request_id_var",
    "user_id_var",
    # Metrics
    "metrics_registry",
    "get_metrics",
]

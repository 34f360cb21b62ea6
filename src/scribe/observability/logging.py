"""Structured logging for Scribe.

Provides:
- JSON-formatted logs for log aggregation
- Human-readable console logs for development
- Request / user context propagation via context variables

Usage:
    from scribe.observability.logging import LogContext, configure_logging

    configure_logging(json_format=settings.log_json, level=settings.log_level)

    with LogContext(request_id="abc-123", user_id="7"):
        logger.info("Updating article")  # Includes request_id and user_id
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")
user_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("user_id", default="")

_CONTEXT_VARS: dict[str, contextvars.ContextVar[str]] = {
    "request_id": request_id_var,
    "user_id": user_id_var,
}

# LogRecord attributes that are not "extra" fields
_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)


def _context() -> dict[str, str]:
    return {name: var.get() for name, var in _CONTEXT_VARS.items() if var.get()}


class JsonFormatter(logging.Formatter):
    """One JSON object per log record.

    Output format:
    {
        "timestamp": "2026-01-10T12:34:56.789+00:00",
        "level": "WARNING",
        "logger": "scribe.cache.read_through",
        "message": "Cache set failed, serving uncached result",
        "request_id": "abc-123",
        "cache_key": "article:5"
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        log_data.update(_context())

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                try:
                    json.dumps(value)
                    log_data[key] = value
                except (TypeError, ValueError):
                    log_data[key] = str(value)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for development.

    Output format:
    2026-01-10 12:34:56 | INFO | scribe.cache.invalidation | Invalidated 3 keys | req=abc-123
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname
        if self.use_colors:
            level = f"{self.COLORS.get(level, '')}{level}{self.RESET}"

        context = _context()
        parts = []
        if "request_id" in context:
            parts.append(f"req={context['request_id'][:8]}")
        if "user_id" in context:
            parts.append(f"user={context['user_id']}")
        suffix = f" | {' '.join(parts)}" if parts else ""

        result = f"{timestamp} | {level:8} | {record.name} | {record.getMessage()}{suffix}"
        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)
        return result


def configure_logging(
    json_format: bool = True,
    level: str = "INFO",
    use_colors: bool = True,
) -> None:
    """Configure application-wide logging.

    Args:
        json_format: Use JSON format (recommended for production)
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        use_colors: Use ANSI colors in console format
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(ConsoleFormatter(use_colors=use_colors))
    root_logger.addHandler(handler)

    # Reduce noise from third-party libraries
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)


class LogContext:
    """Context manager for adding temporary log context.

    Usage:
        with LogContext(request_id="abc", user_id="7"):
            logger.info("Processing")
    """

    def __init__(self, **kwargs: Any) -> None:
        self.extra = kwargs
        self._tokens: dict[str, contextvars.Token[str]] = {}

    def __enter__(self) -> "LogContext":
        for name, var in _CONTEXT_VARS.items():
            if name in self.extra:
                self._tokens[name] = var.set(str(self.extra[name]))
        return self

    def __exit__(self, *args: Any) -> None:
        for name, token in self._tokens.items():
            _CONTEXT_VARS[name].reset(token)
        self._tokens.clear()

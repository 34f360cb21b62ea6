"""Redis cache store for Scribe.

Provides the CacheStore capability interface the cache core is written
against, and its redis-py asyncio implementation. Every Redis or socket
failure is re-raised as CacheUnavailableError so callers handle a single
exception type.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Protocol, TypeVar, cast

import redis.asyncio as redis
from redis.exceptions import RedisError

from scribe.config import settings
from scribe.errors import CacheUnavailableError
from scribe.observability.metrics import record_cache_error, record_cache_operation

if TYPE_CHECKING:
    from redis.asyncio import Redis

T = TypeVar("T")

# Module-level connection pool, used for application wiring only
_redis_client: Redis | None = None


async def get_redis() -> Redis:
    """Get or create the Redis client.

    Uses connection pooling for efficient connection management.
    """
    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(  # type: ignore[no-untyped-call]
            settings.redis_url,
            decode_responses=False,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_socket_timeout,
        )
    return _redis_client


async def close_redis() -> None:
    """Close Redis connections."""
    global _redis_client
    if _redis_client is not None:
        await _redis_client.aclose()
        _redis_client = None


def record_store_failure(operation: str, error: Exception) -> None:
    """Count a store failure that RedisCacheStore did not already record."""
    if not isinstance(error, CacheUnavailableError):
        record_cache_error(operation)


class CacheStore(Protocol):
    """Key-value operations the cache core depends on.

    Implementations should raise CacheUnavailableError on failure, but callers
    in the cache core contain any exception a store raises.
    """

    async def get(self, key: str) -> bytes | None: ...

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None: ...

    async def delete(self, key: str) -> int: ...

    async def keys(self, pattern: str) -> list[str]: ...

    async def exists(self, key: str) -> bool: ...

    async def ping(self) -> bool: ...


class RedisCacheStore:
    """CacheStore backed by a redis-py asyncio client."""

    def __init__(self, client: Redis, scan_count: int | None = None):
        self.client = client
        self.scan_count = scan_count or settings.cache_scan_count

    async def _call(self, operation: str, key: str, awaitable: Awaitable[T]) -> T:
        start = time.perf_counter()
        try:
            return await awaitable
        except (RedisError, OSError) as e:
            record_cache_error(operation)
            raise CacheUnavailableError(operation, key, e) from e
        finally:
            record_cache_operation(operation, time.perf_counter() - start)

    async def get(self, key: str) -> bytes | None:
        value = await self._call("get", key, self.client.get(key))
        return cast(bytes | None, value)

    async def set(self, key: str, value: bytes, ttl_seconds: int) -> None:
        await self._call("set", key, self.client.set(key, value, ex=ttl_seconds))

    async def delete(self, key: str) -> int:
        return cast(int, await self._call("delete", key, self.client.delete(key)))

    async def keys(self, pattern: str) -> list[str]:
        """Collect keys matching a glob pattern.

        Uses SCAN rather than KEYS so large keyspaces don't block the server.
        """
        return await self._call("scan", pattern, self._scan(pattern))

    async def _scan(self, pattern: str) -> list[str]:
        found: list[str] = []
        async for key in self.client.scan_iter(match=pattern, count=self.scan_count):
            found.append(key.decode() if isinstance(key, bytes) else key)
        return found

    async def exists(self, key: str) -> bool:
        return bool(await self._call("exists", key, self.client.exists(key)))

    async def ping(self) -> bool:
        """Check Redis connectivity."""
        try:
            await cast(Awaitable[bool], self.client.ping())
            return True
        except (RedisError, OSError):
            return False

"""Cache layer for Scribe.

Provides Redis caching with the cache-aside pattern:
- Read-through access for single articles and list pages
- TTL-based expiration (short for lists, longer for items)
- Pattern-based invalidation of every list page on any article write
"""

from scribe.cache.invalidation import ArticleCacheInvalidator, InvalidationReport
from scribe.cache.keys import CacheKeys
from scribe.cache.read_through import ReadThroughCache
from scribe.cache.redis import CacheStore, RedisCacheStore, close_redis, get_redis

__all__ = [
    # Keys and store
    "CacheKeys",
    "CacheStore",
    "RedisCacheStore",
    "get_redis",
    "close_redis",
    # Read path
    "ReadThroughCache",
    # Write path
    "ArticleCacheInvalidator",
    "InvalidationReport",
]

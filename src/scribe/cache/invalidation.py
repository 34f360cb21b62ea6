"""Write-triggered cache invalidation.

After an article is created, updated or deleted, every cache entry that could
now be stale is removed:
1. The article's own item key
2. Every list key, found by SCAN over the list namespace

Any write can shift page boundaries and totals of any list query, not only
lists whose filters match the article, so all list pages are dropped rather
than the subset whose filters match. The author-scoped and unscoped patterns
are matched as well and merged with the catch-all; each key is deleted once.

Deletions are best-effort: a failing lookup or delete is logged and the
remaining keys are still processed. A concurrent read may re-fill a key right
after it is deleted with pre-write data; that window is bounded by the key's
TTL.

Example:
    invalidator = ArticleCacheInvalidator(RedisCacheStore(await get_redis()))
    report = await invalidator.invalidate(article_id=1, author_id=7)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from scribe.cache.keys import CacheKeys
from scribe.cache.redis import CacheStore, record_store_failure
from scribe.config import settings
from scribe.models import Article
from scribe.observability.metrics import record_keys_invalidated

logger = logging.getLogger(__name__)


@dataclass
class InvalidationReport:
    """Outcome of one invalidation call."""

    deleted: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    failed_patterns: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        """True when no lookup or deletion failed."""
        return not self.failed and not self.failed_patterns


class ArticleCacheInvalidator:
    """Deletes the cache entries a write to an article can make stale.

    With legacy_index_cleanup enabled the per-article index key written by
    older deployments is removed too. Reads never create index keys.
    """

    def __init__(self, store: CacheStore, legacy_index_cleanup: bool | None = None):
        self.store = store
        self.legacy_index_cleanup = (
            legacy_index_cleanup
            if legacy_index_cleanup is not None
            else settings.cache_legacy_index_cleanup
        )

    async def invalidate(self, article_id: int, author_id: int) -> InvalidationReport:
        """Invalidate caches affected by a write to one article."""
        report = InvalidationReport()

        # dict preserves insertion order and dedupes keys matched by several patterns
        keys: dict[str, None] = {CacheKeys.item_key(article_id): None}
        for key in await self._match(CacheKeys.list_patterns(author_id), report):
            keys.setdefault(key, None)
        if self.legacy_index_cleanup:
            keys.setdefault(CacheKeys.index_key(article_id), None)

        await self._delete_all(keys, report)
        logger.info(
            f"Invalidated article {article_id} (author {author_id}): "
            f"{len(report.deleted)} keys deleted, {len(report.failed)} failed"
        )
        return report

    async def invalidate_article(self, article: Article) -> InvalidationReport:
        return await self.invalidate(article.id, article.author_id)

    async def invalidate_all_lists(self) -> InvalidationReport:
        """Drop every cached list page, leaving item entries alone."""
        report = InvalidationReport()
        keys = dict.fromkeys(await self._match([CacheKeys.all_lists_pattern()], report))
        await self._delete_all(keys, report)
        logger.info(f"Invalidated all list caches: {len(report.deleted)} keys deleted")
        return report

    async def _match(self, patterns: list[str], report: InvalidationReport) -> list[str]:
        matched: list[str] = []
        for pattern in patterns:
            try:
                matched.extend(await self.store.keys(pattern))
            except Exception as e:
                logger.warning(f"Cache key lookup failed, continuing: {e}")
                record_store_failure("scan", e)
                report.failed_patterns.append(pattern)
        return matched

    async def _delete_all(self, keys: dict[str, None], report: InvalidationReport) -> None:
        for key in keys:
            try:
                await self.store.delete(key)
            except Exception as e:
                logger.warning(f"Cache delete failed, continuing: {e}")
                record_store_failure("delete", e)
                report.failed.append(key)
                continue
            logger.debug(f"Deleted cache key: {key}")
            report.deleted.append(key)
        record_keys_invalidated(len(report.deleted))

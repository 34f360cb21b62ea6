"""Cache key schema for Scribe.

Key formats:
- item:  article:{id}
- index: article:index:{id}
- list:  articles:list:page:{page}:limit:{limit}:author:{author_id|all}:after:{after|all}
         with a trailing :before:{before} segment only when that bound is set

Datetime bounds are rendered as ISO 8601 in UTC. The fixed segment order is
what lets a single glob pattern select every list key, or every list key
scoped to one author.
"""

from __future__ import annotations

import re
from datetime import datetime

from scribe.models import ArticleFilters, ensure_utc

_LIST_KEY_RE = re.compile(
    r"^articles:list:page:(?P<page>\d+):limit:(?P<limit>\d+)"
    r":author:(?P<author>[^:]+):after:(?P<after>.+?)(?::before:(?P<before>.+))?$"
)


class CacheKeys:
    """Cache key generator for articles."""

    ITEM_PREFIX = "article"
    LIST_PREFIX = "articles:list"
    ALL = "all"

    @classmethod
    def item_key(cls, article_id: int) -> str:
        """Key for a single article."""
        return f"{cls.ITEM_PREFIX}:{article_id}"

    @classmethod
    def index_key(cls, article_id: int) -> str:
        """Key for the legacy per-article index of populated keys."""
        return f"{cls.ITEM_PREFIX}:index:{article_id}"

    @classmethod
    def list_key(cls, page: int, limit: int, filters: ArticleFilters | None = None) -> str:
        """Key for one page of a filtered article list."""
        filters = filters or ArticleFilters()
        author = str(filters.author_id) if filters.author_id is not None else cls.ALL
        key = (
            f"{cls.LIST_PREFIX}:page:{page}:limit:{limit}"
            f":author:{author}:after:{cls._bound(filters.published_after)}"
        )
        if filters.published_before is not None:
            key += f":before:{cls._bound(filters.published_before)}"
        return key

    @classmethod
    def _bound(cls, value: datetime | None) -> str:
        if value is None:
            return cls.ALL
        return ensure_utc(value).isoformat()

    # -------------------------------------------------------------------------
    # Invalidation patterns (Redis glob syntax, used with SCAN MATCH)
    # -------------------------------------------------------------------------

    @classmethod
    def all_lists_pattern(cls) -> str:
        return f"{cls.LIST_PREFIX}:*"

    @classmethod
    def author_lists_pattern(cls, author_id: int) -> str:
        return f"{cls.LIST_PREFIX}:*:author:{author_id}:*"

    @classmethod
    def unscoped_lists_pattern(cls) -> str:
        return f"{cls.LIST_PREFIX}:*:author:{cls.ALL}:*"

    @classmethod
    def list_patterns(cls, author_id: int) -> list[str]:
        """Every pattern whose matches must be dropped after a write by author_id."""
        return [
            cls.all_lists_pattern(),
            cls.author_lists_pattern(author_id),
            cls.unscoped_lists_pattern(),
        ]

    @classmethod
    def parse_key(cls, key: str) -> dict[str, str] | None:
        """Parse a cache key into its components.

        Returns None if the key doesn't belong to the article namespaces.
        """
        match = _LIST_KEY_RE.match(key)
        if match:
            parsed = {"kind": "list", **match.groupdict()}
            if parsed["before"] is None:
                parsed["before"] = cls.ALL
            return parsed

        parts = key.split(":")
        if parts[0] != cls.ITEM_PREFIX:
            return None
        if len(parts) == 2 and parts[1].isdigit():
            return {"kind": "item", "id": parts[1]}
        if len(parts) == 3 and parts[1] == "index" and parts[2].isdigit():
            return {"kind": "index", "id": parts[2]}
        return None

"""Article service: store writes, cached reads, write invalidation.

Reads go through ReadThroughCache with the repository as loader. Writes go to
the relational store, are committed, and then hand the article to the
invalidator. Committing first keeps a racing fill from reading the
pre-write row after its key was deleted (the remaining race is bounded by
the TTL).

Passing cache=None / invalidator=None runs the service uncached.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from scribe.cache.invalidation import ArticleCacheInvalidator
from scribe.cache.read_through import ReadThroughCache
from scribe.config import settings
from scribe.errors import DataStoreError, ForbiddenError, InvalidFiltersError, NotFoundError
from scribe.models import Article, ArticleCreate, ArticleFilters, ArticlePage, ArticleUpdate
from scribe.observability.logging import LogContext
from scribe.persistence.repositories import ArticleRepository, UserRepository
from scribe.persistence.tables import ArticleTable

logger = logging.getLogger(__name__)

FiltersInput = ArticleFilters | Mapping[str, Any] | None


def parse_filters(filters: FiltersInput) -> ArticleFilters:
    """Build ArticleFilters from a model, a mapping of query params, or None.

    Mapping entries whose value is None are treated as absent.

    Raises:
        InvalidFiltersError: on unknown dimensions, invalid values or an
            unsupported input type.
    """
    if filters is None:
        return ArticleFilters()
    if isinstance(filters, ArticleFilters):
        return filters
    if not isinstance(filters, Mapping):
        raise InvalidFiltersError(f"Unsupported filters type: {type(filters).__name__}")
    try:
        return ArticleFilters.model_validate(
            {name: value for name, value in filters.items() if value is not None}
        )
    except ValidationError as e:
        raise InvalidFiltersError(f"Invalid article filters: {e}") from e


class ArticleService:
    """Article operations with cache-aside reads."""

    def __init__(
        self,
        session: AsyncSession,
        cache: ReadThroughCache | None = None,
        invalidator: ArticleCacheInvalidator | None = None,
    ):
        self.session = session
        self.articles = ArticleRepository(session)
        self.users = UserRepository(session)
        self.cache = cache
        self.invalidator = invalidator

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def find_all(
        self, page: int = 1, limit: int = 10, filters: FiltersInput = None
    ) -> ArticlePage:
        """List articles, newest first."""
        if page < 1:
            raise InvalidFiltersError("page must be >= 1")
        if not 1 <= limit <= settings.page_size_max:
            raise InvalidFiltersError(f"limit must be between 1 and {settings.page_size_max}")
        parsed = parse_filters(filters)

        if self.cache is None:
            items, total = await self.articles.list_page(page, limit, parsed)
            return ArticlePage(items=items, total=total, page=page, limit=limit)
        return await self.cache.get_list(page, limit, parsed, self.articles.list_page)

    async def find_one(self, article_id: int) -> Article:
        """Get one article.

        Raises:
            NotFoundError: if the article doesn't exist.
        """
        if self.cache is None:
            article = await self.articles.get(article_id)
            if article is None:
                raise NotFoundError("Article", article_id)
            return article
        return await self.cache.get_item(article_id, self.articles.get)

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create(self, data: ArticleCreate, user_id: int) -> Article:
        with LogContext(user_id=user_id):
            author = await self.users.get(user_id)
            if author is None:
                raise NotFoundError("User", user_id)

            article = await self.articles.create(data, author)
            await self._commit()
            logger.info(f"Created article {article.id}")

            await self._invalidate(article.id, article.author_id)
            return article

    async def update(self, article_id: int, data: ArticleUpdate, user_id: int) -> Article:
        """Apply a partial update; only the author may update.

        Raises:
            NotFoundError: if the article doesn't exist.
            ForbiddenError: if user_id is not the article's author.
        """
        with LogContext(user_id=user_id):
            row = await self._owned_row(article_id, user_id)
            article = await self.articles.update(row, data.changes())
            await self._commit()
            logger.info(f"Updated article {article_id}")

            await self._invalidate(article.id, article.author_id)
            return article

    async def remove(self, article_id: int, user_id: int) -> dict[str, str]:
        """Delete an article; only the author may delete.

        Raises:
            NotFoundError: if the article doesn't exist.
            ForbiddenError: if user_id is not the article's author.
        """
        with LogContext(user_id=user_id):
            row = await self._owned_row(article_id, user_id)
            author_id = row.author_id
            await self.articles.delete(row)
            await self._commit()
            logger.info(f"Deleted article {article_id}")

            await self._invalidate(article_id, author_id)
            return {"message": "Deleted successfully"}

    async def _owned_row(self, article_id: int, user_id: int) -> ArticleTable:
        row = await self.articles.get_row(article_id, with_author=True)
        if row is None:
            raise NotFoundError("Article", article_id)
        if row.author_id != user_id:
            raise ForbiddenError()
        return row

    async def _commit(self) -> None:
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            raise DataStoreError(f"Commit failed: {e}") from e

    async def _invalidate(self, article_id: int, author_id: int) -> None:
        if self.invalidator is None:
            return
        report = await self.invalidator.invalidate(article_id, author_id)
        if not report.complete:
            logger.warning(
                f"Partial cache invalidation for article {article_id}: "
                f"{len(report.failed)} keys and {len(report.failed_patterns)} patterns failed"
            )

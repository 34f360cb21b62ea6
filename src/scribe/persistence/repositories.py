"""Repositories for article persistence.

ArticleRepository returns pydantic Article models so that the cache layer and
callers never handle ORM rows. Rows are only exposed through get_row() for
ownership checks and in-place updates.

Every SQLAlchemyError is re-raised as DataStoreError.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload

from scribe.errors import DataStoreError
from scribe.models import Article, ArticleCreate, ArticleFilters, AuthorSummary
from scribe.observability.metrics import record_db_query
from scribe.persistence.tables import ArticleTable, UserTable


@contextmanager
def _query(operation: str) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    except SQLAlchemyError as e:
        raise DataStoreError(f"Article {operation} failed: {e}") from e
    finally:
        record_db_query(operation, time.perf_counter() - start)


def to_article(row: ArticleTable, with_author: bool = True) -> Article:
    """Convert an ORM row to the Article model.

    with_author requires the author relationship to be loaded already.
    """
    author = None
    if with_author and row.author is not None:
        author = AuthorSummary(id=row.author.id, email=row.author.email)
    return Article(
        id=row.id,
        title=row.title,
        description=row.description,
        published_at=row.published_at,
        author_id=row.author_id,
        author=author,
    )


class BaseRepository:
    def __init__(self, session: AsyncSession):
        self.session = session


class UserRepository(BaseRepository):
    """Lookups of article authors."""

    async def get(self, user_id: int) -> UserTable | None:
        with _query("get_user"):
            return await self.session.get(UserTable, user_id)

    async def create(self, email: str, password_hash: str) -> UserTable:
        """Insert a user. Hashing is the caller's responsibility."""
        with _query("create_user"):
            row = UserTable(email=email, password=password_hash)
            self.session.add(row)
            await self.session.flush()
            return row


class ArticleRepository(BaseRepository):
    """Repository for article reads and writes."""

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    async def get_row(self, article_id: int, with_author: bool = True) -> ArticleTable | None:
        stmt = select(ArticleTable).where(ArticleTable.id == article_id)
        if with_author:
            stmt = stmt.options(joinedload(ArticleTable.author))
        with _query("get"):
            result = await self.session.execute(stmt)
            return result.scalar_one_or_none()

    async def get(self, article_id: int, with_author: bool = True) -> Article | None:
        """Get one article, or None if it doesn't exist."""
        row = await self.get_row(article_id, with_author=with_author)
        if row is None:
            return None
        return to_article(row, with_author=with_author)

    async def list_page(
        self, page: int, limit: int, filters: ArticleFilters
    ) -> tuple[list[Article], int]:
        """Run a filtered, paginated query.

        Results are joined to their author and ordered by published_at
        descending (id descending breaks ties so pages are stable).

        Returns:
            Tuple of (items on this page, total matching rows).
        """
        conditions: list[Any] = []
        if filters.author_id is not None:
            conditions.append(ArticleTable.author_id == filters.author_id)
        if filters.published_after is not None:
            conditions.append(ArticleTable.published_at >= filters.published_after)
        if filters.published_before is not None:
            conditions.append(ArticleTable.published_at <= filters.published_before)

        count_stmt = select(func.count()).select_from(ArticleTable).where(*conditions)
        page_stmt = (
            select(ArticleTable)
            .options(joinedload(ArticleTable.author))
            .where(*conditions)
            .order_by(ArticleTable.published_at.desc(), ArticleTable.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )

        with _query("list"):
            total = (await self.session.execute(count_stmt)).scalar_one()
            rows = (await self.session.execute(page_stmt)).scalars().all()

        return [to_article(row) for row in rows], total

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    async def create(self, data: ArticleCreate, author: UserTable) -> Article:
        with _query("create"):
            row = ArticleTable(
                title=data.title,
                description=data.description,
                author_id=author.id,
                author=author,
            )
            self.session.add(row)
            await self.session.flush()
        return to_article(row)

    async def update(self, row: ArticleTable, changes: dict[str, Any]) -> Article:
        """Apply a partial update to a loaded row (author must be loaded)."""
        with _query("update"):
            for field_name, value in changes.items():
                setattr(row, field_name, value)
            await self.session.flush()
        return to_article(row)

    async def delete(self, row: ArticleTable) -> None:
        with _query("delete"):
            await self.session.delete(row)
            await self.session.flush()

"""Tests for article repositories against in-memory SQLite."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from sqlalchemy.exc import OperationalError

from scribe.errors import DataStoreError
from scribe.models import ArticleCreate, ArticleFilters
from scribe.persistence.repositories import ArticleRepository, UserRepository
from scribe.persistence.tables import ArticleTable, UserTable

BASE = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest_asyncio.fixture
async def seeded(db_session):
    """Two authors; author 1 has three articles, author 2 has one."""
    db_session.add_all(
        [
            UserTable(id=1, email="ada@example.com", password="hash"),
            UserTable(id=2, email="bob@example.com", password="hash"),
        ]
    )
    db_session.add_all(
        [
            ArticleTable(id=1, title="one", description="d", author_id=1, published_at=BASE),
            ArticleTable(
                id=2, title="two", description="d", author_id=1,
                published_at=BASE + timedelta(days=1),
            ),
            ArticleTable(
                id=3, title="three", description="d", author_id=2,
                published_at=BASE + timedelta(days=2),
            ),
            ArticleTable(
                id=4, title="four", description="d", author_id=1,
                published_at=BASE + timedelta(days=3),
            ),
        ]
    )
    await db_session.flush()
    return db_session


class TestArticleRepositoryReads:
    """Tests for get and list_page."""

    @pytest.mark.asyncio
    async def test_get_with_author(self, seeded) -> None:
        article = await ArticleRepository(seeded).get(3)

        assert article is not None
        assert article.title == "three"
        assert article.author is not None
        assert article.author.email == "bob@example.com"

    @pytest.mark.asyncio
    async def test_get_returns_utc_datetime(self, seeded) -> None:
        """SQLite hands back naive datetimes; the model makes them UTC."""
        article = await ArticleRepository(seeded).get(1)

        assert article is not None
        assert article.published_at == BASE
        assert article.published_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_get_missing(self, seeded) -> None:
        assert await ArticleRepository(seeded).get(999) is None

    @pytest.mark.asyncio
    async def test_list_newest_first(self, seeded) -> None:
        items, total = await ArticleRepository(seeded).list_page(1, 10, ArticleFilters())

        assert total == 4
        assert [a.id for a in items] == [4, 3, 2, 1]
        assert all(a.author is not None for a in items)

    @pytest.mark.asyncio
    async def test_list_paginates(self, seeded) -> None:
        repo = ArticleRepository(seeded)

        page1, total1 = await repo.list_page(1, 3, ArticleFilters())
        page2, total2 = await repo.list_page(2, 3, ArticleFilters())

        assert [a.id for a in page1] == [4, 3, 2]
        assert [a.id for a in page2] == [1]
        assert total1 == total2 == 4

    @pytest.mark.asyncio
    async def test_list_by_author(self, seeded) -> None:
        items, total = await ArticleRepository(seeded).list_page(1, 10, ArticleFilters(author_id=1))

        assert total == 3
        assert {a.author_id for a in items} == {1}

    @pytest.mark.asyncio
    async def test_list_by_published_range(self, seeded) -> None:
        filters = ArticleFilters(
            published_after=BASE + timedelta(days=1),
            published_before=BASE + timedelta(days=2),
        )
        items, total = await ArticleRepository(seeded).list_page(1, 10, filters)

        assert total == 2
        assert [a.id for a in items] == [3, 2]

    @pytest.mark.asyncio
    async def test_list_total_ignores_page(self, seeded) -> None:
        items, total = await ArticleRepository(seeded).list_page(5, 10, ArticleFilters())

        assert items == []
        assert total == 4


class TestArticleRepositoryWrites:
    """Tests for create, update and delete."""

    @pytest.mark.asyncio
    async def test_create(self, seeded) -> None:
        author = await UserRepository(seeded).get(2)
        assert author is not None

        article = await ArticleRepository(seeded).create(
            ArticleCreate(title="new", description="body"), author
        )

        assert article.id is not None
        assert article.author_id == 2
        assert article.author is not None
        assert article.published_at.tzinfo is not None

    @pytest.mark.asyncio
    async def test_update_partial(self, seeded) -> None:
        repo = ArticleRepository(seeded)
        row = await repo.get_row(1)
        assert row is not None

        article = await repo.update(row, {"title": "renamed"})

        assert article.title == "renamed"
        assert article.description == "d"

    @pytest.mark.asyncio
    async def test_delete(self, seeded) -> None:
        repo = ArticleRepository(seeded)
        row = await repo.get_row(1)
        assert row is not None

        await repo.delete(row)

        assert await repo.get(1) is None

    @pytest.mark.asyncio
    async def test_sqlalchemy_errors_become_data_store_errors(self) -> None:
        session = AsyncMock()
        session.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))

        with pytest.raises(DataStoreError):
            await ArticleRepository(session).get(1)


class TestUserRepository:
    @pytest.mark.asyncio
    async def test_create_and_get(self, db_session) -> None:
        repo = UserRepository(db_session)
        user = await repo.create("new@example.com", "hash")

        fetched = await repo.get(user.id)
        assert fetched is not None
        assert fetched.email == "new@example.com"

    @pytest.mark.asyncio
    async def test_get_missing(self, db_session) -> None:
        assert await UserRepository(db_session).get(42) is None

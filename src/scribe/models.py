"""Pydantic models for articles and article list queries.

Both read paths (cache hit and relational store) produce these models, so
callers always see the same types. Timestamps are normalized to timezone-aware
UTC datetimes: naive values coming from the store are taken as UTC.
"""

from __future__ import annotations

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def ensure_utc(value: datetime) -> datetime:
    """Return value as an aware UTC datetime."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class AuthorSummary(BaseModel):
    """Public view of an article's author."""

    model_config = ConfigDict(frozen=True)

    id: int
    email: str


class Article(BaseModel):
    """Snapshot of an article as returned to callers and stored in the cache."""

    model_config = ConfigDict(frozen=True)

    id: int
    title: str
    description: str
    published_at: datetime
    author_id: int
    author: AuthorSummary | None = None

    @field_validator("published_at")
    @classmethod
    def _published_at_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class ArticlePage(BaseModel):
    """One page of an article list query."""

    items: list[Article]
    total: int
    page: int
    limit: int


class ArticleFilters(BaseModel):
    """Closed set of list filter dimensions.

    - author_id: equality match on the article's author
    - published_after: inclusive lower bound on published_at
    - published_before: inclusive upper bound on published_at

    Unknown dimensions are rejected.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    author_id: int | None = Field(default=None, ge=1)
    published_after: datetime | None = None
    published_before: datetime | None = None

    @field_validator("published_after", "published_before")
    @classmethod
    def _bounds_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None

    @model_validator(mode="after")
    def _check_range(self) -> "ArticleFilters":
        if (
            self.published_after is not None
            and self.published_before is not None
            and self.published_after > self.published_before
        ):
            raise ValueError("published_after must not be later than published_before")
        return self


class ArticleCreate(BaseModel):
    """Input for creating an article."""

    model_config = ConfigDict(extra="forbid")

    title: str = Field(min_length=1, max_length=255)
    description: str = Field(min_length=1)


class ArticleUpdate(BaseModel):
    """Partial update of an article; only fields that are set are applied."""

    model_config = ConfigDict(extra="forbid")

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, min_length=1)

    def changes(self) -> dict[str, str]:
        """Fields explicitly provided by the caller, excluding nulls."""
        return {k: v for k, v in self.model_dump(exclude_unset=True).items() if v is not None}

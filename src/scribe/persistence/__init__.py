"""Persistence layer for Scribe.

This module provides:
- Async SQLAlchemy engine and session factory
- ORM models for users and articles
- Repositories returning pydantic models
"""

from scribe.persistence.db import get_engine, get_session_factory, init_db, session_context
from scribe.persistence.repositories import ArticleRepository, UserRepository
from scribe.persistence.tables import ArticleTable, Base, UserTable

__all__ = [
    # DB
    "get_engine",
    "get_session_factory",
    "init_db",
    "session_context",
    # Tables
    "Base",
    "UserTable",
    "ArticleTable",
    # Repositories
    "ArticleRepository",
    "UserRepository",
]

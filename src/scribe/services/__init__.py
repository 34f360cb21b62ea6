"""Application services for Scribe."""

from scribe.services.articles import ArticleService, parse_filters

__all__ = ["ArticleService", "parse_filters"]

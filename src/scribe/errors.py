"""Error taxonomy for Scribe.

Only data-correctness errors cross the service boundary:
- NotFoundError: entity absent in the relational store (never cached)
- ForbiddenError: caller does not own the entity it is mutating
- InvalidFiltersError: list query parameters outside the recognized set
- DataStoreError: relational store failure, fatal to the request

CacheUnavailableError is raised by the cache store client and is always
contained by the read-through accessor and the invalidation engine.
"""

from __future__ import annotations


class ScribeError(Exception):
    """Base exception for Scribe errors."""

    code = "Error"

    def __init__(self, text: str):
        self.text = text
        super().__init__(text)


class NotFoundError(ScribeError):
    """Resource not found."""

    code = "NotFound"

    def __init__(self, resource_type: str, identifier: object):
        self.resource_type = resource_type
        self.identifier = identifier
        super().__init__(f"{resource_type} with identifier '{identifier}' not found")


class ForbiddenError(ScribeError):
    """Caller is not allowed to mutate the resource."""

    code = "Forbidden"

    def __init__(self, text: str = "You are not the author"):
        super().__init__(text)


class InvalidFiltersError(ScribeError):
    """List query parameters are invalid."""

    code = "BadRequest"


class DataStoreError(ScribeError):
    """Relational store failure."""

    code = "DataStoreError"


class CacheUnavailableError(ScribeError):
    """Key-value store could not be reached or rejected the operation."""

    code = "CacheUnavailable"

    def __init__(self, operation: str, key: str, cause: BaseException | None = None):
        self.operation = operation
        self.key = key
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Cache {operation} failed for '{key}'{detail}")

"""Exceptions raised inside the cache store.

Public store operations never let these escape; they are caught at the
operation boundary and exposed through ``SQLiteCache.last_error``.
"""

from typing import Optional


class CacheError(Exception):
    """Base exception for the cache package."""


class CacheStorageError(CacheError):
    """A backend statement or value serialization failed."""

    def __init__(self, operation: str, key: Optional[str] = None, cause: Optional[BaseException] = None):
        self.operation = operation
        self.key = key
        self.cause = cause
        detail = f"{operation} failed"
        if key is not None:
            detail += f" for key {key!r}"
        if cause is not None:
            detail += f": {cause}"
        super().__init__(detail)

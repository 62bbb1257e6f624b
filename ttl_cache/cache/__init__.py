"""Cache module for TTL-Cache."""

from .errors import CacheError, CacheStorageError
from .record import Record, RecordState, state_of
from .store import SQLiteCache

__all__ = ["CacheError", "CacheStorageError", "Record", "RecordState", "SQLiteCache", "state_of"]

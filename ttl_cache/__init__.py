"""
TTL-Cache: SQLite-backed Key-Value Cache

A small key-value cache with time-to-live expiration, stored in an
embedded SQLite database on disk or in memory.
"""

from .cache.store import SQLiteCache

__version__ = "1.0.0"

__all__ = ["SQLiteCache"]

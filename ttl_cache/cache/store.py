"""
SQLite Cache Store Module

This module implements the key-value cache on top of an embedded SQLite
database, either a named file on disk or an in-process ``:memory:`` store.

Expiration is lazy: a record past its TTL is purged the next time get()
observes it, or when cleanup_expired() is called explicitly. Nothing runs
in the background.
"""

import json
import logging
import os
import sqlite3
import time
from typing import Any, Callable, Dict, Optional

from ..config.settings import settings
from .errors import CacheStorageError
from .record import Record, RecordState, state_of

logger = logging.getLogger(__name__)

MEMORY_PATH = ":memory:"


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class SQLiteCache:
    """
    Key-value cache with TTL expiration backed by SQLite.

    Operations:
    - put: Insert or fully replace a record, with optional TTL in milliseconds
    - get: Retrieve a decoded value, purging the record if it has expired
    - delete: Remove a record (succeeds whether or not it existed)
    - has_key: Check that a row exists, without looking at its TTL

    None of these raise. A failing backend statement turns into a False
    (or None for get) return value, and the exception is kept in
    ``last_error`` until the next operation succeeds.

    Storage schema:
        cache(key TEXT PRIMARY KEY, value TEXT NULL, ttl INTEGER NULL, UNIQUE(key))
        value NULL marks a key that is present without a payload.
        ttl is an absolute expiration time in milliseconds since epoch.

    Attributes:
        persistent: Whether records live in a database file on disk
        path: Database file path, or ":memory:" for an ephemeral store
        last_error: The most recent CacheStorageError, or None
    """

    def __init__(
            self,
            persistent: bool = False,
            path: Optional[str] = None,
            clock: Optional[Callable[[], int]] = None,
    ):
        """
        Open the backing store and ensure the schema exists.

        Args:
            persistent: Use a database file instead of an in-memory store
            path: Database file (default from settings.DB_PATH); ignored
                  when persistent is False
            clock: Callable returning the current time in milliseconds
                   (default: wall clock)

        Raises:
            CacheStorageError: If the database cannot be opened or the
                               schema cannot be created
        """
        self.persistent = persistent
        if persistent:
            self.path = os.fspath(path) if path is not None else settings.DB_PATH
        else:
            self.path = MEMORY_PATH
        self.table = settings.TABLE_NAME
        self.last_error: Optional[CacheStorageError] = None
        self._clock = clock if clock is not None else _wall_clock_ms

        try:
            if persistent:
                directory = os.path.dirname(self.path)
                if directory:
                    os.makedirs(directory, exist_ok=True)
            self._conn = sqlite3.connect(self.path)
            self._initialize_schema()
        except (sqlite3.Error, OSError) as exc:
            raise CacheStorageError("open", cause=exc) from exc

        logger.info(f"Opened cache at {self.path}")

    def _initialize_schema(self) -> None:
        with self._conn:
            self._conn.execute(
                f"""
                CREATE TABLE IF NOT EXISTS {self.table} (
                    key TEXT PRIMARY KEY,
                    value TEXT,
                    ttl INTEGER,
                    UNIQUE(key)
                )
                """
            )

    def _now(self) -> int:
        return self._clock()

    def _write(self, operation: str, key: Optional[str], sql: str, params: tuple = ()) -> sqlite3.Cursor:
        """Run one statement inside its own transaction."""
        try:
            with self._conn:
                return self._conn.execute(sql, params)
        except sqlite3.Error as exc:
            raise CacheStorageError(operation, key, exc) from exc

    def _read(self, operation: str, key: Optional[str], sql: str, params: tuple = ()) -> list:
        try:
            return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise CacheStorageError(operation, key, exc) from exc

    def _fetch(self, key: str, operation: str = "get") -> Optional[Record]:
        rows = self._read(
            operation, key,
            f"SELECT key, value, ttl FROM {self.table} WHERE key = ?", (key,),
        )
        return Record.from_row(rows[0]) if rows else None

    def _fail(self, error: CacheStorageError) -> None:
        self.last_error = error
        logger.warning(f"Cache {error}")

    @staticmethod
    def _serialize(key: str, value: Any) -> Optional[str]:
        if value is None:
            return None
        try:
            return json.dumps(value, separators=(",", ":"))
        except (TypeError, ValueError, RecursionError) as exc:
            raise CacheStorageError("serialize", key, exc) from exc

    @staticmethod
    def _decode(record: Record) -> Any:
        try:
            return json.loads(record.value)
        except (ValueError, RecursionError):
            logger.debug(f"Value for {record.key!r} is not JSON, returning raw text")
            return record.value

    def put(self, key: str, value: Any = None, ttl: Optional[int] = None) -> bool:
        """
        Insert or fully replace a record.

        Args:
            key: The key to store
            value: A JSON-serializable value, a string, or None to store a
                   presence-only marker
            ttl: Time-to-live in milliseconds (None = never expires)

        Returns:
            True on success, False if the value cannot be serialized,
            ttl is negative, or the write fails
        """
        try:
            if ttl is not None and ttl < 0:
                raise CacheStorageError("put", key, ValueError(f"negative ttl {ttl}"))
            expires_at = None if ttl is None else self._now() + ttl
            self._write(
                "put", key,
                f"INSERT OR REPLACE INTO {self.table} (key, value, ttl) VALUES (?, ?, ?)",
                (key, self._serialize(key, value), expires_at),
            )
        except CacheStorageError as exc:
            self._fail(exc)
            return False

        self.last_error = None
        return True

    def get(self, key: str) -> Any:
        """
        Retrieve the value for a key.

        Args:
            key: The key to look up

        Returns:
            - None if the key is absent, expired, or the lookup failed
            - True if the key was stored with a None value
            - The decoded value otherwise; text that is not valid JSON is
              returned unchanged
        """
        try:
            record = self._fetch(key)
        except CacheStorageError as exc:
            self._fail(exc)
            return None

        self.last_error = None
        state = state_of(record)
        if state is RecordState.ABSENT:
            return None

        if state is RecordState.PRESENCE_ONLY:
            return True

        if not record.is_expired(self._now()):
            return self._decode(record)

        # Lazy expiration
        logger.debug(f"Purging expired key {key!r}")
        self.delete(key)
        return None

    def delete(self, key: str) -> bool:
        """
        Delete a record.

        Args:
            key: The key to delete

        Returns:
            True whether or not the key existed, False if the delete failed
        """
        try:
            self._write("delete", key, f"DELETE FROM {self.table} WHERE key = ?", (key,))
        except CacheStorageError as exc:
            self._fail(exc)
            return False

        self.last_error = None
        return True

    def has_key(self, key: str) -> bool:
        """
        Check if a row exists for a key.

        The TTL is not consulted: a record that has expired but has not yet
        been purged by get() or cleanup_expired() still counts as present.

        Args:
            key: The key to check

        Returns:
            True if a row exists, False otherwise or if the lookup failed
        """
        try:
            record = self._fetch(key, operation="has_key")
        except CacheStorageError as exc:
            self._fail(exc)
            return False

        self.last_error = None
        return record is not None

    def cleanup_expired(self) -> int:
        """
        Remove all expired records (explicit sweep).

        Returns:
            Number of records removed, 0 if the sweep failed
        """
        try:
            cursor = self._write(
                "cleanup_expired", None,
                f"DELETE FROM {self.table} WHERE ttl IS NOT NULL AND ttl <= ?",
                (self._now(),),
            )
        except CacheStorageError as exc:
            self._fail(exc)
            return 0

        self.last_error = None
        if cursor.rowcount:
            logger.debug(f"Swept {cursor.rowcount} expired keys")
        return cursor.rowcount

    def size(self) -> int:
        """
        Get the number of rows in the store.

        Note: This includes expired rows that haven't been purged yet.
        """
        try:
            rows = self._read("size", None, f"SELECT COUNT(*) FROM {self.table}")
        except CacheStorageError as exc:
            self._fail(exc)
            return 0

        self.last_error = None
        return rows[0][0]

    def clear(self) -> bool:
        """Remove all rows from the store."""
        try:
            self._write("clear", None, f"DELETE FROM {self.table}")
        except CacheStorageError as exc:
            self._fail(exc)
            return False

        self.last_error = None
        return True

    def get_stats(self) -> Dict[str, Any]:
        """
        Get statistics about the store.

        Returns:
            Dictionary containing:
            - total_keys: Rows in the table
            - expired_keys: Rows past their TTL that are not yet purged
            - active_keys: Rows not past their TTL
            - persistent: Whether the store is file-backed
            - path: Database path
        """
        try:
            rows = self._read(
                "get_stats", None,
                f"SELECT COUNT(*), COALESCE(SUM(ttl IS NOT NULL AND ttl <= ?), 0) FROM {self.table}",
                (self._now(),),
            )
        except CacheStorageError as exc:
            self._fail(exc)
            total, expired = 0, 0
        else:
            self.last_error = None
            total, expired = rows[0]

        return {
            "total_keys": total,
            "expired_keys": expired,
            "active_keys": total - expired,
            "persistent": self.persistent,
            "path": self.path,
        }

    def close(self) -> None:
        """Close the backend connection. An in-memory store is discarded."""
        self._conn.close()
        logger.info(f"Closed cache at {self.path}")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

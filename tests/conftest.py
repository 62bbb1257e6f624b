"""
Pytest Configuration and Fixtures

This module provides shared fixtures and configuration for all tests.
"""

from typing import Generator

import pytest

from ttl_cache.cache.store import SQLiteCache
from ttl_cache.protocol.parser import ProtocolParser
from ttl_cache.shell import CacheShell


class FakeClock:
    """
    Manually advanced millisecond clock.

    Usage:
        clock = FakeClock()
        cache = SQLiteCache(clock=clock)
        clock.advance(1000)
    """

    def __init__(self, start: int = 1_700_000_000_000):
        self.now = start

    def __call__(self) -> int:
        return self.now

    def advance(self, millis: int) -> None:
        self.now += millis


# ============================================================================
# Cache Fixtures
# ============================================================================

@pytest.fixture
def clock() -> FakeClock:
    """Create a fake clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> Generator[SQLiteCache, None, None]:
    """Create a fresh in-memory cache driven by the fake clock."""
    store = SQLiteCache(clock=clock)
    yield store
    store.close()


@pytest.fixture
def wall_cache() -> Generator[SQLiteCache, None, None]:
    """Create a fresh in-memory cache using the real clock."""
    store = SQLiteCache()
    yield store
    store.close()


@pytest.fixture
def db_path(tmp_path) -> str:
    """Path for a database file inside the test's temp directory."""
    return str(tmp_path / "cache.sqlite")


@pytest.fixture
def persistent_cache(db_path: str, clock: FakeClock) -> Generator[SQLiteCache, None, None]:
    """Create a file-backed cache in a temp directory."""
    store = SQLiteCache(persistent=True, path=db_path, clock=clock)
    yield store
    store.close()


# ============================================================================
# Shell Fixtures
# ============================================================================

@pytest.fixture
def parser() -> ProtocolParser:
    """Create a ProtocolParser instance."""
    return ProtocolParser()


@pytest.fixture
def shell(cache: SQLiteCache) -> CacheShell:
    """Create a shell bound to the in-memory cache fixture."""
    return CacheShell(cache)


# ============================================================================
# Pytest Configuration
# ============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )

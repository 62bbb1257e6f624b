"""
TTL-Cache Configuration Settings

This module contains all configuration constants for the TTL cache and
its command shell. Values marked with an environment variable can be
overridden without touching code.
"""

import os
from dataclasses import dataclass


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


@dataclass
class Settings:
    """Cache configuration settings."""

    # Storage settings
    DB_PATH: str = os.environ.get("TTL_CACHE_DB_PATH", "cache.sqlite")
    PERSISTENT: bool = _env_flag("TTL_CACHE_PERSISTENT")
    TABLE_NAME: str = "cache"

    # Shell command limits
    MAX_KEY_LENGTH: int = 256
    MAX_VALUE_LENGTH: int = 4096

    # Logging settings
    DEBUG: bool = _env_flag("TTL_CACHE_DEBUG")
    LOG_LEVEL: str = os.environ.get("TTL_CACHE_LOG_LEVEL", "INFO")


# Global settings instance
settings = Settings()

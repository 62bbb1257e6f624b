"""
Cache Record Definitions

This module defines the row type stored in the backing table and the
tagged state a looked-up key can be in.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class RecordState(Enum):
    """What a lookup found for a key."""
    ABSENT = auto()
    PRESENCE_ONLY = auto()
    VALUE = auto()


@dataclass
class Record:
    """
    One row of the cache table.

    Attributes:
        key: Primary key of the row
        value: JSON text of the payload, or None for a presence-only marker
        ttl: Absolute expiration in milliseconds since epoch (None = never)
    """
    key: str
    value: Optional[str] = None
    ttl: Optional[int] = None

    @property
    def state(self) -> RecordState:
        """Tag the row as a presence marker or a stored payload."""
        if self.value is None:
            return RecordState.PRESENCE_ONLY
        return RecordState.VALUE

    def is_expired(self, now_ms: int) -> bool:
        """Check whether the row is dead at ``now_ms``."""
        return self.ttl is not None and self.ttl <= now_ms

    @classmethod
    def from_row(cls, row) -> "Record":
        """Build a Record from a ``(key, value, ttl)`` result row."""
        key, value, ttl = row
        return cls(key=key, value=value, ttl=ttl)


def state_of(record: Optional[Record]) -> RecordState:
    """Classify a lookup result, where None means no row was found."""
    if record is None:
        return RecordState.ABSENT
    return record.state

"""
Shell Command and Response Definitions

This module defines the data structures for shell commands and responses.
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Optional


class CommandType(Enum):
    """Enumeration of supported command types."""
    PUT = auto()
    GET = auto()
    DELETE = auto()
    EXISTS = auto()
    SWEEP = auto()
    STATS = auto()
    QUIT = auto()
    UNKNOWN = auto()


class ResponseStatus(Enum):
    """Enumeration of response statuses."""
    OK = "OK"
    ERROR = "ERROR"


@dataclass
class Command:
    """
    Represents a parsed shell command.

    Attributes:
        type: The type of command
        key: The key for the operation (empty for SWEEP, STATS, QUIT)
        value: The decoded value for PUT (None stores a presence marker)
        ttl: Time-to-live in milliseconds for PUT (None = no expiration)
        raw: The original raw command string
    """
    type: CommandType
    key: str = ""
    value: Any = None
    ttl: Optional[int] = None
    raw: str = ""

    @property
    def is_valid(self) -> bool:
        """Check if the command is valid for its type."""
        if self.type == CommandType.UNKNOWN:
            return False
        if self.type in (CommandType.QUIT, CommandType.SWEEP, CommandType.STATS):
            return True
        return bool(self.key)


@dataclass
class Response:
    """
    Outcome of one shell command, rendered as `<STATUS> [body]`.

    The body is either a short message (`stored`, `key not found`) or
    the JSON text of a value.
    """
    status: ResponseStatus
    body: str = ""

    @classmethod
    def ok(cls, body: str = "") -> "Response":
        return cls(status=ResponseStatus.OK, body=body)

    @classmethod
    def error(cls, body: str) -> "Response":
        return cls(status=ResponseStatus.ERROR, body=body)

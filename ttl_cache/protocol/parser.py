"""
Shell Protocol Parser Module

This module handles parsing of shell command lines and formatting of
responses for the TTL-Cache shell.
"""

import json
from typing import List, Optional

from .commands import Command, CommandType, Response
from ..config.settings import settings


class ProtocolParser:
    """
    Parser for the TTL-Cache shell commands.

    Format:
        Request:  <COMMAND> [ARGS...]
        Response: <STATUS> [DATA]

    Commands:
        PUT <key> <value> [ttl_ms]  -> OK stored | ERROR write failed
        GET <key>                   -> OK <json> | ERROR key not found
        DELETE <key>                -> OK deleted | ERROR delete failed
        EXISTS <key>                -> OK 1 | OK 0
        SWEEP                       -> OK <removed count>
        STATS                       -> OK <json>
        QUIT                        -> (session closed)

    Constraints:
        - Keys: max MAX_KEY_LENGTH characters, no whitespace
        - Values: max MAX_VALUE_LENGTH characters, one token; decoded
          as JSON when possible (``null`` stores a presence marker),
          otherwise kept as plain text
        - TTL: non-negative integer of milliseconds; omitted = no expiration
    """

    _KEY_COMMANDS = {
        "GET": CommandType.GET,
        "DELETE": CommandType.DELETE,
        "EXISTS": CommandType.EXISTS,
    }

    _BARE_COMMANDS = {
        "SWEEP": CommandType.SWEEP,
        "STATS": CommandType.STATS,
        "QUIT": CommandType.QUIT,
    }

    def __init__(self):
        """Initialize the parser with constraints from settings."""
        self.max_key_length = settings.MAX_KEY_LENGTH
        self.max_value_length = settings.MAX_VALUE_LENGTH

    def parse_request(self, data: str) -> Command:
        """
        Parse a raw command line into a Command object.

        Args:
            data: Raw command line (may include trailing newline)

        Returns:
            Command object representing the parsed request.
            Returns Command with type=UNKNOWN for invalid/malformed input.

        Examples:
            >>> parser = ProtocolParser()
            >>> cmd = parser.parse_request('PUT user {"id":1} 5000')
            >>> cmd.value
            {'id': 1}
            >>> cmd.ttl
            5000
        """
        raw = data.strip()
        return self.parse_tokens(raw.split(), raw)

    def parse_tokens(self, parts: List[str], raw: Optional[str] = None) -> Command:
        """
        Parse a command that is already split into tokens.

        Tokens are taken as given, so a value token may contain spaces
        (e.g. a quoted argument from the command line).

        Args:
            parts: Command name followed by its arguments
            raw: Original text for the Command (default: tokens joined by spaces)
        """
        if raw is None:
            raw = " ".join(parts)
        if not parts:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        command_name = parts[0].upper()

        if command_name == "PUT":
            return self._parse_put(parts, raw)
        if command_name in self._KEY_COMMANDS:
            return self._parse_key_command(self._KEY_COMMANDS[command_name], parts, raw)
        if command_name in self._BARE_COMMANDS:
            if len(parts) == 1:
                return Command(type=self._BARE_COMMANDS[command_name], raw=raw)
            return Command(type=CommandType.UNKNOWN, raw=raw)

        return Command(type=CommandType.UNKNOWN, raw=raw)

    def _parse_put(self, parts: list, raw: str) -> Command:
        """
        Parse a PUT command.

        Format: PUT <key> <value> [ttl_ms]
        """
        if len(parts) < 3 or len(parts) > 4:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        key, text = parts[1], parts[2]
        if len(key) > self.max_key_length or len(text) > self.max_value_length:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        ttl = None
        if len(parts) == 4:
            try:
                ttl = int(parts[3])
            except ValueError:
                return Command(type=CommandType.UNKNOWN, raw=raw)
            if ttl < 0:
                return Command(type=CommandType.UNKNOWN, raw=raw)

        return Command(
            type=CommandType.PUT,
            key=key,
            value=self._decode_value(text),
            ttl=ttl,
            raw=raw,
        )

    def _parse_key_command(self, command_type: CommandType, parts: list, raw: str) -> Command:
        """Parse GET, DELETE or EXISTS: <COMMAND> <key>."""
        if len(parts) != 2:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        key = parts[1]
        if len(key) > self.max_key_length:
            return Command(type=CommandType.UNKNOWN, raw=raw)

        return Command(type=command_type, key=key, raw=raw)

    @staticmethod
    def _decode_value(text: str):
        try:
            return json.loads(text)
        except (ValueError, RecursionError):
            return text

    @staticmethod
    def encode_value(value) -> str:
        """Encode a value returned by the cache for display."""
        return json.dumps(value, separators=(",", ":"))

    def format_response(self, response: Response) -> str:
        """
        Format a Response object into a response line.

        Args:
            response: Response object to format

        Returns:
            Formatted response string WITH trailing newline.

        Examples:
            >>> parser = ProtocolParser()
            >>> parser.format_response(Response.ok("stored"))
            'OK stored\\n'
            >>> parser.format_response(Response.ok('"hello"'))
            'OK "hello"\\n'
        """
        prefix = response.status.value
        if response.body:
            return f"{prefix} {response.body}\n"
        return f"{prefix}\n"

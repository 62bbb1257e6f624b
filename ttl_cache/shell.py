#!/usr/bin/env python3
"""
TTL-Cache Shell Entry Point

Command-line access to a TTL-Cache store, either one command per
invocation or as an interactive prompt.

Usage:
    python -m ttl_cache.shell                          # Interactive, in-memory store
    python -m ttl_cache.shell --persistent             # Interactive, cache.sqlite
    python -m ttl_cache.shell --persistent PUT k v 60000
    python -m ttl_cache.shell --db-path /tmp/c.sqlite GET k
    python -m ttl_cache.shell --debug                  # Enable debug logging

Environment Variables:
    TTL_CACHE_DB_PATH     - Database file used with --persistent
    TTL_CACHE_PERSISTENT  - Persist by default (true/false)
    TTL_CACHE_DEBUG       - Enable debug mode (true/false)
    TTL_CACHE_LOG_LEVEL   - Log level when not in debug mode
"""

import argparse
import json
import logging
import sys
from typing import Iterable, List, Optional

from .cache.errors import CacheStorageError
from .cache.store import SQLiteCache
from .config.settings import settings
from .protocol.commands import Command, CommandType, Response
from .protocol.parser import ProtocolParser

logger = logging.getLogger(__name__)

HELP_TEXT = """
TTL-Cache Commands:
-------------------
  PUT <key> <value> [ttl]   Store a value (optional TTL in milliseconds)
  GET <key>                 Retrieve the value for a key
  DELETE <key>              Delete a key
  EXISTS <key>              Check if a row exists (returns 1 or 0)
  SWEEP                     Remove all expired keys
  STATS                     Show store statistics
  QUIT                      Exit

Values are read as JSON when possible, otherwise as plain text:
  PUT user {"id":1}         Store a structure
  PUT done null             Store a presence-only marker (GET returns true)
  PUT token abc123 60000    Store "abc123" for 60 seconds
"""


class CacheShell:
    """
    Executes parsed shell commands against a SQLiteCache.

    Attributes:
        cache: The store commands run against
        parser: The ProtocolParser for parsing command lines
    """

    def __init__(self, cache: SQLiteCache):
        self.cache = cache
        self.parser = ProtocolParser()
        self._total_commands = 0

    def execute(self, command: Command) -> Response:
        """
        Execute a parsed command on the cache.

        Args:
            command: The Command object to execute

        Returns:
            Response object with the result
        """
        if not command.is_valid:
            return Response.error("invalid command")

        self._total_commands += 1

        if command.type == CommandType.PUT:
            if self.cache.put(command.key, command.value, ttl=command.ttl):
                return Response.ok("stored")
            return Response.error("write failed")

        if command.type == CommandType.GET:
            value = self.cache.get(command.key)
            if value is None:
                return Response.error("key not found")
            return Response.ok(self.parser.encode_value(value))

        if command.type == CommandType.DELETE:
            if self.cache.delete(command.key):
                return Response.ok("deleted")
            return Response.error("delete failed")

        if command.type == CommandType.EXISTS:
            return Response.ok("1" if self.cache.has_key(command.key) else "0")

        if command.type == CommandType.SWEEP:
            return Response.ok(str(self.cache.cleanup_expired()))

        if command.type == CommandType.STATS:
            stats = dict(self.cache.get_stats(), total_commands=self._total_commands)
            return Response.ok(json.dumps(stats))

        return Response.error("invalid command")

    def handle_line(self, line: str) -> Optional[str]:
        """
        Parse and execute one command line.

        Returns:
            The formatted response line, or None when the line is QUIT
        """
        return self._respond(self.parser.parse_request(line))

    def handle_tokens(self, tokens: List[str]) -> Optional[str]:
        """Like handle_line(), for a command already split into tokens."""
        return self._respond(self.parser.parse_tokens(tokens))

    def _respond(self, command: Command) -> Optional[str]:
        if command.type == CommandType.QUIT:
            return None
        return self.parser.format_response(self.execute(command))

    def run(self, lines: Iterable[str], out=None) -> None:
        """Execute command lines until input ends or QUIT is read."""
        out = out if out is not None else sys.stdout
        for line in lines:
            if not line.strip():
                continue
            response = self.handle_line(line)
            if response is None:
                break
            out.write(response)

    def interact(self) -> None:
        """Run an interactive prompt on stdin."""
        print("Type 'help' for commands.\n")
        try:
            while True:
                try:
                    line = input(">>> ").strip()
                except EOFError:
                    print()
                    break

                if not line:
                    continue
                if line.lower() == "help":
                    print(HELP_TEXT)
                    continue
                if line.lower() == "exit":
                    break

                response = self.handle_line(line)
                if response is None:
                    break
                print(response, end="")
        except KeyboardInterrupt:
            print("\nInterrupted.")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="TTL-Cache: SQLite-backed key-value cache with expiration",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--persistent",
        action="store_true",
        default=settings.PERSISTENT,
        help="Store records in a database file instead of memory",
    )

    parser.add_argument(
        "--db-path",
        type=str,
        default=None,
        help=f"Database file (implies --persistent; default {settings.DB_PATH})",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        default=settings.DEBUG,
        help="Enable debug logging",
    )

    parser.add_argument(
        "command",
        nargs="*",
        help=(
            "Command to run once, one argument per token "
            "(quote a value containing spaces); omit for an interactive prompt"
        ),
    )

    return parser.parse_intermixed_args(argv)


def setup_logging(debug: bool = False) -> None:
    """Configure logging based on debug flag."""
    level = logging.DEBUG if debug else getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(sys.stderr),
        ]
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the shell."""
    args = parse_args(argv)
    setup_logging(debug=args.debug)

    persistent = args.persistent or args.db_path is not None

    try:
        cache = SQLiteCache(persistent=persistent, path=args.db_path)
    except CacheStorageError as e:
        logger.error(f"Cannot open cache: {e}")
        return 1

    with cache:
        shell = CacheShell(cache)
        if args.command:
            response = shell.handle_tokens(args.command)
            if response is None:
                return 0
            sys.stdout.write(response)
            return 1 if response.startswith("ERROR") else 0

        shell.interact()
    return 0


if __name__ == "__main__":
    sys.exit(main())

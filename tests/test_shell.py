"""
Tests for the TTL-Cache shell

These tests verify command execution against a cache, line-by-line
sessions, and the console entry point.
"""

import io
import json

import pytest

from ttl_cache import shell as shell_module
from ttl_cache.cache.store import SQLiteCache
from ttl_cache.protocol.commands import Command, CommandType, ResponseStatus
from ttl_cache.shell import CacheShell, main


class TestShellExecute:
    """Test CacheShell.execute() and handle_line()."""

    def test_put_then_get(self, shell: CacheShell):
        assert shell.handle_line("PUT key value") == "OK stored\n"
        assert shell.handle_line("GET key") == 'OK "value"\n'

    def test_get_structure(self, shell: CacheShell):
        shell.handle_line('PUT x {"a":1}')

        assert shell.handle_line("GET x") == 'OK {"a":1}\n'
        assert shell.cache.get("x") == {"a": 1}

    def test_get_presence_marker(self, shell: CacheShell):
        shell.handle_line("PUT done null")
        assert shell.handle_line("GET done") == "OK true\n"

    def test_get_missing(self, shell: CacheShell):
        assert shell.handle_line("GET missing") == "ERROR key not found\n"

    def test_delete(self, shell: CacheShell):
        shell.handle_line("PUT key value")

        assert shell.handle_line("DELETE key") == "OK deleted\n"
        assert shell.handle_line("DELETE key") == "OK deleted\n"
        assert shell.handle_line("EXISTS key") == "OK 0\n"

    def test_exists(self, shell: CacheShell):
        shell.handle_line("PUT key value")
        assert shell.handle_line("EXISTS key") == "OK 1\n"

    def test_ttl_expiry(self, shell: CacheShell, clock):
        shell.handle_line("PUT key value 1000")
        clock.advance(1000)

        assert shell.handle_line("EXISTS key") == "OK 1\n"
        assert shell.handle_line("GET key") == "ERROR key not found\n"
        assert shell.handle_line("EXISTS key") == "OK 0\n"

    def test_sweep(self, shell: CacheShell, clock):
        shell.handle_line("PUT a 1 1000")
        shell.handle_line("PUT b 2 1000")
        shell.handle_line("PUT c 3")
        clock.advance(1000)

        assert shell.handle_line("SWEEP") == "OK 2\n"
        assert shell.handle_line("SWEEP") == "OK 0\n"

    def test_stats(self, shell: CacheShell):
        shell.handle_line("PUT a 1")
        response = shell.handle_line("STATS")

        assert response.startswith("OK ")
        stats = json.loads(response[3:])
        assert stats["total_keys"] == 1
        assert stats["total_commands"] == 2

    def test_invalid_command(self, shell: CacheShell):
        assert shell.handle_line("FLUSH everything") == "ERROR invalid command\n"

    def test_handle_tokens(self, shell: CacheShell):
        assert shell.handle_tokens(["PUT", "key", "two words"]) == "OK stored\n"
        assert shell.handle_line("GET key") == 'OK "two words"\n'
        assert shell.handle_tokens(["QUIT"]) is None

    def test_quit_returns_none(self, shell: CacheShell):
        assert shell.handle_line("QUIT") is None

    def test_execute_invalid_command_object(self, shell: CacheShell):
        response = shell.execute(Command(type=CommandType.GET))
        assert response.status == ResponseStatus.ERROR

    def test_write_failure(self, clock):
        store = SQLiteCache(clock=clock)
        store.close()

        closed_shell = CacheShell(store)

        assert closed_shell.handle_line("PUT key value") == "ERROR write failed\n"
        assert closed_shell.handle_line("DELETE key") == "ERROR delete failed\n"
        assert closed_shell.handle_line("GET key") == "ERROR key not found\n"


class TestShellRun:
    """Test CacheShell.run() sessions."""

    def test_run_session(self, shell: CacheShell):
        out = io.StringIO()
        lines = ["PUT key value\n", "\n", "GET key\n", "EXISTS key\n"]

        shell.run(lines, out=out)

        assert out.getvalue() == 'OK stored\nOK "value"\nOK 1\n'

    def test_run_stops_at_quit(self, shell: CacheShell):
        out = io.StringIO()

        shell.run(["PUT key value", "QUIT", "GET key"], out=out)

        assert out.getvalue() == "OK stored\n"


class TestMain:
    """Test the console entry point."""

    @pytest.fixture(autouse=True)
    def no_logging_setup(self, monkeypatch):
        monkeypatch.setattr(shell_module, "setup_logging", lambda debug=False: None)

    def test_put_and_get_across_invocations(self, db_path: str, capsys):
        assert main(["--db-path", db_path, "PUT", "key", '{"a":1}']) == 0
        assert main(["--db-path", db_path, "GET", "key"]) == 0

        assert capsys.readouterr().out == 'OK stored\nOK {"a":1}\n'

    def test_missing_key_exit_code(self, db_path: str, capsys):
        assert main(["--db-path", db_path, "GET", "missing"]) == 1
        assert capsys.readouterr().out == "ERROR key not found\n"

    def test_persistent_uses_settings_path(self, tmp_path, monkeypatch, capsys):
        path = str(tmp_path / "settings.sqlite")
        monkeypatch.setattr(shell_module.settings, "DB_PATH", path)

        assert main(["--persistent", "PUT", "key", "value"]) == 0
        assert main(["--persistent", "EXISTS", "key"]) == 0

        assert capsys.readouterr().out == "OK stored\nOK 1\n"

    def test_in_memory_does_not_persist(self, capsys):
        main(["PUT", "key", "value"])
        main(["GET", "key"])

        assert capsys.readouterr().out == "OK stored\nERROR key not found\n"

    def test_value_with_spaces(self, db_path: str, capsys):
        assert main(["--db-path", db_path, "PUT", "key", '{"a": 1}']) == 0
        assert main(["--db-path", db_path, "GET", "key"]) == 0

        assert capsys.readouterr().out == 'OK stored\nOK {"a":1}\n'

    def test_options_after_command(self, db_path: str, capsys):
        assert main(["PUT", "key", "value", "--db-path", db_path]) == 0
        assert main(["GET", "key", "--debug", "--db-path", db_path]) == 0

        assert capsys.readouterr().out == 'OK stored\nOK "value"\n'

    def test_open_failure(self, tmp_path):
        assert main(["--db-path", str(tmp_path), "GET", "key"]) == 1

    def test_interactive_session(self, monkeypatch, capsys):
        lines = iter(["help", "PUT key value", "GET key", "exit"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(lines))

        assert main([]) == 0

        out = capsys.readouterr().out
        assert "TTL-Cache Commands" in out
        assert 'OK "value"' in out

    def test_interactive_eof(self, monkeypatch, capsys):
        def raise_eof(prompt=""):
            raise EOFError

        monkeypatch.setattr("builtins.input", raise_eof)

        assert main([]) == 0

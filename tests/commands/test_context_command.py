"""Unit tests for the context sub-commands.

Uses the real ConfigService; conftest keeps its files inside tmp_path.
"""

from __future__ import annotations

import json

from typer.testing import CliRunner

from tasktree.main import app
from tasktree.services.config_service import get_config_service
from tasktree.utils.exit_codes import ERROR_INVALID_ARGS, SUCCESS

runner = CliRunner()


def _run(*args, input: str | None = None):
    return runner.invoke(app, ["context", *args], input=input, catch_exceptions=False)


def _names():
    get_config_service.cache_clear()
    return [ctx.name for ctx in get_config_service().list_contexts()]


class TestContextCommands:
    def test_bare_command_shows_active_context(self):
        result = _run()
        assert result.exit_code == SUCCESS, result.output
        assert "local" in result.output

    def test_list_json_marks_current(self):
        result = _run("list", "-o", "json")
        rows = json.loads(result.output)
        assert rows[0]["name"] == "local"
        assert rows[0]["current"] is True

    def test_list_table(self):
        result = _run("list")
        assert result.exit_code == SUCCESS
        assert "local" in result.output

    def test_add_memory_and_use(self):
        result = _run("add", "scratch", "--type", "memory", "--description", "throwaway")
        assert result.exit_code == SUCCESS, result.output
        assert "scratch" in _names()

        result = _run("use", "scratch")
        assert result.exit_code == SUCCESS, result.output
        get_config_service.cache_clear()
        assert get_config_service().get_current_context().name == "scratch"

    def test_add_local_defaults_source(self):
        result = _run("add", "work")
        assert result.exit_code == SUCCESS, result.output
        get_config_service.cache_clear()
        ctx = get_config_service().config.get_context("work")
        assert ctx.source.endswith("work.db")

    def test_add_remote_requires_source(self):
        result = _run("add", "cloud", "--type", "remote")
        assert result.exit_code == ERROR_INVALID_ARGS
        assert "cloud" not in _names()

    def test_add_bad_type(self):
        result = _run("add", "odd", "--type", "ftp")
        assert result.exit_code == ERROR_INVALID_ARGS

    def test_add_duplicate(self):
        result = _run("add", "local", "--type", "memory")
        assert result.exit_code == ERROR_INVALID_ARGS
        assert "already exists" in result.output

    def test_use_unknown(self):
        result = _run("use", "ghost")
        assert result.exit_code == ERROR_INVALID_ARGS
        assert "not found" in result.output

    def test_remove(self):
        _run("add", "scratch", "--type", "memory")
        result = _run("remove", "scratch", "--force")
        assert result.exit_code == SUCCESS, result.output
        assert _names() == ["local"]

    def test_remove_active_refused(self):
        result = _run("remove", "local", "-f")
        assert result.exit_code == ERROR_INVALID_ARGS
        assert "active" in result.output

    def test_remove_declined(self):
        _run("add", "scratch", "--type", "memory")
        result = _run("remove", "scratch", input="n\n")
        assert result.exit_code == SUCCESS
        assert "scratch" in _names()

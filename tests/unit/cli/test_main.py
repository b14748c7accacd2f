"""Tests for the ragdesk app callback: version, config errors, logging."""

from __future__ import annotations

import logging

from typer.testing import CliRunner

from ragdesk.cli.main import app

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.startswith("ragdesk ")


def test_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for command in ("init", "add", "ask", "list", "reprocess", "remove", "status"):
        assert command in result.output


def test_invalid_project_config_exits(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "ragdesk.yaml").write_text("chunking:\n  chunk_size: 0\n", encoding="utf-8")

    result = runner.invoke(app, ["suggest"])
    assert result.exit_code == 1
    assert "Invalid configuration" in result.output


def test_verbose_sets_debug_level(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    result = runner.invoke(app, ["--verbose", "init", str(tmp_path), "--no-global-config"])
    assert result.exit_code == 0
    assert logging.getLogger().level == logging.DEBUG


def test_log_level_from_config(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / "ragdesk.yaml").write_text("logging:\n  level: warning\n", encoding="utf-8")
    runner.invoke(app, ["init", str(tmp_path), "--no-global-config"])
    assert logging.getLogger().level == logging.WARNING

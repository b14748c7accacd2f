"""Tests for structlog setup."""

from __future__ import annotations

import json
import logging

import structlog

from ragdesk.logging_config import setup_logging


def _structlog_handlers():
    return [
        h
        for h in logging.getLogger().handlers
        if isinstance(h.formatter, structlog.stdlib.ProcessorFormatter)
    ]


def test_setup_logging_installs_single_handler():
    setup_logging("INFO")
    setup_logging("DEBUG")
    assert len(_structlog_handlers()) == 1
    assert logging.getLogger().level == logging.DEBUG


def test_noisy_provider_loggers_quieted():
    setup_logging("DEBUG")
    assert logging.getLogger("litellm").level == logging.WARNING
    assert logging.getLogger("httpx").level == logging.WARNING


def test_json_lines_on_stderr(capsys):
    setup_logging("INFO", json=True)
    logging.getLogger("ragdesk.test").info("chunk indexed")

    captured = capsys.readouterr()
    assert captured.out == ""
    record = json.loads(captured.err.strip().splitlines()[-1])
    assert record["event"] == "chunk indexed"
    assert record["level"] == "info"
    assert record["logger"] == "ragdesk.test"

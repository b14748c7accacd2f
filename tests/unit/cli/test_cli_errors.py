"""Tests for ragdesk rich error messages."""

from __future__ import annotations

import pytest

from ragdesk.cli.errors import (
    err_config,
    err_document_not_found,
    err_duplicate_document,
    err_file_not_found,
    err_invalid_file,
    err_invalid_transition,
    err_no_api_key,
    err_no_db,
    err_processing_failed,
)


def _has_action(msg: str) -> bool:
    """Every error must tell the user what to do next."""
    lower = msg.lower()
    return any(kw in lower for kw in ["run", "set:", "check", "fix", "supported", "only "])


def test_err_no_api_key_contains_env_var() -> None:
    msg = err_no_api_key("gemini")
    assert "'gemini'" in msg
    assert "export GEMINI_API_KEY=" in msg


def test_err_no_api_key_unknown_provider_fallback() -> None:
    assert "MYPROVIDER_API_KEY" in err_no_api_key("myprovider")


def test_err_no_db_mentions_init() -> None:
    msg = err_no_db("kb/.ragdesk.db")
    assert "kb/.ragdesk.db" in msg
    assert "ragdesk init" in msg


def test_err_duplicate_document_suggests_reprocess() -> None:
    msg = err_duplicate_document("abc-123")
    assert "ragdesk reprocess abc-123" in msg


def test_err_invalid_transition() -> None:
    msg = err_invalid_transition("abc", "PROCESSING", "INACTIVE")
    assert "PROCESSING" in msg
    assert "INACTIVE" in msg


@pytest.mark.parametrize("msg", [
    err_no_api_key("openai"),
    err_no_db(),
    err_config("chunking.chunk_size must be >= 1, got 0"),
    err_file_not_found("missing.pdf"),
    err_invalid_file("File is empty: 'a.txt'"),
    err_duplicate_document("abc"),
    err_document_not_found("abc"),
    err_invalid_transition("abc", "UPLOADED", "INACTIVE"),
    err_processing_failed("No chunk of the document could be processed"),
])
def test_errors_have_action(msg: str) -> None:
    assert _has_action(msg), msg

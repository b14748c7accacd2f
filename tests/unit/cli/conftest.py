"""Fixtures for CLI tests: an initialised project and patched providers."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from ragdesk.cli.main import app
from ragdesk.cli.runtime import open_db
from ragdesk.db.repository import DocumentRepository

HANDBOOK = (
    "Employees get twenty vacation days per year. "
    "Requests go through the HR portal at least two weeks in advance."
)


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def project(tmp_path, monkeypatch, runner):
    """Initialised knowledge base in tmp_path (the working directory)."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    result = runner.invoke(app, ["init", str(tmp_path), "--no-global-config"])
    assert result.exit_code == 0, result.output
    return tmp_path


@pytest.fixture
def fake_embed():
    with patch("ragdesk.rag.gateways.llm_client.embed", return_value=[0.1, 0.2, 0.3]) as mock_e:
        yield mock_e


@pytest.fixture
def fake_complete():
    with patch(
        "ragdesk.rag.gateways.llm_client.complete", return_value="You get twenty days."
    ) as mock_c:
        yield mock_c


@pytest.fixture
def handbook(project):
    path = project / "handbook.txt"
    path.write_text(HANDBOOK, encoding="utf-8")
    return path


@pytest.fixture
def documents(project):
    """Reads the project's document table."""
    conn = open_db(project / ".ragdesk.db")
    yield DocumentRepository(conn)
    conn.close()


@pytest.fixture
def added(runner, handbook, fake_embed, documents):
    """The handbook, uploaded and indexed; returns its document id."""
    result = runner.invoke(app, ["add", str(handbook), "--category", "hr"])
    assert result.exit_code == 0, result.output
    (doc,) = documents.list_documents()
    return doc.id

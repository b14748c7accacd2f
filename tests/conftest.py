"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from ragdesk.db.connection import Database
from ragdesk.db.models import Document
from ragdesk.db.schema import initialize


@pytest.fixture(autouse=True)
def _isolate_config(tmp_path, monkeypatch):
    """Keep tests away from the real ~/.ragdesk and RAGDESK_* variables."""
    monkeypatch.setattr("ragdesk.config._GLOBAL_CONFIG_PATH", tmp_path / "home" / "config.yaml")
    for var in ("RAGDESK_EMBEDDING_MODEL", "RAGDESK_GENERATION_MODEL", "RAGDESK_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def tmp_db(tmp_path):
    """File-based DB in tmp_path with schema initialized, closed after test."""
    db = Database(tmp_path / ".ragdesk.db")
    conn = db.connect()
    initialize(conn)
    yield conn
    conn.close()


@pytest.fixture
def make_document(tmp_path):
    """Factory for Document instances backed by a real text file."""

    def _make(
        doc_id: str = "doc-1",
        name: str = "handbook.txt",
        text: str = "Employees get twenty vacation days per year.",
        **overrides,
    ) -> Document:
        path = tmp_path / f"{doc_id}.txt"
        path.write_text(text, encoding="utf-8")
        fields = dict(
            id=doc_id,
            name=name,
            file_name=path.name,
            content_hash=f"hash-{doc_id}",
            size_bytes=path.stat().st_size,
            file_path=str(path),
            media_type="text/plain",
        )
        fields.update(overrides)
        return Document(**fields)

    return _make

"""Tests for DocumentRepository."""

from __future__ import annotations

import sqlite3

import pytest

from ragdesk.db.models import Document, DocumentStatus
from ragdesk.db.repository import DocumentRepository


@pytest.fixture
def repo(tmp_db):
    return DocumentRepository(tmp_db)


def _doc(id="doc-1", name="handbook.pdf", hash="abc123", category="GENERAL", **kw):
    return Document(
        id=id,
        name=name,
        file_name=f"{id}.pdf",
        content_hash=hash,
        size_bytes=1024,
        file_path=f"/storage/{id}.pdf",
        media_type="application/pdf",
        category=category,
        **kw,
    )


# ------------------------------------------------------------------
# add / get
# ------------------------------------------------------------------

def test_add_and_get(repo):
    repo.add(_doc(description="Employee handbook", owner="alice"))
    result = repo.get("doc-1")
    assert result is not None
    assert result.name == "handbook.pdf"
    assert result.description == "Employee handbook"
    assert result.owner == "alice"
    assert result.status is DocumentStatus.UPLOADED


def test_get_not_found(repo):
    assert repo.get("nonexistent") is None


def test_add_duplicate_id_raises(repo):
    repo.add(_doc())
    with pytest.raises(sqlite3.IntegrityError):
        repo.add(_doc(hash="other"))


def test_find_by_hash(repo):
    repo.add(_doc(hash="deadbeef"))
    assert repo.find_by_hash("deadbeef").id == "doc-1"
    assert repo.find_by_hash("missing") is None


# ------------------------------------------------------------------
# save
# ------------------------------------------------------------------

def test_save_updates_status(repo):
    doc = _doc()
    repo.add(doc)
    doc.transition_to(DocumentStatus.PROCESSING)
    repo.save(doc)
    assert repo.get("doc-1").status is DocumentStatus.PROCESSING


def test_save_inserts_when_missing(repo):
    repo.save(_doc(id="new"))
    assert repo.get("new") is not None


def test_save_refreshes_modified_at(repo):
    doc = _doc()
    doc.modified_at = "2000-01-01T00:00:00+00:00"
    repo.add(doc)
    repo.save(doc)
    assert repo.get("doc-1").modified_at != "2000-01-01T00:00:00+00:00"


# ------------------------------------------------------------------
# list / counts
# ------------------------------------------------------------------

def test_list_documents_empty(repo):
    assert repo.list_documents() == []


def test_list_documents_in_upload_order(repo):
    repo.add(_doc(id="a", hash="1"))
    repo.add(_doc(id="b", hash="2"))
    repo.add(_doc(id="c", hash="3"))
    assert [d.id for d in repo.list_documents()] == ["a", "b", "c"]


def test_list_documents_by_category_case_insensitive(repo):
    repo.add(_doc(id="a", hash="1", category="HR"))
    repo.add(_doc(id="b", hash="2", category="IT"))
    assert [d.id for d in repo.list_documents(category="hr")] == ["a"]


def test_list_documents_by_status(repo):
    done = _doc(id="a", hash="1", status=DocumentStatus.COMPLETED)
    repo.add(done)
    repo.add(_doc(id="b", hash="2"))
    result = repo.list_documents(status=DocumentStatus.COMPLETED)
    assert [d.id for d in result] == ["a"]


def test_delete(repo):
    repo.add(_doc())
    repo.delete("doc-1")
    assert repo.get("doc-1") is None
    assert repo.count() == 0


def test_count_by_category(repo):
    repo.add(_doc(id="a", hash="1", category="HR"))
    repo.add(_doc(id="b", hash="2", category="HR"))
    repo.add(_doc(id="c", hash="3", category="IT"))
    assert repo.count_by_category() == {"HR": 2, "IT": 1}


def test_count_by_status_includes_zero_counts(repo):
    repo.add(_doc(id="a", hash="1", status=DocumentStatus.FAILED))
    counts = repo.count_by_status()
    assert set(counts) == {s.value for s in DocumentStatus}
    assert counts["FAILED"] == 1
    assert counts["COMPLETED"] == 0

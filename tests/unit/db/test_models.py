"""Tests for document status transitions and record metadata."""

from __future__ import annotations

import pytest

from ragdesk.db.models import (
    Chunk,
    Document,
    DocumentStatus,
    InvalidTransition,
    SearchResult,
)


def _doc(status=DocumentStatus.UPLOADED) -> Document:
    return Document(
        id="doc-1",
        name="policy.pdf",
        file_name="abc.pdf",
        content_hash="h",
        size_bytes=1,
        file_path="/tmp/abc.pdf",
        media_type="application/pdf",
        status=status,
    )


# ------------------------------------------------------------------
# Transitions
# ------------------------------------------------------------------

@pytest.mark.parametrize("start,target", [
    (DocumentStatus.UPLOADED, DocumentStatus.PROCESSING),
    (DocumentStatus.PROCESSING, DocumentStatus.COMPLETED),
    (DocumentStatus.PROCESSING, DocumentStatus.FAILED),
    (DocumentStatus.COMPLETED, DocumentStatus.INACTIVE),
    (DocumentStatus.FAILED, DocumentStatus.INACTIVE),
    (DocumentStatus.COMPLETED, DocumentStatus.PROCESSING),
    (DocumentStatus.INACTIVE, DocumentStatus.PROCESSING),
])
def test_legal_transitions(start, target):
    doc = _doc(start)
    doc.transition_to(target)
    assert doc.status is target


@pytest.mark.parametrize("start,target", [
    (DocumentStatus.UPLOADED, DocumentStatus.COMPLETED),
    (DocumentStatus.UPLOADED, DocumentStatus.INACTIVE),
    (DocumentStatus.PROCESSING, DocumentStatus.INACTIVE),
    (DocumentStatus.COMPLETED, DocumentStatus.FAILED),
    (DocumentStatus.INACTIVE, DocumentStatus.COMPLETED),
])
def test_illegal_transitions_raise(start, target):
    doc = _doc(start)
    with pytest.raises(InvalidTransition):
        doc.transition_to(target)
    assert doc.status is start


def test_transition_bumps_modified_at():
    doc = _doc()
    doc.modified_at = "2000-01-01T00:00:00+00:00"
    doc.transition_to(DocumentStatus.PROCESSING)
    assert doc.modified_at != "2000-01-01T00:00:00+00:00"


def test_mark_failed_from_any_state():
    doc = _doc(DocumentStatus.COMPLETED)
    doc.mark_failed()
    assert doc.status is DocumentStatus.FAILED


def test_is_terminal():
    assert DocumentStatus.COMPLETED.is_terminal
    assert DocumentStatus.FAILED.is_terminal
    assert not DocumentStatus.PROCESSING.is_terminal


# ------------------------------------------------------------------
# Chunk / SearchResult
# ------------------------------------------------------------------

def test_chunk_record_id_and_metadata():
    chunk = Chunk(
        document_id="doc-1",
        chunk_index=3,
        text="Some text.",
        metadata={"document_name": "policy.pdf", "category": "HR", "uploaded_by": "bob"},
    )
    assert chunk.chunk_id == "chunk_3"
    assert chunk.record_id == "doc-1_chunk_3"
    meta = chunk.record_metadata()
    assert meta == {
        "document_name": "policy.pdf",
        "category": "HR",
        "uploaded_by": "bob",
        "text": "Some text.",
        "document_id": "doc-1",
        "chunk_id": "chunk_3",
        "chunk_index": "3",
    }


def test_search_result_distance_and_name():
    result = SearchResult(id="r", text="t", metadata={"document_name": "a.pdf"}, similarity=0.75)
    assert result.distance == pytest.approx(0.25)
    assert result.document_name == "a.pdf"
    assert SearchResult(id="r", text="t", metadata={}, similarity=0.1).document_name == ""

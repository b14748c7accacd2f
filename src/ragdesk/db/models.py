"""Domain models shared by ingestion and retrieval."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


class InvalidTransition(ValueError):
    """Raised when a document is moved to a status its current one does not allow."""


class DocumentStatus(str, Enum):
    UPLOADED = "UPLOADED"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    INACTIVE = "INACTIVE"

    @property
    def is_terminal(self) -> bool:
        return self in (DocumentStatus.COMPLETED, DocumentStatus.FAILED)

    def can_transition_to(self, target: DocumentStatus) -> bool:
        # Re-processing re-enters PROCESSING from any state.
        if target is DocumentStatus.PROCESSING:
            return True
        return target in _TRANSITIONS[self]


_TRANSITIONS: dict[DocumentStatus, frozenset[DocumentStatus]] = {
    DocumentStatus.UPLOADED: frozenset(),
    DocumentStatus.PROCESSING: frozenset({DocumentStatus.COMPLETED, DocumentStatus.FAILED}),
    DocumentStatus.COMPLETED: frozenset({DocumentStatus.INACTIVE}),
    DocumentStatus.FAILED: frozenset({DocumentStatus.INACTIVE}),
    DocumentStatus.INACTIVE: frozenset(),
}


@dataclass
class Document:
    """One uploaded source file under management.

    Attributes:
        id: UUID of the document.
        name: Display name (the original file name).
        file_name: Unique name of the stored copy.
        category: Upper-cased category tag.
        owner: Identity of the uploader (opaque string).
        content_hash: Hex digest of the file bytes, used for deduplication.
        file_path: Storage locator of the stored copy.
    """

    id: str
    name: str
    file_name: str
    content_hash: str
    size_bytes: int
    file_path: str
    media_type: str
    category: str = "GENERAL"
    description: str = ""
    owner: str = "anonymous"
    status: DocumentStatus = DocumentStatus.UPLOADED
    uploaded_at: str = field(default_factory=utcnow)
    modified_at: str = field(default_factory=utcnow)

    def transition_to(self, target: DocumentStatus) -> None:
        """Move to *target*, enforcing the legal transition table.

        Raises:
            InvalidTransition: If *target* is not reachable from the current status.
        """
        if not self.status.can_transition_to(target):
            raise InvalidTransition(
                f"Document {self.id}: cannot move from {self.status.value} to {target.value}"
            )
        self.status = target
        self.modified_at = utcnow()

    def mark_failed(self) -> None:
        """Force FAILED after a re-processing precondition failed."""
        self.status = DocumentStatus.FAILED
        self.modified_at = utcnow()


@dataclass
class Chunk:
    document_id: str
    chunk_index: int
    text: str
    metadata: dict[str, str] = field(default_factory=dict)

    @property
    def chunk_id(self) -> str:
        return f"chunk_{self.chunk_index}"

    @property
    def record_id(self) -> str:
        return f"{self.document_id}_{self.chunk_id}"

    def record_metadata(self) -> dict[str, str]:
        """Metadata stored alongside the chunk's vector in the index."""
        meta = dict(self.metadata)
        meta.update(
            text=self.text,
            document_id=self.document_id,
            chunk_id=self.chunk_id,
            chunk_index=str(self.chunk_index),
        )
        return meta


@dataclass
class SearchResult:
    """A matched embedding record, as seen at query time.

    ``similarity`` follows the cosine convention: 1.0 means identical.
    """

    id: str
    text: str
    metadata: dict[str, str]
    similarity: float

    @property
    def distance(self) -> float:
        return 1.0 - self.similarity

    @property
    def document_name(self) -> str:
        return self.metadata.get("document_name", "")

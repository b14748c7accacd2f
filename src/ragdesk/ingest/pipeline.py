"""Ingestion pipeline: extraction → chunking → embedding → indexing.

One call drives one document to COMPLETED or FAILED and returns a
ProcessingOutcome; no exception escapes ``ingest`` / ``reingest``.

Per-chunk embedding runs on a thread pool (fan-out). Results are collected
in the calling thread (fan-in), which is also the only thread that writes
to the vector index and the document store. A chunk whose embedding or
upsert fails is logged and counted; the document fails only when no chunk
succeeded.
"""

from __future__ import annotations

import uuid
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path

import structlog

from ragdesk.db.models import Chunk, Document, DocumentStatus, InvalidTransition
from ragdesk.db.repository import DocumentRepository
from ragdesk.errors import (
    DocumentNotFound,
    DuplicateDocument,
    EmbeddingProviderError,
    ExtractionError,
    VectorIndexError,
)
from ragdesk.ingest.chunker import SentenceChunker, clean_text
from ragdesk.ingest.extract import TextExtractor, extractor_for
from ragdesk.ingest.storage import FileStore, compute_hash
from ragdesk.rag.gateways import EmbeddingGateway, VectorIndex

logger = structlog.get_logger(__name__)

MSG_NO_TEXT = "No text could be extracted from the document"
MSG_NO_CHUNKS = "No chunk of the document could be processed"
MSG_NOT_FOUND = "Document not found"
MSG_FILE_MISSING = "Stored file for the document was not found"
MSG_INDEX_ERROR = "Could not remove the document's previous vectors"
MSG_INTERNAL = "Internal error while processing the document"


@dataclass
class ProcessingOutcome:
    success: bool
    message: str
    document: Document | None = None
    succeeded_chunks: int = 0
    total_chunks: int = 0


class IngestionPipeline:
    """Drive documents from stored files to indexed, retrievable chunks.

    Args:
        documents: Document store.
        index: Vector index receiving one record per chunk.
        embedder: Embedding gateway.
        chunker: Sentence chunker (defaults: 1000 chars / 100 overlap).
        store: File store used by ``upload`` / ``delete`` / ``reingest``.
        max_workers: Parallel embedding requests per document.
    """

    def __init__(
        self,
        documents: DocumentRepository,
        index: VectorIndex,
        embedder: EmbeddingGateway,
        chunker: SentenceChunker | None = None,
        store: FileStore | None = None,
        max_workers: int = 4,
    ) -> None:
        self._documents = documents
        self._index = index
        self._embedder = embedder
        self._chunker = chunker or SentenceChunker()
        self._store = store
        self._max_workers = max(1, max_workers)

    # ------------------------------------------------------------------
    # Core operation
    # ------------------------------------------------------------------

    def ingest(
        self,
        document: Document,
        path: Path | str,
        extractor: TextExtractor | None = None,
    ) -> ProcessingOutcome:
        """Extract, chunk, embed and index *document* from the file at *path*."""
        log = logger.bind(document_id=document.id, document_name=document.name)
        try:
            log.info("ingest_started")
            document.transition_to(DocumentStatus.PROCESSING)
            self._documents.save(document)

            extractor = extractor or extractor_for(document.media_type)
            try:
                text = clean_text(extractor.extract(Path(path)))
                if not text:
                    raise ExtractionError(MSG_NO_TEXT)
            except ExtractionError as exc:
                log.warning("extraction_failed", error=str(exc))
                return self._fail(document, MSG_NO_TEXT)
            log.debug("text_extracted", chars=len(text))

            chunks = self._chunker.chunk(document, text)
            log.debug("chunks_created", count=len(chunks))

            succeeded = self._embed_and_index(chunks)
            if succeeded == 0:
                return self._fail(document, MSG_NO_CHUNKS, total=len(chunks))

            document.transition_to(DocumentStatus.COMPLETED)
            self._documents.save(document)
            log.info("ingest_completed", succeeded=succeeded, total=len(chunks))
            return ProcessingOutcome(
                success=True,
                message=f"Document processed successfully ({succeeded}/{len(chunks)} chunks)",
                document=document,
                succeeded_chunks=succeeded,
                total_chunks=len(chunks),
            )
        except Exception:
            log.exception("ingest_crashed")
            return self._fail(document, MSG_INTERNAL)

    def _embed_and_index(self, chunks: list[Chunk]) -> int:
        """Fan out embeddings, fan in upserts. Returns the number of indexed chunks."""
        if not chunks:
            return 0
        succeeded = 0
        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(chunks))) as pool:
            futures = {pool.submit(self._embedder.embed, c.text): c for c in chunks}
            for future in as_completed(futures):
                chunk = futures[future]
                if self._index_chunk(chunk, future):
                    succeeded += 1
        return succeeded

    def _index_chunk(self, chunk: Chunk, future) -> bool:
        log = logger.bind(document_id=chunk.document_id, chunk_index=chunk.chunk_index)
        try:
            vector = future.result()
            if not vector:
                raise EmbeddingProviderError("Empty embedding vector")
            self._index.upsert(chunk.record_id, vector, chunk.record_metadata())
        except (EmbeddingProviderError, VectorIndexError) as exc:
            log.warning("chunk_failed", error=str(exc))
            return False
        except Exception as exc:
            log.error("chunk_failed_unexpectedly", error=str(exc), exc_info=True)
            return False
        return True

    def _fail(self, document: Document, message: str, total: int = 0) -> ProcessingOutcome:
        try:
            document.transition_to(DocumentStatus.FAILED)
        except InvalidTransition:
            document.mark_failed()
        try:
            self._documents.save(document)
        except Exception:
            # The stored status stays stale; the caller still gets the outcome.
            logger.exception("failed_status_not_saved", document_id=document.id)
        logger.error("ingest_failed", document_id=document.id, reason=message)
        return ProcessingOutcome(
            success=False, message=message, document=document, total_chunks=total
        )

    # ------------------------------------------------------------------
    # Document lifecycle
    # ------------------------------------------------------------------

    def reingest(self, document_id: str) -> ProcessingOutcome:
        """Purge a document's records and run ``ingest`` again on its stored file."""
        try:
            return self._reingest(document_id)
        except Exception:
            logger.exception("reingest_crashed", document_id=document_id)
            return ProcessingOutcome(success=False, message=MSG_INTERNAL)

    def _reingest(self, document_id: str) -> ProcessingOutcome:
        document = self._documents.get(document_id)
        if document is None:
            return ProcessingOutcome(success=False, message=MSG_NOT_FOUND)

        try:
            removed = self._index.delete_by_document(document.id)
        except VectorIndexError as exc:
            logger.error("purge_failed", document_id=document.id, error=str(exc))
            return self._fail(document, MSG_INDEX_ERROR)
        logger.info("vectors_purged", document_id=document.id, removed=removed)

        path = self._resolve_file(document)
        if path is None:
            return self._fail(document, MSG_FILE_MISSING)
        return self.ingest(document, path)

    def upload(
        self,
        path: Path | str,
        category: str | None = None,
        description: str | None = None,
        owner: str = "anonymous",
    ) -> ProcessingOutcome:
        """Store a new file, register it as UPLOADED, then ingest it.

        Raises:
            InvalidInput: For empty, unsupported or oversized files.
            DuplicateDocument: If a document with the same bytes exists.
            FileNotFoundError: If *path* does not exist.
        """
        store = self._require_store()
        path = Path(path)
        store.validate(path)
        content_hash = compute_hash(path)
        existing = self._documents.find_by_hash(content_hash)
        if existing is not None:
            raise DuplicateDocument(existing.id)

        stored = store.store(path)
        document = Document(
            id=str(uuid.uuid4()),
            name=stored.original_name,
            file_name=stored.file_name,
            content_hash=content_hash,
            size_bytes=stored.size_bytes,
            file_path=stored.file_path,
            media_type=stored.media_type,
            category=(category or "GENERAL").upper(),
            description=description or "",
            owner=owner,
        )
        self._documents.add(document)
        logger.info("document_registered", document_id=document.id, name=document.name)
        return self.ingest(document, stored.file_path)

    def delete(self, document_id: str) -> int:
        """Purge vectors, stored file and row of a document. Returns vectors removed.

        Raises:
            DocumentNotFound: If *document_id* is unknown.
        """
        document = self._documents.get(document_id)
        if document is None:
            raise DocumentNotFound(document_id)
        removed = self._index.delete_by_document(document.id)
        if self._store is not None:
            self._store.delete(document.file_path)
        self._documents.delete(document.id)
        logger.info("document_deleted", document_id=document.id, vectors=removed)
        return removed

    def deactivate(self, document_id: str) -> Document:
        """Move a COMPLETED or FAILED document to INACTIVE.

        Raises:
            DocumentNotFound: If *document_id* is unknown.
            InvalidTransition: If the document is not in a terminal state.
        """
        document = self._documents.get(document_id)
        if document is None:
            raise DocumentNotFound(document_id)
        document.transition_to(DocumentStatus.INACTIVE)
        self._documents.save(document)
        return document

    def _resolve_file(self, document: Document) -> Path | None:
        if self._store is not None:
            return self._store.resolve(document.file_path)
        path = Path(document.file_path)
        return path if path.is_file() else None

    def _require_store(self) -> FileStore:
        if self._store is None:
            raise RuntimeError("IngestionPipeline was created without a FileStore")
        return self._store

"""Error kinds raised inside the ragdesk core.

The two public operations (``IngestionPipeline.ingest`` and
``RagOrchestrator.answer``) never let these escape; they are converted to
outcome objects with a user-safe message. Lower layers (gateways, vector
index, extractors) raise them so callers can tell failure kinds apart.
"""

from __future__ import annotations


class RagdeskError(Exception):
    """Base class for all ragdesk errors.

    Attributes:
        code: Stable machine-readable error code.
    """

    code: str = "RAGDESK_ERROR"

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


# ---------------------------------------------------------------------------
# Invalid input
# ---------------------------------------------------------------------------


class InvalidInput(RagdeskError):
    """Malformed question, empty file, or other caller-supplied input."""

    code = "INVALID_INPUT"


class InvalidQuestion(InvalidInput):
    code = "INVALID_QUESTION"


class EmptyFile(InvalidInput):
    code = "EMPTY_FILE"


class UnsupportedFileType(InvalidInput):
    code = "UNSUPPORTED_FILE_TYPE"


class FileTooLarge(InvalidInput):
    code = "FILE_TOO_LARGE"


class DuplicateDocument(InvalidInput):
    """A document with the same content hash is already registered."""

    code = "DUPLICATE_DOCUMENT"

    def __init__(self, existing_id: str) -> None:
        super().__init__(f"A document with the same content already exists ({existing_id})")
        self.existing_id = existing_id


# ---------------------------------------------------------------------------
# Collaborator failures
# ---------------------------------------------------------------------------


class ExtractionError(RagdeskError):
    """No text could be recovered from a document."""

    code = "EXTRACTION_ERROR"


class EmbeddingProviderError(RagdeskError):
    code = "EMBEDDING_PROVIDER_ERROR"


class GenerationProviderError(RagdeskError):
    code = "GENERATION_PROVIDER_ERROR"


class VectorIndexError(RagdeskError):
    code = "VECTOR_INDEX_ERROR"


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


class NotFound(RagdeskError):
    code = "NOT_FOUND"


class DocumentNotFound(NotFound):
    code = "DOCUMENT_NOT_FOUND"

    def __init__(self, document_id: str) -> None:
        super().__init__(f"Document '{document_id}' not found")
        self.document_id = document_id

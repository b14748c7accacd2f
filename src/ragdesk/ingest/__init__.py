"""Document ingestion: extraction, chunking, storage and indexing."""

from ragdesk.ingest.chunker import SentenceChunker, clean_text
from ragdesk.ingest.extract import PdfExtractor, PlainTextExtractor, TextExtractor, extractor_for
from ragdesk.ingest.pipeline import IngestionPipeline, ProcessingOutcome
from ragdesk.ingest.storage import FileStore, compute_hash

__all__ = [
    "SentenceChunker",
    "clean_text",
    "TextExtractor",
    "PdfExtractor",
    "PlainTextExtractor",
    "extractor_for",
    "IngestionPipeline",
    "ProcessingOutcome",
    "FileStore",
    "compute_hash",
]

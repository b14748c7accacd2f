"""Wiring shared by the CLI commands: open the database, build the services."""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass
from pathlib import Path

import typer
from rich.console import Console

from ragdesk.cli.errors import err_no_api_key, err_no_db
from ragdesk.config import RagdeskConfig
from ragdesk.db.connection import Database
from ragdesk.db.repository import DocumentRepository
from ragdesk.db.schema import initialize
from ragdesk.db.vectors import SqliteVectorIndex
from ragdesk.ingest.chunker import SentenceChunker
from ragdesk.ingest.pipeline import IngestionPipeline
from ragdesk.ingest.storage import FileStore
from ragdesk.rag.gateways import EmbedderConfig, LiteLLMEmbedder, LiteLLMGenerator
from ragdesk.rag.llm_client import provider_of, validate_api_key
from ragdesk.rag.orchestrator import OrchestratorConfig, RagOrchestrator
from ragdesk.rag.prompts import PromptConfig

DEFAULT_DB = Path(".ragdesk.db")


@dataclass
class Services:
    documents: DocumentRepository
    index: SqliteVectorIndex
    pipeline: IngestionPipeline
    orchestrator: RagOrchestrator


def open_db(db_path: Path) -> sqlite3.Connection:
    db = Database(db_path)
    conn = db.connect()
    initialize(conn)
    return conn


def require_db(db_path: Path, console: Console) -> sqlite3.Connection:
    """Open an existing database, or print an error and exit 1."""
    if not db_path.exists():
        console.print(err_no_db(str(db_path)))
        raise typer.Exit(1)
    return open_db(db_path)


def require_api_key(model: str, console: Console) -> None:
    try:
        validate_api_key(model)
    except EnvironmentError:
        console.print(err_no_api_key(provider_of(model)))
        raise typer.Exit(1) from None


def storage_dir(db_path: Path, cfg: RagdeskConfig) -> Path:
    """Storage directory; relative paths are taken from the database's directory."""
    path = Path(cfg.storage.path)
    return path if path.is_absolute() else db_path.parent / path


def build_services(conn: sqlite3.Connection, db_path: Path, cfg: RagdeskConfig) -> Services:
    documents = DocumentRepository(conn)
    index = SqliteVectorIndex(conn, cfg.embedding.model)
    embedder = LiteLLMEmbedder(
        EmbedderConfig(model=cfg.embedding.model, timeout=cfg.embedding.timeout)
    )
    generator = LiteLLMGenerator(
        PromptConfig(
            model=cfg.generation.model,
            temperature=cfg.generation.temperature,
            max_tokens=cfg.generation.max_tokens,
            timeout=cfg.generation.timeout,
            assistant_name=cfg.generation.assistant_name,
            organization=cfg.generation.organization,
            fallback_contact=cfg.retrieval.fallback_contact,
        )
    )
    pipeline = IngestionPipeline(
        documents,
        index,
        embedder,
        chunker=SentenceChunker(cfg.chunking.chunk_size, cfg.chunking.overlap),
        store=FileStore(storage_dir(db_path, cfg), cfg.storage.max_file_size_mb),
        max_workers=cfg.storage.max_workers,
    )
    orchestrator = RagOrchestrator(
        embedder,
        index,
        generator,
        OrchestratorConfig(
            top_k=cfg.retrieval.top_k,
            similarity_threshold=cfg.retrieval.similarity_threshold,
            context_budget=cfg.retrieval.context_budget,
            fallback_contact=cfg.retrieval.fallback_contact,
            suggestions=list(cfg.retrieval.suggestions),
        ),
    )
    return Services(documents, index, pipeline, orchestrator)


def config_of(ctx: typer.Context) -> RagdeskConfig:
    """The config loaded by the app callback (defaults when run standalone)."""
    obj = ctx.find_root().obj
    return obj if isinstance(obj, RagdeskConfig) else RagdeskConfig()

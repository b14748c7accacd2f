"""Document lifecycle commands: add, list, show, reprocess, remove, deactivate.

Usage:
  ragdesk add handbook.pdf --category HR --description "Employee handbook"
  ragdesk list --category HR --status COMPLETED
  ragdesk show <id>
  ragdesk reprocess <id>
  ragdesk remove <id> --yes
  ragdesk deactivate <id>
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from ragdesk.cli.errors import (
    err_document_not_found,
    err_duplicate_document,
    err_file_not_found,
    err_invalid_file,
    err_invalid_transition,
    err_processing_failed,
)
from ragdesk.cli.runtime import (
    DEFAULT_DB,
    build_services,
    config_of,
    require_api_key,
    require_db,
)
from ragdesk.db.models import DocumentStatus, InvalidTransition
from ragdesk.errors import DocumentNotFound, DuplicateDocument, InvalidInput
from ragdesk.ingest.pipeline import MSG_NOT_FOUND, ProcessingOutcome

console = Console()

_STATUS_STYLE = {
    DocumentStatus.UPLOADED: "dim",
    DocumentStatus.PROCESSING: "yellow",
    DocumentStatus.COMPLETED: "green",
    DocumentStatus.FAILED: "red",
    DocumentStatus.INACTIVE: "dim",
}

DbOption = Annotated[Path, typer.Option("--db", help="Path to .ragdesk.db.")]


def add_cmd(
    ctx: typer.Context,
    file: Annotated[Path, typer.Argument(help="PDF, text or markdown file to index.")],
    category: Annotated[
        str | None, typer.Option("--category", "-c", help="Category tag (default GENERAL).")
    ] = None,
    description: Annotated[
        str | None, typer.Option("--description", "-d", help="Free-text description.")
    ] = None,
    owner: Annotated[
        str, typer.Option("--owner", help="Who uploaded the document.")
    ] = "anonymous",
    db: DbOption = DEFAULT_DB,
) -> None:
    """Upload a document and index it."""
    cfg = config_of(ctx)
    conn = require_db(db, console)
    try:
        require_api_key(cfg.embedding.model, console)
        services = build_services(conn, db, cfg)
        console.print(f"\n[bold]→ {file}[/]")
        try:
            with console.status("Extracting, chunking and embedding…"):
                outcome = services.pipeline.upload(file, category, description, owner)
        except FileNotFoundError:
            console.print(err_file_not_found(str(file)))
            raise typer.Exit(1) from None
        except DuplicateDocument as exc:
            console.print(err_duplicate_document(exc.existing_id))
            raise typer.Exit(1) from None
        except InvalidInput as exc:
            console.print(err_invalid_file(str(exc)))
            raise typer.Exit(1) from None
        _report_outcome(outcome)
    finally:
        conn.close()


def list_cmd(
    ctx: typer.Context,
    category: Annotated[
        str | None, typer.Option("--category", "-c", help="Only this category.")
    ] = None,
    status: Annotated[
        DocumentStatus | None,
        typer.Option("--status", "-s", case_sensitive=False, help="Only this status."),
    ] = None,
    db: DbOption = DEFAULT_DB,
) -> None:
    """List documents in the knowledge base."""
    conn = require_db(db, console)
    try:
        services = build_services(conn, db, config_of(ctx))
        documents = services.documents.list_documents(category=category, status=status)
        if not documents:
            console.print("[dim]No documents found.[/]")
            return

        table = Table(show_header=True, header_style="bold")
        table.add_column("ID", style="dim", no_wrap=True)
        table.add_column("Name")
        table.add_column("Category")
        table.add_column("Status")
        table.add_column("Uploaded", style="dim")
        for doc in documents:
            style = _STATUS_STYLE.get(doc.status, "")
            table.add_row(
                doc.id,
                doc.name,
                doc.category,
                f"[{style}]{doc.status.value}[/]" if style else doc.status.value,
                doc.uploaded_at[:16],
            )
        console.print(table)
    finally:
        conn.close()


def show_cmd(
    ctx: typer.Context,
    document_id: Annotated[str, typer.Argument(help="Document id.")],
    db: DbOption = DEFAULT_DB,
) -> None:
    """Show one document with its index record count."""
    conn = require_db(db, console)
    try:
        services = build_services(conn, db, config_of(ctx))
        doc = services.documents.get(document_id)
        if doc is None:
            console.print(err_document_not_found(document_id))
            raise typer.Exit(1)

        table = Table(show_header=False, box=None, padding=(0, 1))
        table.add_column("Field", style="bold")
        table.add_column("Value")
        table.add_row("ID", doc.id)
        table.add_row("Name", doc.name)
        table.add_row("Category", doc.category)
        table.add_row("Description", doc.description or "[dim]-[/]")
        table.add_row("Owner", doc.owner)
        table.add_row("Status", doc.status.value)
        table.add_row("Type", doc.media_type)
        table.add_row("Size", f"{doc.size_bytes:,} bytes")
        table.add_row("Stored as", doc.file_name)
        table.add_row("Hash", doc.content_hash)
        table.add_row("Uploaded", doc.uploaded_at)
        table.add_row("Modified", doc.modified_at)
        table.add_row("Vectors", str(services.index.count_by_document(doc.id)))
        console.print(table)
    finally:
        conn.close()


def reprocess_cmd(
    ctx: typer.Context,
    document_id: Annotated[str, typer.Argument(help="Document id.")],
    db: DbOption = DEFAULT_DB,
) -> None:
    """Purge a document's vectors and index its stored file again."""
    cfg = config_of(ctx)
    conn = require_db(db, console)
    try:
        require_api_key(cfg.embedding.model, console)
        services = build_services(conn, db, cfg)
        with console.status("Reprocessing…"):
            outcome = services.pipeline.reingest(document_id)
        if outcome.message == MSG_NOT_FOUND:
            console.print(err_document_not_found(document_id))
            raise typer.Exit(1)
        _report_outcome(outcome)
    finally:
        conn.close()


def remove_cmd(
    ctx: typer.Context,
    document_id: Annotated[str, typer.Argument(help="Document id.")],
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Skip confirmation prompt.")] = False,
    db: DbOption = DEFAULT_DB,
) -> None:
    """Remove a document, its stored file and its vectors."""
    conn = require_db(db, console)
    try:
        services = build_services(conn, db, config_of(ctx))
        doc = services.documents.get(document_id)
        if doc is None:
            console.print(err_document_not_found(document_id))
            raise typer.Exit(1)

        vectors = services.index.count_by_document(doc.id)
        console.print(f"\nRemove document: [bold]{doc.name}[/] ({doc.id})")
        console.print(f"  Status: {doc.status.value}  |  Vectors: {vectors}")
        if not yes and not typer.confirm("Confirm removal?", default=False):
            console.print("[dim]Cancelled.[/]")
            raise typer.Exit(0)

        try:
            removed = services.pipeline.delete(doc.id)
        except DocumentNotFound:
            console.print(err_document_not_found(document_id))
            raise typer.Exit(1) from None
        console.print(f"\n[green]✓[/] Removed: {doc.name}")
        console.print(f"  {removed} vectors deleted")
    finally:
        conn.close()


def deactivate_cmd(
    ctx: typer.Context,
    document_id: Annotated[str, typer.Argument(help="Document id.")],
    db: DbOption = DEFAULT_DB,
) -> None:
    """Mark a processed document INACTIVE."""
    conn = require_db(db, console)
    try:
        services = build_services(conn, db, config_of(ctx))
        doc = services.documents.get(document_id)
        if doc is None:
            console.print(err_document_not_found(document_id))
            raise typer.Exit(1)
        try:
            services.pipeline.deactivate(doc.id)
        except InvalidTransition:
            console.print(
                err_invalid_transition(
                    doc.id, doc.status.value, DocumentStatus.INACTIVE.value
                )
            )
            raise typer.Exit(1) from None
        console.print(f"[green]✓[/] {doc.name} is now INACTIVE")
    finally:
        conn.close()


def _report_outcome(outcome: ProcessingOutcome) -> None:
    doc = outcome.document
    if not outcome.success:
        console.print(err_processing_failed(outcome.message))
        if doc is not None:
            console.print(f"  Document id: {doc.id}")
        raise typer.Exit(1)
    console.print(f"  [green]✓[/] {outcome.message}")
    if doc is not None:
        console.print(f"  Document id: [bold]{doc.id}[/]  |  Category: {doc.category}")

"""ragdesk status: knowledge base overview.

Shows configured models, document counts by status and category, and the
vector index size and health.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ragdesk.cli.runtime import DEFAULT_DB, build_services, config_of, require_db
from ragdesk.config import RagdeskConfig

console = Console()


def status_cmd(
    ctx: typer.Context,
    db: Annotated[Path, typer.Option("--db", help="Path to .ragdesk.db.")] = DEFAULT_DB,
) -> None:
    """Show knowledge base status."""
    cfg = config_of(ctx)
    conn = require_db(db, console)
    try:
        services = build_services(conn, db, cfg)
        _show_config_panel(db, cfg)

        total = services.documents.count()
        by_status = services.documents.count_by_status()
        by_category = services.documents.count_by_category()
        stats = services.orchestrator.stats()
    finally:
        conn.close()

    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for status, count in by_status.items():
        table.add_row(status, str(count))
    console.print(
        Panel(table, title=f"[bold]Documents[/] [dim]({total} total)[/]", expand=False)
    )

    if by_category:
        cat_table = Table(show_header=False, box=None, padding=(0, 1))
        cat_table.add_column("Category", style="bold")
        cat_table.add_column("Count")
        for category, count in by_category.items():
            cat_table.add_row(category, str(count))
        console.print(Panel(cat_table, title="[bold]Categories[/]", expand=False))

    health = "[green]✓ ready[/]" if stats.healthy else "[red]✗ error[/]"
    console.print(
        Panel(
            f"Vectors: [bold]{stats.total_vectors:,}[/]\nStatus:  {health}",
            title="[bold]Vector Index[/]",
            expand=False,
        )
    )


def _show_config_panel(db: Path, cfg: RagdeskConfig) -> None:
    db_info = f"{db}"
    if db.exists():
        size_mb = db.stat().st_size / (1024 * 1024)
        db_info = f"{db} ({size_mb:.1f} MB)"
    lines = [
        f"Database:    {db_info}",
        f"Embedding:   {cfg.embedding.model}",
        f"Generation:  {cfg.generation.model}",
    ]
    console.print(Panel("\n".join(lines), title="[bold]ragdesk[/]", expand=False))

"""ragdesk ask / suggest: question answering over the knowledge base."""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel

from ragdesk.cli.errors import err_answer_failed
from ragdesk.cli.runtime import DEFAULT_DB, build_services, config_of, require_api_key, require_db

console = Console()


def ask_cmd(
    ctx: typer.Context,
    question: Annotated[str, typer.Argument(help="Question in natural language.")],
    db: Annotated[Path, typer.Option("--db", help="Path to .ragdesk.db.")] = DEFAULT_DB,
) -> None:
    """Answer a question from the indexed documents."""
    cfg = config_of(ctx)
    conn = require_db(db, console)
    try:
        require_api_key(cfg.embedding.model, console)
        require_api_key(cfg.generation.model, console)
        services = build_services(conn, db, cfg)
        with console.status("Searching documents…"):
            outcome = services.orchestrator.answer(question)
    finally:
        conn.close()

    if not outcome.success:
        console.print(err_answer_failed(outcome.error or "Unknown error"))
        raise typer.Exit(1)

    console.print(Panel(outcome.text, title=f"[bold]{cfg.generation.assistant_name}[/]", expand=False))
    if outcome.sources:
        console.print("[dim]Sources:[/]")
        for source in outcome.sources:
            console.print(f"  • {source}")


def suggest_cmd(
    ctx: typer.Context,
    db: Annotated[Path, typer.Option("--db", help="Path to .ragdesk.db.")] = DEFAULT_DB,
) -> None:
    """Show example questions."""
    conn = require_db(db, console)
    try:
        suggestions = build_services(conn, db, config_of(ctx)).orchestrator.suggested_questions()
    finally:
        conn.close()
    for suggestion in suggestions:
        console.print(f"  • {suggestion}")

"""ragdesk CLI entry point."""

from __future__ import annotations

import importlib.metadata
from typing import Annotated

import typer
from rich.console import Console

from ragdesk.cli.ask import ask_cmd, suggest_cmd
from ragdesk.cli.documents import (
    add_cmd,
    deactivate_cmd,
    list_cmd,
    remove_cmd,
    reprocess_cmd,
    show_cmd,
)
from ragdesk.cli.errors import err_config
from ragdesk.cli.init import init_cmd
from ragdesk.cli.status import status_cmd
from ragdesk.config import ConfigError, load_config
from ragdesk.logging_config import setup_logging

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        try:
            ver = importlib.metadata.version("ragdesk")
        except importlib.metadata.PackageNotFoundError:
            ver = "dev"
        typer.echo(f"ragdesk {ver}")
        raise typer.Exit()


app = typer.Typer(
    name="ragdesk",
    help=(
        "ragdesk: answer questions from your own documents.\n\n"
        "  ragdesk add FILE      Index a PDF, text or markdown document.\n"
        "  ragdesk ask QUESTION  Answer from the indexed documents."
    ),
    add_completion=False,
)


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Log at DEBUG level."),
    ] = False,
) -> None:
    """ragdesk: answer questions from your own documents."""
    try:
        cfg = load_config()
    except ConfigError as exc:
        console.print(err_config(str(exc)))
        raise typer.Exit(1) from None
    setup_logging("DEBUG" if verbose else cfg.logging.level, json=cfg.logging.json)
    ctx.obj = cfg


app.command("init")(init_cmd)
app.command("add")(add_cmd)
app.command("ask")(ask_cmd)
app.command("list")(list_cmd)
app.command("show")(show_cmd)
app.command("reprocess")(reprocess_cmd)
app.command("remove")(remove_cmd)
app.command("deactivate")(deactivate_cmd)
app.command("status")(status_cmd)
app.command("suggest")(suggest_cmd)


if __name__ == "__main__":
    app()

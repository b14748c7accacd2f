"""ragdesk rich error messages: actionable feedback.

Every error shown to the user must contain:
  1. What went wrong (clear cause)
  2. The exact action the user should take to fix it

Usage:
    from ragdesk.cli.errors import err_no_db
    console.print(err_no_db(".ragdesk.db"))
    raise typer.Exit(1)
"""

from __future__ import annotations

from ragdesk.rag.llm_client import api_key_env_var


def err_no_api_key(provider: str) -> str:
    """No API key for *provider*.

    Example:
        No API key for 'gemini'. Set:  export GEMINI_API_KEY=...
    """
    env_var = api_key_env_var(provider) or f"{provider.upper()}_API_KEY"
    return (
        f"[red]Error:[/] No API key for '{provider}'.\n"
        f"  Set:  export {env_var}=..."
    )


def err_no_db(db_path: str = ".ragdesk.db") -> str:
    """No database found at *db_path*."""
    return (
        f"[red]Error:[/] No database found at '{db_path}'.\n"
        "  Run:  ragdesk init"
    )


def err_config(message: str) -> str:
    """Config file contains an invalid or forbidden value."""
    return (
        f"[red]Error:[/] Invalid configuration.\n"
        f"  {message}\n"
        "  Fix ragdesk.yaml (or ~/.ragdesk/config.yaml) and retry."
    )


def err_file_not_found(path: str) -> str:
    return (
        f"[red]Error:[/] File not found: '{path}'\n"
        "  Check the path and retry."
    )


def err_invalid_file(message: str) -> str:
    """Upload rejected by validation (empty, unsupported type, too large)."""
    return (
        f"[red]Error:[/] {message}\n"
        "  Supported types: .pdf, .txt, .md"
    )


def err_duplicate_document(existing_id: str) -> str:
    return (
        "[yellow]Already in the knowledge base:[/] a document with identical content exists.\n"
        f"  Document id: {existing_id}\n"
        f"  Run:  ragdesk reprocess {existing_id}  to index it again."
    )


def err_document_not_found(document_id: str) -> str:
    return (
        f"[red]Error:[/] Document '{document_id}' not found.\n"
        "  Run:  ragdesk list  to see all documents."
    )


def err_invalid_transition(document_id: str, current: str, target: str) -> str:
    return (
        f"[red]Error:[/] Document '{document_id}' is {current}; it cannot become {target}.\n"
        "  Only COMPLETED or FAILED documents can be deactivated."
    )


def err_processing_failed(message: str) -> str:
    return (
        f"[red]✗ Processing failed:[/] {message}\n"
        "  Run with --verbose for details, then:  ragdesk reprocess <id>"
    )


def err_answer_failed(message: str) -> str:
    return f"[red]Error:[/] {message}"

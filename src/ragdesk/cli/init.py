"""ragdesk init: create a knowledge base in a project directory.

Creates:
  .ragdesk.db              empty knowledge base with schema
  ragdesk.yaml             project config (commented defaults)
  storage/documents/       uploaded file storage
  ~/.ragdesk/config.yaml   global model config (created once, mode 0o600)
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from ragdesk.cli.runtime import DEFAULT_DB, open_db
from ragdesk.config import ensure_global_config

console = Console()

_DEFAULT_PROJECT_DIR = Path(".")

_PROJECT_YAML = """\
# ragdesk project configuration. API keys go in environment variables.

# embedding:
#   model: gemini/text-embedding-004

# generation:
#   model: gemini/gemini-1.5-flash
#   assistant_name: DeskBot
#   organization: ""

retrieval:
  top_k: 5
  similarity_threshold: 0.6
  context_budget: 4000
  fallback_contact: Human Resources

chunking:
  chunk_size: 1000
  overlap: 100

storage:
  path: storage/documents
  max_file_size_mb: 50

# logging:
#   level: INFO
#   json: false
"""


def init_cmd(
    project_dir: Annotated[
        Path,
        typer.Argument(help="Directory to initialize. Defaults to current directory."),
    ] = _DEFAULT_PROJECT_DIR,
    global_config: Annotated[
        bool,
        typer.Option("--global-config/--no-global-config", help="Create ~/.ragdesk/config.yaml."),
    ] = True,
) -> None:
    """Initialize a ragdesk knowledge base."""
    project_dir = project_dir.resolve()
    project_dir.mkdir(parents=True, exist_ok=True)
    db_path = project_dir / DEFAULT_DB

    if db_path.exists():
        console.print(f"[yellow]⚠[/]  {db_path} already exists; schema is brought up to date.")

    console.print(f"\n[bold]Creating knowledge base in {project_dir} …[/]\n")

    conn = open_db(db_path)
    conn.close()
    console.print(f"  [green]✓[/] {DEFAULT_DB}")

    yaml_path = project_dir / "ragdesk.yaml"
    if not yaml_path.exists():
        yaml_path.write_text(_PROJECT_YAML, encoding="utf-8")
        console.print("  [green]✓[/] ragdesk.yaml")

    (project_dir / "storage" / "documents").mkdir(parents=True, exist_ok=True)
    console.print("  [green]✓[/] storage/documents/")

    if global_config:
        cfg_path = ensure_global_config()
        console.print(f"  [green]✓[/] {cfg_path} (global config)")

    console.print("\n[bold green]✓ Knowledge base initialized.[/]")
    console.print("\nNext steps:")
    console.print("  1. export GEMINI_API_KEY=...            (provider key)")
    console.print("  2. ragdesk add <file.pdf>               (index a document)")
    console.print('  3. ragdesk ask "How do I request leave?"')

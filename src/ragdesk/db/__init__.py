"""ragdesk database layer.

``ragdesk.db.vectors`` is imported directly by callers: it implements the
``VectorIndex`` interface from ``ragdesk.rag.gateways``, which itself depends
on ``ragdesk.db.models``.
"""

from ragdesk.db.connection import Database
from ragdesk.db.migrations import MIGRATIONS, run_migrations
from ragdesk.db.repository import DocumentRepository
from ragdesk.db.schema import initialize

__all__ = [
    "Database",
    "DocumentRepository",
    "initialize",
    "run_migrations",
    "MIGRATIONS",
]

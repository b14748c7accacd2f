"""Knowledge base connection: SQLite with sqlite-vec loaded.

Only the thread that opened the connection writes to it; embedding workers
never touch the database. A second process (another ``ragdesk`` command on
the same knowledge base) waits up to ``busy_timeout_ms`` for a write lock
instead of failing immediately with ``database is locked``.
"""

from __future__ import annotations

import sqlite3
from pathlib import Path

import sqlite_vec

DEFAULT_BUSY_TIMEOUT_MS = 5000


class Database:
    """Opens the knowledge base file at *db_path* (created if missing).

    Usable directly via ``connect()`` or as a context manager that closes the
    connection on exit.
    """

    def __init__(self, db_path: Path | str, busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS) -> None:
        self.db_path = Path(db_path)
        self.busy_timeout_ms = busy_timeout_ms
        self._conn: sqlite3.Connection | None = None

    def connect(self) -> sqlite3.Connection:
        """Return a new connection with rows as ``sqlite3.Row`` and vec0 available."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        conn.enable_load_extension(True)
        sqlite_vec.load(conn)
        conn.enable_load_extension(False)
        # WAL lets `ask` read while another process is ingesting.
        conn.execute("PRAGMA journal_mode = WAL")
        conn.execute(f"PRAGMA busy_timeout = {int(self.busy_timeout_ms)}")
        return conn

    def __enter__(self) -> sqlite3.Connection:
        self._conn = self.connect()
        return self._conn

    def __exit__(self, *args: object) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

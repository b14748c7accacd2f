"""Document persistence (load / save / delete) on SQLite."""

from __future__ import annotations

import sqlite3

from ragdesk.db.models import Document, DocumentStatus, utcnow

_COLUMNS = (
    "id, name, file_name, category, description, owner, content_hash, "
    "size_bytes, file_path, media_type, status, uploaded_at, modified_at"
)


class DocumentRepository:
    """Data access layer for documents.

    Wraps an open sqlite3.Connection owned by the caller. Vector records
    are managed separately by ``SqliteVectorIndex``.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def add(self, document: Document) -> None:
        """Insert a new document row."""
        self._conn.execute(
            f"INSERT INTO documents ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            _to_row(document),
        )
        self._conn.commit()

    def save(self, document: Document) -> None:
        """Insert or update *document*; ``modified_at`` is refreshed."""
        document.modified_at = utcnow()
        self._conn.execute(
            f"""
            INSERT INTO documents ({_COLUMNS}) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET
                name = excluded.name,
                file_name = excluded.file_name,
                category = excluded.category,
                description = excluded.description,
                owner = excluded.owner,
                content_hash = excluded.content_hash,
                size_bytes = excluded.size_bytes,
                file_path = excluded.file_path,
                media_type = excluded.media_type,
                status = excluded.status,
                modified_at = excluded.modified_at
            """,
            _to_row(document),
        )
        self._conn.commit()

    def get(self, document_id: str) -> Document | None:
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM documents WHERE id = ?", (document_id,)
        ).fetchone()
        return _row_to_document(row) if row else None

    def find_by_hash(self, content_hash: str) -> Document | None:
        """Return the document whose file bytes hash to *content_hash*, if any."""
        row = self._conn.execute(
            f"SELECT {_COLUMNS} FROM documents WHERE content_hash = ?", (content_hash,)
        ).fetchone()
        return _row_to_document(row) if row else None

    def list_documents(
        self,
        category: str | None = None,
        status: DocumentStatus | None = None,
    ) -> list[Document]:
        """Return documents ordered by upload time, optionally filtered.

        Args:
            category: Category tag (case-insensitive).
            status: Processing status.
        """
        sql = f"SELECT {_COLUMNS} FROM documents"
        clauses: list[str] = []
        params: list[str] = []
        if category:
            clauses.append("category = ?")
            params.append(category.upper())
        if status is not None:
            clauses.append("status = ?")
            params.append(status.value)
        if clauses:
            sql += " WHERE " + " AND ".join(clauses)
        sql += " ORDER BY uploaded_at, rowid"
        return [_row_to_document(r) for r in self._conn.execute(sql, params).fetchall()]

    def delete(self, document_id: str) -> None:
        self._conn.execute("DELETE FROM documents WHERE id = ?", (document_id,))
        self._conn.commit()

    def count(self) -> int:
        return self._conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0]

    def count_by_category(self) -> dict[str, int]:
        rows = self._conn.execute(
            "SELECT category, COUNT(*) AS n FROM documents GROUP BY category ORDER BY category"
        ).fetchall()
        return {r["category"]: r["n"] for r in rows}

    def count_by_status(self) -> dict[str, int]:
        """Return a count for every status, including those with no documents."""
        counts = {s.value: 0 for s in DocumentStatus}
        for r in self._conn.execute(
            "SELECT status, COUNT(*) AS n FROM documents GROUP BY status"
        ).fetchall():
            counts[r["status"]] = r["n"]
        return counts


# ------------------------------------------------------------------
# Row <-> model helpers
# ------------------------------------------------------------------


def _to_row(d: Document) -> tuple:
    return (
        d.id,
        d.name,
        d.file_name,
        d.category,
        d.description,
        d.owner,
        d.content_hash,
        d.size_bytes,
        d.file_path,
        d.media_type,
        d.status.value,
        d.uploaded_at,
        d.modified_at,
    )


def _row_to_document(row: sqlite3.Row) -> Document:
    return Document(
        id=row["id"],
        name=row["name"],
        file_name=row["file_name"],
        category=row["category"],
        description=row["description"],
        owner=row["owner"],
        content_hash=row["content_hash"],
        size_bytes=row["size_bytes"],
        file_path=row["file_path"],
        media_type=row["media_type"],
        status=DocumentStatus(row["status"]),
        uploaded_at=row["uploaded_at"],
        modified_at=row["modified_at"],
    )

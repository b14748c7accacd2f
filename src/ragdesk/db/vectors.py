"""sqlite-vec backed vector index.

Each embedding model gets its own vec0 virtual table (vec_records_{slug}),
created on the first upsert with the dimension of that first vector and
cosine distance. Record ids and metadata live in ``embedding_records``;
its integer primary key is the vec0 rowid.
"""

from __future__ import annotations

import json
import re
import sqlite3

from ragdesk.db.models import SearchResult
from ragdesk.errors import VectorIndexError
from ragdesk.rag.gateways import VectorIndex


def model_to_slug(model: str) -> str:
    """Convert a provider/model string to a valid table name suffix.

    Examples:
        "gemini/text-embedding-004" -> "gemini_text_embedding_004"
        "openai/text-embedding-3-small" -> "openai_text_embedding_3_small"
    """
    return re.sub(r"[^a-z0-9]", "_", model.lower())


def vec_table_name(model_slug: str) -> str:
    """Return the full vec table name for a model slug."""
    return f"vec_records_{model_slug}"


def ensure_vec_table(conn: sqlite3.Connection, model_slug: str, dimensions: int) -> str:
    """Create vec_records_{model_slug} if it doesn't already exist. Returns the table name."""
    if not re.fullmatch(r"[a-z0-9_]+", model_slug):
        raise ValueError(
            f"Invalid model_slug '{model_slug}'; use model_to_slug() to sanitize."
        )
    if dimensions < 1:
        raise ValueError(f"dimensions must be >= 1, got {dimensions}")

    table = vec_table_name(model_slug)
    if not _table_exists(conn, table):
        conn.execute(
            f"CREATE VIRTUAL TABLE {table} USING vec0("
            f"embedding float[{dimensions}] distance_metric=cosine)"
        )
        conn.commit()
    return table


class SqliteVectorIndex(VectorIndex):
    """VectorIndex over an open sqlite-vec connection.

    Args:
        conn: Connection with sqlite-vec loaded and schema initialised.
        model: Embedding model name; selects the vec table.
    """

    def __init__(self, conn: sqlite3.Connection, model: str) -> None:
        self._conn = conn
        self._slug = model_to_slug(model)
        self._table = vec_table_name(self._slug)

    @property
    def table(self) -> str:
        return self._table

    def upsert(self, record_id: str, vector: list[float], metadata: dict[str, str]) -> None:
        if not vector:
            raise VectorIndexError(f"Refusing to store an empty vector for '{record_id}'")
        document_id = metadata.get("document_id", "")
        try:
            ensure_vec_table(self._conn, self._slug, len(vector))
            existing = self._conn.execute(
                "SELECT vec_rowid, vec_table FROM embedding_records WHERE record_id = ?",
                (record_id,),
            ).fetchone()
            if existing is not None:
                rowid = existing["vec_rowid"]
                # The old vector may live in another model's table.
                if _table_exists(self._conn, existing["vec_table"]):
                    self._conn.execute(
                        f"DELETE FROM [{existing['vec_table']}] WHERE rowid = ?",  # noqa: S608
                        (rowid,),
                    )
                self._conn.execute(
                    "UPDATE embedding_records SET document_id = ?, vec_table = ?, metadata = ? "
                    "WHERE vec_rowid = ?",
                    (document_id, self._table, json.dumps(metadata), rowid),
                )
            else:
                cur = self._conn.execute(
                    "INSERT INTO embedding_records (record_id, document_id, vec_table, metadata) "
                    "VALUES (?, ?, ?, ?)",
                    (record_id, document_id, self._table, json.dumps(metadata)),
                )
                rowid = cur.lastrowid
            self._conn.execute(
                f"INSERT INTO {self._table}(rowid, embedding) VALUES (?, ?)",
                (rowid, json.dumps(vector)),
            )
            self._conn.commit()
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise VectorIndexError(f"Could not store record '{record_id}': {exc}") from exc

    def query(self, vector: list[float], top_k: int) -> list[SearchResult]:
        """Nearest-neighbour search; similarity = 1 - cosine distance, best first.

        Returns an empty list when nothing has been indexed yet for this model.
        Records whose stored text is empty are skipped.
        """
        if top_k < 1:
            return []
        try:
            if not _table_exists(self._conn, self._table):
                return []
            vec_rows = self._conn.execute(
                f"SELECT rowid, distance FROM {self._table} "
                "WHERE embedding MATCH ? ORDER BY distance LIMIT ?",
                (json.dumps(vector), top_k),
            ).fetchall()

            results: list[SearchResult] = []
            for vec_row in vec_rows:
                rec = self._conn.execute(
                    "SELECT record_id, metadata FROM embedding_records WHERE vec_rowid = ?",
                    (vec_row["rowid"],),
                ).fetchone()
                if rec is None:
                    continue
                metadata = json.loads(rec["metadata"])
                text = metadata.get("text", "")
                if not text:
                    continue
                results.append(
                    SearchResult(
                        id=rec["record_id"],
                        text=text,
                        metadata=metadata,
                        similarity=1.0 - float(vec_row["distance"]),
                    )
                )
            return results
        except sqlite3.Error as exc:
            raise VectorIndexError(f"Vector query failed: {exc}") from exc

    def delete_by_document(self, document_id: str) -> int:
        try:
            rows = self._conn.execute(
                "SELECT vec_rowid, vec_table FROM embedding_records WHERE document_id = ?",
                (document_id,),
            ).fetchall()
            for row in rows:
                if _table_exists(self._conn, row["vec_table"]):
                    self._conn.execute(
                        f"DELETE FROM [{row['vec_table']}] WHERE rowid = ?",  # noqa: S608
                        (row["vec_rowid"],),
                    )
            self._conn.execute(
                "DELETE FROM embedding_records WHERE document_id = ?", (document_id,)
            )
            self._conn.commit()
            return len(rows)
        except sqlite3.Error as exc:
            self._conn.rollback()
            raise VectorIndexError(
                f"Could not delete records of document '{document_id}': {exc}"
            ) from exc

    def count(self) -> int:
        try:
            return self._conn.execute("SELECT COUNT(*) FROM embedding_records").fetchone()[0]
        except sqlite3.Error as exc:
            raise VectorIndexError(f"Could not count records: {exc}") from exc

    def count_by_document(self, document_id: str) -> int:
        try:
            return self._conn.execute(
                "SELECT COUNT(*) FROM embedding_records WHERE document_id = ?", (document_id,)
            ).fetchone()[0]
        except sqlite3.Error as exc:
            raise VectorIndexError(
                f"Could not count records of document '{document_id}': {exc}"
            ) from exc


def _table_exists(conn: sqlite3.Connection, table: str) -> bool:
    return (
        conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?", (table,)
        ).fetchone()
        is not None
    )

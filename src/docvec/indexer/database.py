"""SQLite storage for chunk records and their embeddings."""

import json
import sqlite3
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path

from docvec.indexer.models import ChunkRecord

SCHEMA_VERSION = "1.0"

SCHEMA_SQL = """
-- docvec Index Schema v1.0
-- One row per chunk; (file_name, chunk_index) identifies a row.

PRAGMA journal_mode = WAL;

CREATE TABLE IF NOT EXISTS chunks (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    file_name   TEXT NOT NULL,
    file_type   TEXT NOT NULL,
    created_at  TEXT NOT NULL,
    modified_at TEXT NOT NULL,
    size        TEXT NOT NULL,
    fingerprint TEXT NOT NULL,
    chunk_index INTEGER NOT NULL,
    embedding   TEXT NOT NULL,
    content     TEXT NOT NULL,
    indexed_at  TEXT NOT NULL DEFAULT (datetime('now')),
    UNIQUE (file_name, chunk_index)
);

CREATE INDEX IF NOT EXISTS idx_chunks_file ON chunks(file_name);

-- Metadata table for index versioning
CREATE TABLE IF NOT EXISTS meta (
    key   TEXT PRIMARY KEY,
    value TEXT
);

INSERT OR REPLACE INTO meta (key, value) VALUES ('schema_version', '1.0');
INSERT OR IGNORE INTO meta (key, value) VALUES ('created_at', datetime('now'));
"""

INSERT_OR_REPLACE_SQL = """INSERT OR REPLACE INTO chunks
    (file_name, file_type, created_at, modified_at, size, fingerprint, chunk_index, embedding, content)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)"""


class Database:
    """SQLite database for the chunk index."""

    def __init__(self, db_path: Path):
        """Initialize database connection."""
        self.db_path = db_path
        self._local = threading.local()
        self._write_lock = threading.Lock()

    def _get_connection(self) -> sqlite3.Connection:
        """Get thread-local database connection."""
        if not hasattr(self._local, "conn") or self._local.conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            self._local.conn = sqlite3.connect(str(self.db_path))
            self._local.conn.row_factory = sqlite3.Row
        return self._local.conn

    @contextmanager
    def _read_cursor(self) -> Iterator[sqlite3.Cursor]:
        """Get a cursor for read operations."""
        conn = self._get_connection()
        cursor = conn.cursor()
        try:
            yield cursor
        finally:
            cursor.close()

    @contextmanager
    def _write_cursor(self) -> Iterator[sqlite3.Cursor]:
        """Get a cursor for write operations; commits or rolls back as a unit."""
        with self._write_lock:
            conn = self._get_connection()
            cursor = conn.cursor()
            try:
                yield cursor
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                cursor.close()

    def initialize(self) -> None:
        """Create the schema if it does not exist."""
        with self._write_cursor() as cursor:
            cursor.executescript(SCHEMA_SQL)

    def close(self) -> None:
        """Close the database connection."""
        if hasattr(self._local, "conn") and self._local.conn:
            self._local.conn.close()
            self._local.conn = None

    # Change detection

    def get_fingerprint(self, file_name: str) -> str | None:
        """Get the stored fingerprint of a file, or None if it was never stored."""
        with self._read_cursor() as cursor:
            cursor.execute(
                """SELECT fingerprint FROM chunks
                WHERE file_name = ?
                ORDER BY chunk_index
                LIMIT 1""",
                (file_name,),
            )
            row = cursor.fetchone()
            return row["fingerprint"] if row else None

    # Chunk writes

    def upsert_chunks(self, records: Sequence[ChunkRecord]) -> None:
        """Insert records, replacing any row with the same (file_name, chunk_index).

        Rows of the same file with other chunk indices are left untouched;
        use replace_file_chunks() to rewrite a file's full chunk set.
        """
        with self._write_cursor() as cursor:
            cursor.executemany(INSERT_OR_REPLACE_SQL, [self._record_params(r) for r in records])

    def replace_file_chunks(self, file_name: str, records: Sequence[ChunkRecord]) -> None:
        """Replace every stored chunk of a file with the given records.

        The delete and the inserts run in one transaction, so readers never
        see a mix of old and new chunks and no old index survives a shrink.
        """
        self._validate_chunk_set(file_name, records)

        with self._write_cursor() as cursor:
            cursor.execute("DELETE FROM chunks WHERE file_name = ?", (file_name,))
            cursor.executemany(INSERT_OR_REPLACE_SQL, [self._record_params(r) for r in records])

    def delete_file(self, file_name: str) -> int:
        """Delete all chunks of a file, returning the number of rows removed."""
        with self._write_cursor() as cursor:
            cursor.execute("DELETE FROM chunks WHERE file_name = ?", (file_name,))
            return cursor.rowcount

    @staticmethod
    def _validate_chunk_set(file_name: str, records: Sequence[ChunkRecord]) -> None:
        if not records:
            raise ValueError(f"Chunk set for {file_name} is empty")
        if any(r.file_name != file_name for r in records):
            raise ValueError(f"Chunk set contains records for files other than {file_name}")
        if len({r.fingerprint for r in records}) != 1:
            raise ValueError(f"Chunk set for {file_name} mixes fingerprints")
        indices = sorted(r.chunk_index for r in records)
        if indices != list(range(len(records))):
            raise ValueError(f"Chunk indices for {file_name} are not 0..{len(records) - 1}")

    @staticmethod
    def _record_params(record: ChunkRecord) -> tuple:
        return (
            record.file_name,
            record.file_type,
            record.created_at,
            record.modified_at,
            record.size,
            record.fingerprint,
            record.chunk_index,
            json.dumps(record.embedding),
            record.content,
        )

    # Chunk reads

    def get_chunks(self, file_name: str) -> list[ChunkRecord]:
        """Get all chunks for a file, ordered by chunk index."""
        with self._read_cursor() as cursor:
            cursor.execute(
                """SELECT * FROM chunks
                WHERE file_name = ?
                ORDER BY chunk_index""",
                (file_name,),
            )
            return [self._row_to_record(row) for row in cursor.fetchall()]

    def iter_embeddings(self) -> Iterator[tuple[str, int, str, list[float]]]:
        """Yield (file_name, chunk_index, content, embedding) in stored order."""
        with self._read_cursor() as cursor:
            cursor.execute(
                "SELECT file_name, chunk_index, content, embedding FROM chunks ORDER BY id"
            )
            for row in cursor:
                yield (
                    row["file_name"],
                    row["chunk_index"],
                    row["content"],
                    json.loads(row["embedding"]),
                )

    def list_file_names(self) -> set[str]:
        """Get the names of all stored files."""
        with self._read_cursor() as cursor:
            cursor.execute("SELECT DISTINCT file_name FROM chunks")
            return {row["file_name"] for row in cursor.fetchall()}

    def count_chunks(self, file_name: str | None = None) -> int:
        """Count stored chunks, optionally for a single file."""
        with self._read_cursor() as cursor:
            if file_name is None:
                cursor.execute("SELECT COUNT(*) AS n FROM chunks")
            else:
                cursor.execute(
                    "SELECT COUNT(*) AS n FROM chunks WHERE file_name = ?", (file_name,)
                )
            return cursor.fetchone()["n"]

    def _row_to_record(self, row: sqlite3.Row) -> ChunkRecord:
        """Convert a database row to a ChunkRecord."""
        return ChunkRecord(
            file_name=row["file_name"],
            file_type=row["file_type"],
            created_at=row["created_at"],
            modified_at=row["modified_at"],
            size=row["size"],
            fingerprint=row["fingerprint"],
            chunk_index=row["chunk_index"],
            embedding=json.loads(row["embedding"]),
            content=row["content"],
        )

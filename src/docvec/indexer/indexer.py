"""Main indexer that drives the scan, extract, embed and store pipeline."""

from __future__ import annotations

import logging
import sqlite3
import threading
from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from docvec.indexer.chunker import chunk_text
from docvec.indexer.database import Database
from docvec.indexer.embeddings import EmbeddingClient, EmbeddingError
from docvec.indexer.extractor import ExtractionError, ExtractorRegistry
from docvec.indexer.models import ChunkRecord, FileDescriptor, SearchResult
from docvec.indexer.preprocessor import preprocess_text, strip_stopwords
from docvec.indexer.search import find_similar
from docvec.indexer.vectors import DegenerateVectorError, normalize_embedding
from docvec.indexer.walker import walk_directory

if TYPE_CHECKING:
    from docvec.config import Config

logger = logging.getLogger(__name__)


class FileOutcome(str, Enum):
    """What happened to a file during a scan pass."""

    SKIPPED = "skipped"  # Fingerprint unchanged
    INDEXED = "indexed"  # Text chunks embedded and stored
    TRACKED = "tracked"  # Stored as a placeholder without text
    FAILED = "failed"  # Left as it was; retried on the next pass


@dataclass
class ScanStats:
    """Counters for one scan pass."""

    seen: int = 0
    indexed: int = 0
    tracked: int = 0
    skipped: int = 0
    failed: int = 0
    pruned: int = 0
    directory_errors: int = 0

    def record(self, outcome: FileOutcome) -> None:
        field_name = outcome.value
        setattr(self, field_name, getattr(self, field_name) + 1)

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


class Indexer:
    """
    Indexer that keeps the chunk store in sync with the configured directories.

    Files are processed one at a time. A file's rows are only written once
    all of its chunks have been embedded, and always as a complete
    replacement of its previous rows, so a failure never leaves a file
    half-updated.

    Thread Safety:
        Scans are serialized by a lock. Read operations are safe to call
        from multiple threads as the Database uses thread-local connections.
    """

    def __init__(
        self,
        config: Config,
        db: Database | None = None,
        embedder: EmbeddingClient | None = None,
        extractors: ExtractorRegistry | None = None,
    ):
        """
        Initialize the indexer.

        Args:
            config: Application configuration
            db: Store to write to (default: Database at config.db_path)
            embedder: Embedding client (default: built from config.embedding)
            extractors: Text extractors by extension (default: pdf and plain text)
        """
        self.config = config
        self.db = db or Database(config.db_path)
        self.embedder = embedder or EmbeddingClient(
            url=config.embedding.url,
            model=config.embedding.model,
            max_retries=config.embedding.max_retries,
            retry_delay=config.embedding.retry_delay,
            timeout=config.embedding.timeout,
            max_concurrency=config.embedding.max_concurrency,
        )
        self.extractors = extractors or ExtractorRegistry()
        self._initialized = False
        self._write_lock = threading.Lock()

    def initialize(self) -> None:
        """Initialize the database schema."""
        self.db.initialize()
        self._initialized = True

    def close(self) -> None:
        """Close database connections."""
        self.db.close()

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            self.initialize()

    def scan(self) -> ScanStats:
        """
        Run one indexing pass over every configured directory.

        Returns:
            ScanStats with per-outcome counts.
        """
        self._ensure_initialized()
        with self._write_lock:
            stats = ScanStats()
            seen: dict[str, Path] = {}

            for root in self.config.scan_paths:
                logger.info("Scanning directory: %s", root)
                self._scan_root(root, stats, seen)

            if self.config.prune_missing:
                self._prune(seen, stats)

            logger.info(
                "Scan complete: %d seen, %d indexed, %d tracked, %d unchanged, "
                "%d failed, %d pruned",
                stats.seen,
                stats.indexed,
                stats.tracked,
                stats.skipped,
                stats.failed,
                stats.pruned,
            )
            return stats

    def scan_directory(self, root: Path, stats: ScanStats | None = None) -> ScanStats:
        """
        Run one indexing pass over a single directory.

        Args:
            root: Directory to walk
            stats: Counters to add to (default: a fresh ScanStats)
        """
        self._ensure_initialized()
        with self._write_lock:
            if stats is None:
                stats = ScanStats()
            logger.info("Scanning directory: %s", root)
            self._scan_root(root, stats, {})
            return stats

    def _scan_root(self, root: Path, stats: ScanStats, seen: dict[str, Path]) -> None:
        def on_error(path: Path, error: OSError) -> None:
            stats.directory_errors += 1

        if not root.is_dir():
            stats.directory_errors += 1

        for descriptor in walk_directory(root, self.config.extensions, on_error=on_error):
            stats.seen += 1

            first_path = seen.setdefault(descriptor.name, descriptor.path)
            if first_path != descriptor.path:
                logger.warning(
                    "File name collision: %s and %s are both stored as %r",
                    first_path,
                    descriptor.path,
                    descriptor.name,
                )

            try:
                outcome = self._index_file(descriptor)
            except sqlite3.Error:
                logger.exception("Store error while processing %s", descriptor.path)
                outcome = FileOutcome.FAILED
            except Exception:
                logger.exception("Unexpected error while processing %s", descriptor.path)
                outcome = FileOutcome.FAILED
            stats.record(outcome)

    def _prune(self, seen: dict[str, Path], stats: ScanStats) -> None:
        """Delete rows of files that were not found in this pass."""
        if stats.directory_errors:
            logger.warning(
                "Not pruning: %d paths could not be read during the scan", stats.directory_errors
            )
            return

        for file_name in sorted(self.db.list_file_names() - seen.keys()):
            removed = self.db.delete_file(file_name)
            stats.pruned += 1
            logger.info("Pruned %s (%d chunks)", file_name, removed)

    def index_file(self, descriptor: FileDescriptor) -> FileOutcome:
        """
        Index a single file (thread-safe).

        Args:
            descriptor: FileDescriptor with the file's current metadata.
        """
        self._ensure_initialized()
        with self._write_lock:
            return self._index_file(descriptor)

    def _index_file(self, descriptor: FileDescriptor) -> FileOutcome:
        """Index a single file."""
        logger.debug(
            "Found %s (%s, %s, modified %s)",
            descriptor.path,
            descriptor.type,
            descriptor.size_text,
            descriptor.modified_text,
        )

        if self.db.get_fingerprint(descriptor.name) == descriptor.fingerprint:
            logger.debug("Unchanged: %s", descriptor.path)
            return FileOutcome.SKIPPED

        extractor = self.extractors.get(descriptor.extension)
        if extractor is None:
            self._store(descriptor, [""], [[]])
            logger.info("Tracked %s (no text extractor for %s)", descriptor.path, descriptor.type)
            return FileOutcome.TRACKED

        try:
            text = extractor.extract(descriptor.path)
        except ExtractionError as e:
            logger.warning("Skipping %s: %s", descriptor.path, e)
            return FileOutcome.FAILED

        chunks = chunk_text(preprocess_text(text, descriptor.name), self.config.chunk_size)
        if not chunks:
            self._store(descriptor, [""], [[]])
            logger.info("Tracked %s (no text to embed)", descriptor.path)
            return FileOutcome.TRACKED

        try:
            embeddings = self.embedder.embed_many(chunks)
            vectors = [normalize_embedding(e) for e in embeddings]
        except EmbeddingError as e:
            logger.error("Embedding failed for %s, will retry next pass: %s", descriptor.path, e)
            return FileOutcome.FAILED
        except DegenerateVectorError as e:
            logger.error("Invalid embedding for %s, will retry next pass: %s", descriptor.path, e)
            return FileOutcome.FAILED

        self._store(descriptor, chunks, vectors)
        logger.info("Indexed %s: %d chunks", descriptor.path, len(chunks))
        return FileOutcome.INDEXED

    def _store(
        self,
        descriptor: FileDescriptor,
        chunks: list[str],
        vectors: list[list[float]],
    ) -> None:
        records = [
            ChunkRecord(
                file_name=descriptor.name,
                file_type=descriptor.type,
                created_at=descriptor.created_text,
                modified_at=descriptor.modified_text,
                size=descriptor.size_text,
                fingerprint=descriptor.fingerprint,
                chunk_index=i,
                embedding=vector,
                content=chunk,
            )
            for i, (chunk, vector) in enumerate(zip(chunks, vectors, strict=True))
        ]
        self.db.replace_file_chunks(descriptor.name, records)

    # Query methods

    def search(self, query: str, limit: int = 5) -> list[SearchResult]:
        """
        Find the stored chunks most similar to a text query.

        The query goes through the same stopword filtering as indexed text
        before it is embedded.
        """
        self._ensure_initialized()
        prompt = strip_stopwords(query) or query
        vector = normalize_embedding(self.embedder.embed(prompt))
        return find_similar(self.db, vector, limit=limit)

    def get_chunks(self, file_name: str) -> list[ChunkRecord]:
        """Get all stored chunks for a file."""
        self._ensure_initialized()
        return self.db.get_chunks(file_name)

    def list_files(self) -> list[str]:
        """List stored file names."""
        self._ensure_initialized()
        return sorted(self.db.list_file_names())

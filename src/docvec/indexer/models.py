"""Data models for the indexer."""

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path


def format_timestamp(value: datetime) -> str:
    """Format a timestamp as ``YYYY-MM-DD HH:MM:SS``."""
    return value.strftime("%Y-%m-%d %H:%M:%S")


def format_file_size(size: int) -> str:
    """Format a byte count for humans (1024-based units)."""
    if size < 1024:
        return f"{size} bytes"
    if size < 1024**2:
        return f"{size / 1024:.2f} KB"
    if size < 1024**3:
        return f"{size / 1024**2:.2f} MB"
    return f"{size / 1024**3:.2f} GB"


@dataclass
class FileDescriptor:
    """A file discovered during a scan pass.

    ``name`` is the bare filename and is the key the store uses for the file,
    so same-named files in different directories share one set of rows.
    """

    path: Path  # Absolute path
    name: str
    extension: str  # Lower-case, without the leading dot
    created: datetime  # UTC
    modified: datetime  # UTC
    size: int  # Bytes
    fingerprint: str

    @property
    def type(self) -> str:
        return self.extension.upper()

    @property
    def created_text(self) -> str:
        return format_timestamp(self.created)

    @property
    def modified_text(self) -> str:
        return format_timestamp(self.modified)

    @property
    def size_text(self) -> str:
        return format_file_size(self.size)


@dataclass
class ChunkRecord:
    """One stored chunk, keyed by (file_name, chunk_index)."""

    file_name: str
    file_type: str
    created_at: str
    modified_at: str
    size: str
    fingerprint: str
    chunk_index: int
    embedding: list[float] = field(default_factory=list)
    content: str = ""

    @property
    def is_placeholder(self) -> bool:
        """True for rows that only track a file without embedded text."""
        return not self.embedding


@dataclass
class SearchResult:
    """A stored chunk ranked against a query vector."""

    file_name: str
    chunk_index: int
    content: str
    score: float

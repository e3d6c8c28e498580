"""
Indexer module for docvec.

This module turns directory trees into a SQLite store of embedded text
chunks and ranks those chunks against queries by cosine similarity.
"""

from docvec.indexer.chunker import chunk_text
from docvec.indexer.database import Database
from docvec.indexer.embeddings import EmbeddingClient, EmbeddingError
from docvec.indexer.extractor import ExtractionError, ExtractorRegistry
from docvec.indexer.fingerprint import compute_fingerprint
from docvec.indexer.indexer import FileOutcome, Indexer, ScanStats
from docvec.indexer.models import ChunkRecord, FileDescriptor, SearchResult
from docvec.indexer.preprocessor import preprocess_text
from docvec.indexer.search import find_similar
from docvec.indexer.vectors import DegenerateVectorError, normalize_embedding
from docvec.indexer.walker import walk_directory

__all__ = [
    "ChunkRecord",
    "Database",
    "DegenerateVectorError",
    "EmbeddingClient",
    "EmbeddingError",
    "ExtractionError",
    "ExtractorRegistry",
    "FileDescriptor",
    "FileOutcome",
    "Indexer",
    "ScanStats",
    "SearchResult",
    "chunk_text",
    "compute_fingerprint",
    "find_similar",
    "normalize_embedding",
    "preprocess_text",
    "walk_directory",
]

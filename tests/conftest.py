"""Shared fixtures for docvec tests."""

import math
from pathlib import Path

import pytest

from docvec.config import Config
from docvec.indexer import Database, EmbeddingError


class FakeEmbedder:
    """Stands in for EmbeddingClient without any network access.

    Returns a deterministic 3-dimensional vector per text. Texts containing
    any of the ``fail_on`` markers raise EmbeddingError, like a service that
    keeps failing after all retries.
    """

    def __init__(self, fail_on: tuple[str, ...] = ()):
        self.fail_on = fail_on
        self.calls: list[str] = []

    def _vector(self, text: str) -> list[float]:
        return [float(len(text) + 1), float(text.count("a") + 1), math.pi]

    def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        return self._vector(text)

    def embed_many(self, texts: list[str]) -> list[list[float]]:
        self.calls.extend(texts)
        if any(marker in text for text in texts for marker in self.fail_on):
            raise EmbeddingError("Embedding failed after 3 attempts", attempts=3)
        return [self._vector(text) for text in texts]


@pytest.fixture
def fake_embedder() -> FakeEmbedder:
    return FakeEmbedder()


@pytest.fixture
def docs_root(tmp_path: Path) -> Path:
    root = tmp_path / "docs"
    root.mkdir()
    return root


@pytest.fixture
def config(tmp_path: Path, docs_root: Path) -> Config:
    """Config scanning docs_root for txt, sql and bin files."""
    return Config(
        scan_paths=[docs_root],
        extensions={"txt", "sql", "bin"},
        db_path=tmp_path / "index.db",
    )


@pytest.fixture
def db(tmp_path: Path):
    """Create a temporary database for testing."""
    database = Database(tmp_path / "test.db")
    database.initialize()
    yield database
    database.close()


@pytest.fixture
def embedder_factory():
    """Build FakeEmbedder instances with custom failure markers."""
    return FakeEmbedder

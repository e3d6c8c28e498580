"""Tests for similarity search."""

import pytest

from docvec.indexer.database import Database
from docvec.indexer.models import ChunkRecord
from docvec.indexer.search import find_similar
from docvec.indexer.vectors import normalize_embedding


def store_vector(db: Database, file_name: str, vector: list[float]) -> None:
    db.replace_file_chunks(
        file_name,
        [
            ChunkRecord(
                file_name=file_name,
                file_type="TXT",
                created_at="2024-01-01 00:00:00",
                modified_at="2024-01-01 00:00:00",
                size="1 bytes",
                fingerprint=f"fp-{file_name}",
                chunk_index=0,
                embedding=vector,
                content=f"content of {file_name}",
            )
        ],
    )


class TestFindSimilar:
    @pytest.fixture
    def populated(self, db: Database) -> Database:
        store_vector(db, "a.txt", [1.0, 0.0])
        store_vector(db, "b.txt", [0.0, 1.0])
        store_vector(db, "c.txt", normalize_embedding([0.99, 0.14]))
        return db

    def test_ranks_by_cosine_similarity(self, populated: Database):
        results = find_similar(populated, [1.0, 0.0], limit=3)
        assert [r.file_name for r in results] == ["a.txt", "c.txt", "b.txt"]

    def test_closer_vector_beats_orthogonal(self, populated: Database):
        results = find_similar(populated, [1.0, 0.0], limit=3)
        scores = {r.file_name: r.score for r in results}
        assert scores["a.txt"] == pytest.approx(1.0)
        assert scores["c.txt"] > scores["b.txt"]
        assert scores["b.txt"] == pytest.approx(0.0)

    def test_limit(self, populated: Database):
        results = find_similar(populated, [1.0, 0.0], limit=1)
        assert len(results) == 1
        assert results[0].file_name == "a.txt"

    def test_non_positive_limit(self, populated: Database):
        assert find_similar(populated, [1.0, 0.0], limit=0) == []

    def test_ties_keep_stored_order(self, db: Database):
        store_vector(db, "first.txt", [0.0, 1.0])
        store_vector(db, "second.txt", [0.0, 1.0])
        store_vector(db, "third.txt", [0.0, 1.0])

        results = find_similar(db, [0.0, 1.0], limit=3)
        assert [r.file_name for r in results] == ["first.txt", "second.txt", "third.txt"]

    def test_result_fields(self, populated: Database):
        result = find_similar(populated, [0.0, 1.0], limit=1)[0]
        assert result.file_name == "b.txt"
        assert result.chunk_index == 0
        assert result.content == "content of b.txt"

    def test_skips_placeholders_and_other_dimensions(self, db: Database):
        store_vector(db, "image.bin", [])
        store_vector(db, "other-model.txt", [1.0, 0.0, 0.0])
        store_vector(db, "match.txt", [1.0, 0.0])

        results = find_similar(db, [1.0, 0.0], limit=10)
        assert [r.file_name for r in results] == ["match.txt"]

    def test_empty_store(self, db: Database):
        assert find_similar(db, [1.0, 0.0]) == []

    def test_empty_query_raises(self, db: Database):
        with pytest.raises(ValueError, match="non-empty"):
            find_similar(db, [])

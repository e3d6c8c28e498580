"""Exact cosine-similarity search over stored chunk vectors."""

import logging
from collections.abc import Sequence

import numpy as np

from docvec.indexer.database import Database
from docvec.indexer.models import SearchResult

logger = logging.getLogger(__name__)


def find_similar(
    db: Database,
    query_vector: Sequence[float],
    limit: int = 5,
) -> list[SearchResult]:
    """
    Rank every stored chunk against a unit-normalized query vector.

    Stored vectors are unit-normalized too, so the dot product is the cosine
    similarity. Results are ordered by descending score; equal scores keep
    stored order. Placeholder rows (no embedding) and vectors of a different
    dimension are skipped.

    This is a linear scan over all chunks.
    """
    if limit < 1:
        return []

    query = np.asarray(query_vector, dtype=np.float64)
    if query.ndim != 1 or query.size == 0:
        raise ValueError("Query vector must be a non-empty sequence of floats")

    keys: list[tuple[str, int, str]] = []
    vectors: list[list[float]] = []
    skipped = 0
    for file_name, chunk_index, content, embedding in db.iter_embeddings():
        if len(embedding) != query.size:
            skipped += 1
            continue
        keys.append((file_name, chunk_index, content))
        vectors.append(embedding)

    if skipped:
        logger.debug("Skipped %d chunks without a comparable embedding", skipped)
    if not vectors:
        return []

    matrix = np.asarray(vectors, dtype=np.float64)
    scores = matrix @ query
    order = np.argsort(-scores, kind="stable")[:limit]

    return [
        SearchResult(
            file_name=keys[i][0],
            chunk_index=keys[i][1],
            content=keys[i][2],
            score=float(scores[i]),
        )
        for i in order
    ]

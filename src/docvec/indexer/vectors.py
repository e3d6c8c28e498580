"""Vector helpers: unit normalization."""

from collections.abc import Sequence

import numpy as np


class DegenerateVectorError(ValueError):
    """Raised for vectors that cannot be normalized (empty, zero, NaN/inf)."""


def normalize_embedding(vector: Sequence[float]) -> list[float]:
    """Scale a vector to unit Euclidean length."""
    arr = np.asarray(vector, dtype=np.float64)
    if arr.ndim != 1 or arr.size == 0:
        raise DegenerateVectorError("Cannot normalize an empty vector")
    if not np.all(np.isfinite(arr)):
        raise DegenerateVectorError("Vector contains non-finite values")

    norm = np.linalg.norm(arr)
    if norm == 0:
        raise DegenerateVectorError("Cannot normalize a zero vector")
    return (arr / norm).tolist()

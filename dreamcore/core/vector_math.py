"""
Vector similarity helpers.

Cosine similarity over small in-memory candidate sets with numpy, either
for a single pair or for every (row, column) pair of two vector sets.

Dependencies: numpy
System role: Shared cosine similarity for theme matching and fallbacks
"""

from collections.abc import Sequence

import numpy as np

Vector = Sequence[float]


def _check_dimensions(vectors: Sequence[Vector]) -> None:
    dims = {len(v) for v in vectors}
    if len(dims) > 1:
        raise ValueError(f"Vector dimension mismatch: {sorted(dims)}")


def _unit_rows(matrix: np.ndarray) -> np.ndarray:
    """Scale rows to unit length; zero rows stay zero."""
    norms = np.linalg.norm(matrix, axis=1, keepdims=True)
    return np.divide(matrix, norms, out=np.zeros_like(matrix), where=norms != 0.0)


def cosine_similarity(a: Vector, b: Vector) -> float:
    """
    Compute cosine similarity between two vectors.

    Args:
        a: First vector
        b: Second vector

    Returns:
        float: dot(a, b) / (|a| * |b|), or 0.0 when either vector has zero norm

    Raises:
        ValueError: If the vectors have different dimensionality
    """
    if len(a) != len(b):
        raise ValueError(f"Vector dimension mismatch: {len(a)} != {len(b)}")

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = np.linalg.norm(va)
    norm_b = np.linalg.norm(vb)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(va, vb) / (norm_a * norm_b))


def cosine_similarity_matrix(rows: Sequence[Vector], columns: Sequence[Vector]) -> np.ndarray:
    """
    Cosine similarity of every row vector against every column vector.

    Args:
        rows: First vector set (e.g. chunk embeddings)
        columns: Second vector set (e.g. theme vectors)

    Returns:
        np.ndarray: Shape (len(rows), len(columns)); zero-norm vectors score 0

    Raises:
        ValueError: If the vectors do not all share one dimensionality
    """
    if not rows or not columns:
        return np.zeros((len(rows), len(columns)))
    _check_dimensions(list(rows) + list(columns))

    left = _unit_rows(np.asarray(rows, dtype=np.float64))
    right = _unit_rows(np.asarray(columns, dtype=np.float64))
    return left @ right.T

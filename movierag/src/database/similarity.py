"""
MovieRAG - Similarity Search
==============================
Exact top-k cosine similarity over a small set of ``MovieRecord``s.

Algorithm
---------
1. Stack the record vectors into a matrix (float64 for scoring).
2. ``score = dot(q, v) / (norm(q) * norm(v))`` for every row.  A zero
   norm on either side yields a score of ``0.0``.
3. Stable descending sort, so equal scores keep insertion order.
4. Trim to ``top``.

The function is pure: it never mutates the records it scores.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

from movierag.src.core.exceptions import DimensionMismatchError
from movierag.src.database.records import MovieRecord, SearchResult, Vector


def cosine_similarity(a: Vector, b: Vector) -> float:
    """Cosine similarity of two equal-length vectors (``0.0`` if either is all-zero)."""
    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    if va.shape != vb.shape:
        raise DimensionMismatchError(va.shape[0], vb.shape[0])
    scores = _cosine_scores(va, vb[np.newaxis, :])
    return float(scores[0])


def search(query: Vector, records: Iterable[MovieRecord], top: int, dimensions: int | None = None) -> list[SearchResult]:
    """
    Rank *records* by cosine similarity to *query* and return the best *top*.

    Parameters
    ----------
    query
        Query embedding.
    records
        Records in insertion order.  Consumed once.
    top
        Maximum number of results; ``0`` returns an empty list.
    dimensions
        Expected dimensionality.  Defaults to that of the first record.

    Returns
    -------
    list[SearchResult]
        At most *top* results, scores non-increasing.

    Raises
    ------
    ValueError
        If *top* is negative or *query* is not one-dimensional.
    DimensionMismatchError
        If the query length differs from the stored vectors.
    """
    if top < 0:
        raise ValueError(f"top must be ≥ 0, got {top}")
    if top == 0:
        return []

    q = np.asarray(query, dtype=np.float64)
    if q.ndim != 1:
        raise ValueError(f"Query vector must be one-dimensional, got shape {q.shape}.")

    candidates = list(records)
    if not candidates:
        return []

    expected = dimensions if dimensions is not None else candidates[0].dimensions
    if q.shape[0] != expected:
        raise DimensionMismatchError(expected, q.shape[0], what="query vector")

    matrix = np.vstack([r.vector for r in candidates]).astype(np.float64)
    scores = _cosine_scores(q, matrix)

    # kind="stable" keeps insertion order among equal scores
    order = np.argsort(-scores, kind="stable")[:top]
    return [SearchResult(record=candidates[i], score=float(scores[i])) for i in order]


def _cosine_scores(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Row-wise cosine similarity between *matrix* and *query*."""
    dots = matrix @ query
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    scores = np.zeros_like(dots)
    np.divide(dots, norms, out=scores, where=norms > 0)
    return np.clip(scores, -1.0, 1.0)

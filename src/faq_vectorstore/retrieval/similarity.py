"""
Similarity search - exact cosine ranking over a list of documents.

This is a linear scan, O(n*d) per query. There is no approximate index:
every document is scored against the query on every call.

Ranking rules:
- score = dot(doc, query) / (|doc| * |query|), 0.0 if either norm is 0
- scores within rounding error of 1.0 are exactly 1.0, so identical
  embeddings pass a 1.0 threshold
- keep documents with score >= threshold (inclusive)
- sort by descending score, ties keep input (insertion) order
- truncate to top_k
"""

from __future__ import annotations

import numbers
from collections.abc import Sequence
from typing import Any

import numpy as np

from faq_vectorstore.core.errors import DimensionMismatch, InvalidArgument
from faq_vectorstore.retrieval.document import Document, SearchResult

# Rounding allowance per vector component when snapping scores to +-1
_SNAP_ULPS = 4


def validate_search_args(top_k: int, threshold: float) -> None:
    """Reject bad top_k / threshold before any work is done."""
    if isinstance(top_k, bool) or not isinstance(top_k, numbers.Integral) or top_k < 1:
        raise InvalidArgument(f"top_k must be a positive integer, got {top_k!r}")
    if (
        isinstance(threshold, bool)
        or not isinstance(threshold, numbers.Real)
        or not 0.0 <= threshold <= 1.0
    ):
        raise InvalidArgument(f"threshold must be within [0, 1], got {threshold!r}")


def _snap_to_unit(scores: np.ndarray, dimension: int) -> np.ndarray:
    """
    Clip scores to [-1, 1] and snap values within rounding error of +-1.

    Normalised dot products of identical (or exactly scaled) vectors can land
    a few ulps short of 1.0; the bound grows with the vector length.
    """
    scores = np.clip(scores, -1.0, 1.0)
    tolerance = _SNAP_ULPS * np.finfo(np.float64).eps * max(1, dimension)
    scores[np.abs(scores - 1.0) <= tolerance] = 1.0
    scores[np.abs(scores + 1.0) <= tolerance] = -1.0
    return scores


def cosine_similarity(a: Sequence[float] | np.ndarray, b: Sequence[float] | np.ndarray) -> float:
    """Cosine similarity of two vectors; 0.0 when either has zero magnitude."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    if a.shape != b.shape:
        raise DimensionMismatch(expected=a.shape[-1], actual=b.shape[-1])
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    score = np.atleast_1d(np.dot(a / norm_a, b / norm_b))
    return float(_snap_to_unit(score, a.size)[0])


def score_documents(documents: Sequence[Document], query_vector: Any) -> np.ndarray:
    """Cosine score of every document against the query, in input order."""
    query = np.asarray(query_vector, dtype=np.float64)
    if query.ndim != 1 or query.size == 0:
        raise InvalidArgument("query vector must be a non-empty 1-D sequence")
    if not documents:
        return np.zeros(0, dtype=np.float64)

    for doc in documents:
        if doc.dimension != query.size:
            raise DimensionMismatch(expected=doc.dimension, actual=query.size)

    matrix = np.array([doc.embedding for doc in documents], dtype=np.float64)
    scores = np.zeros(len(documents), dtype=np.float64)
    query_norm = np.linalg.norm(query)
    if query_norm == 0.0:
        return scores

    # Normalise first so identical directions compare as unit vectors
    row_norms = np.linalg.norm(matrix, axis=1)
    nonzero = row_norms > 0.0
    unit_rows = matrix[nonzero] / row_norms[nonzero, np.newaxis]
    scores[nonzero] = unit_rows @ (query / query_norm)
    return _snap_to_unit(scores, query.size)


def rank(
    documents: Sequence[Document],
    query_vector: Any,
    top_k: int,
    threshold: float,
) -> list[SearchResult]:
    """
    Rank documents by cosine similarity to the query vector.

    Args:
        documents: Candidates, in insertion order
        query_vector: Query embedding (list, tuple or numpy array)
        top_k: Maximum number of results, must be >= 1
        threshold: Minimum score in [0, 1]; 0.0 disables filtering

    Returns:
        Results sorted by descending score. Empty when nothing qualifies.

    Raises:
        InvalidArgument: bad top_k, threshold or query vector
        DimensionMismatch: query length differs from the documents'
    """
    validate_search_args(top_k, threshold)
    scores = score_documents(documents, query_vector)

    keep = np.flatnonzero(scores >= threshold)
    # Stable sort on negated scores keeps insertion order for ties
    order = keep[np.argsort(-scores[keep], kind="stable")]
    return [
        SearchResult(document=documents[i], score=float(scores[i]))
        for i in order[:top_k]
    ]

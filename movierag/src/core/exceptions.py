"""
MovieRAG - Error Kinds
========================
Every error raised on purpose by MovieRAG derives from ``MovieRAGError``.

``DimensionMismatchError``
    A vector does not match the collection's dimensionality.  Always a
    configuration bug (e.g. the embedding model changed); never retried.
``CatalogError``
    The movie catalog could not be read or failed validation.
``ModelCallError``
    An external embedding or chat call failed (network, auth, rate
    limit, ...).  The original exception is chained as ``__cause__``.
"""

from __future__ import annotations

from typing import Literal

ModelStage = Literal["embedding", "chat"]


class MovieRAGError(Exception):
    """Base class for all MovieRAG errors."""


class DimensionMismatchError(MovieRAGError, ValueError):
    """A vector's length differs from the collection dimensionality."""

    def __init__(self, expected: int, actual: int, what: str = "vector") -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(f"Dimension mismatch: {what} has {actual} dimension(s), collection expects {expected}.")


class CatalogError(MovieRAGError, ValueError):
    """The movie catalog is unreadable or invalid."""


class ModelCallError(MovieRAGError, RuntimeError):
    """Retrieval/generation failed inside an external model call."""

    def __init__(self, stage: ModelStage, message: str) -> None:
        self.stage = stage
        super().__init__(f"{stage} call failed: {message}")

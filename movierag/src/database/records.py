"""
MovieRAG - Record Types
=========================
Data holders shared by the collection and the similarity search.

``MovieRecord``
    One movie: unique integer key, title, description and its embedding.
    The vector is copied into a read-only 1-D ``float32`` array on
    construction, and the record itself is frozen.
``SearchResult``
    A record paired with its cosine similarity to a query (higher is
    closer).  Produced per query and never stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np

Vector = Sequence[float] | np.ndarray


@dataclass(frozen=True, eq=False)
class MovieRecord:
    """A movie and its description embedding.  Immutable once built."""

    key: int
    title: str
    description: str
    vector: np.ndarray

    def __post_init__(self) -> None:
        vector = np.array(self.vector, dtype=np.float32)
        if vector.ndim != 1:
            raise ValueError(f"Record {self.key}: vector must be one-dimensional, got shape {vector.shape}.")
        # Shared with callers by get/get_all/search, so it must stay read-only
        vector.flags.writeable = False
        object.__setattr__(self, "vector", vector)

    @property
    def dimensions(self) -> int:
        return int(self.vector.shape[0])

    def __repr__(self) -> str:
        return f"MovieRecord(key={self.key}, title={self.title!r}, dimensions={self.dimensions})"


@dataclass(frozen=True)
class SearchResult:
    """A retrieved record with its similarity score."""

    record: MovieRecord
    score: float

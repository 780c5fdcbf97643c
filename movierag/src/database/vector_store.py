"""
MovieRAG - In-Memory Vector Store
===================================
Process-local replacement for an on-disk vector database:
  • ``InMemoryCollection`` — insertion-ordered ``key → MovieRecord``
    mapping with upsert, lookup, delete and cosine top-k search.
  • ``InMemoryVectorStore`` — named collections, created on first use.

Design decisions:
  • **Insertion order is the tie-break** — upserting an existing key
    replaces the record in place, so its rank among equal scores never
    changes.
  • **One dimensionality per collection** — declared up front or learned
    from the first record; every later vector is checked before anything
    is written.
  • **No persistence, no locking** — the store lives and dies with the
    process, and callers serialise access themselves.

Usage:
    from movierag.src.database.vector_store import InMemoryVectorStore

    store = InMemoryVectorStore()
    movies = store.get_collection("movies")
    movies.upsert(MovieRecord(key=1, title="...", description="...", vector=vec))
    results = movies.search(query_vector, top=2)
"""

from __future__ import annotations

from typing import Iterable, Iterator

from movierag.src.core.exceptions import DimensionMismatchError
from movierag.src.database import similarity
from movierag.src.database.records import MovieRecord, SearchResult, Vector
from movierag.src.utils.logger import get_logger

logger = get_logger(__name__)


class InMemoryCollection:
    """
    Insertion-ordered collection of ``MovieRecord``s.

    Parameters
    ----------
    name
        Collection name (used in logs and ``repr``).
    dimensions
        Fixed vector width.  If *None*, the first upserted record decides
        and the collection forgets it again once emptied.
    """

    __slots__ = ("name", "_declared_dimensions", "_dimensions", "_records")

    def __init__(self, name: str, dimensions: int | None = None) -> None:
        if dimensions is not None and dimensions <= 0:
            raise ValueError(f"dimensions must be > 0, got {dimensions}")
        self.name: str = name
        self._declared_dimensions: int | None = dimensions
        self._dimensions: int | None = dimensions
        self._records: dict[int, MovieRecord] = {}


    @property
    def dimensions(self) -> int | None:
        """Vector width of this collection, or *None* while it is still unknown."""
        return self._dimensions


    def upsert(self, record: MovieRecord) -> None:
        """
        Insert *record*, or replace the record with the same key in place.

        Raises
        ------
        DimensionMismatchError
            If the record's vector does not match the collection width.
        """
        self._check_dimensions(record)
        replaced = record.key in self._records
        self._records[record.key] = record
        if self._dimensions is None:
            self._dimensions = record.dimensions
        logger.debug("[STORE] %s key=%d into '%s'.", "Replaced" if replaced else "Inserted", record.key, self.name)


    def upsert_batch(self, records: Iterable[MovieRecord]) -> int:
        """Validate every record first, then upsert them all.  Returns the count."""
        batch = list(records)
        expected = self._dimensions if self._dimensions is not None else (batch[0].dimensions if batch else None)
        for record in batch:
            if record.dimensions != expected:
                raise DimensionMismatchError(expected, record.dimensions, what=f"record {record.key} vector")
        for record in batch:
            self.upsert(record)
        logger.info("[STORE] Upserted %d record(s). Collection '%s' now has %d.", len(batch), self.name, len(self._records))
        return len(batch)


    def get(self, key: int) -> MovieRecord | None:
        """Return the record stored under *key*, or *None*."""
        return self._records.get(key)


    def delete(self, key: int) -> bool:
        """Remove the record under *key*.  Returns True if it existed."""
        removed = self._records.pop(key, None) is not None
        if removed and not self._records:
            self._dimensions = self._declared_dimensions
        return removed


    def get_all(self) -> Iterator[MovieRecord]:
        """Lazily yield every record in insertion order (fresh iterator per call)."""
        yield from list(self._records.values())


    def search(self, query_vector: Vector, top: int = 2) -> list[SearchResult]:
        """
        Cosine top-k search over the collection.

        Parameters
        ----------
        query_vector
            Embedding of the user's query.
        top
            Maximum results (default 2).

        Returns
        -------
        list[SearchResult]
            Best matches first; ties keep insertion order.  Empty for an
            empty collection or ``top == 0``.
        """
        results = similarity.search(query_vector, self._records.values(), top, dimensions=self._dimensions)
        logger.info("[SEARCH] '%s': %d result(s) for top=%d.", self.name, len(results), top)
        return results


    def count(self) -> int:
        """Return the number of records in the collection."""
        return len(self._records)


    def __len__(self) -> int:
        return len(self._records)


    def __contains__(self, key: object) -> bool:
        return key in self._records


    def _check_dimensions(self, record: MovieRecord) -> None:
        if self._dimensions is not None and record.dimensions != self._dimensions:
            raise DimensionMismatchError(self._dimensions, record.dimensions, what=f"record {record.key} vector")


    def __repr__(self) -> str:
        return f"InMemoryCollection(name='{self.name}', dimensions={self._dimensions}, rows={len(self._records)})"


class InMemoryVectorStore:
    """Registry of named ``InMemoryCollection``s."""

    __slots__ = ("_collections",)

    def __init__(self) -> None:
        self._collections: dict[str, InMemoryCollection] = {}


    def get_collection(self, name: str, dimensions: int | None = None) -> InMemoryCollection:
        """Return the collection called *name*, creating it if it does not exist yet."""
        collection = self._collections.get(name)
        if collection is None:
            collection = InMemoryCollection(name, dimensions=dimensions)
            self._collections[name] = collection
            logger.info("[STORE] Created collection '%s' (dimensions=%s).", name, dimensions)
        elif dimensions is not None and collection.dimensions is not None and collection.dimensions != dimensions:
            raise DimensionMismatchError(collection.dimensions, dimensions, what=f"requested collection '{name}'")
        return collection


    def collection_names(self) -> list[str]:
        """Names of all collections, in creation order."""
        return list(self._collections)


    def delete_collection(self, name: str) -> bool:
        """Drop a collection.  Returns True if it existed."""
        if self._collections.pop(name, None) is None:
            logger.warning("[STORE] Collection '%s' does not exist — nothing to drop.", name)
            return False
        logger.info("[STORE] Dropped collection '%s'.", name)
        return True


    def __repr__(self) -> str:
        return f"InMemoryVectorStore(collections={self.collection_names()})"

"""
MovieRAG - Catalog Ingestion
==============================
Loads the movie catalog, embeds every description and upserts the
resulting ``MovieRecord``s into an ``InMemoryCollection``.

Key design decisions:
    • **Dependency Injection** – receives the collection + embedder.
    • **Validation first** – catalog entries are validated with pydantic
      (unique keys, non-empty text) before any embedding call is made.
    • **Batch embedding** – descriptions are embedded in batches of
      ``_EMBED_BATCH_SIZE`` with ``aembed_documents``.

Usage:
    from movierag.src.core.ingestor import CatalogIngestor, load_catalog
    ingestor = CatalogIngestor(collection, embedder)
    stored   = await ingestor.ingest(load_catalog())
"""

from __future__ import annotations

import time
from pathlib import Path
from typing import Iterable, Mapping

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from movierag.config.catalog import MOVIE_CATALOG
from movierag.src.core.exceptions import CatalogError, ModelCallError
from movierag.src.core.rag_engine import Embedder
from movierag.src.database.records import MovieRecord
from movierag.src.database.vector_store import InMemoryCollection
from movierag.src.utils.logger import get_logger
from movierag.src.utils.text_utils import clean_text

logger = get_logger(__name__)

_EMBED_BATCH_SIZE = 64


class MovieEntry(BaseModel):
    """One catalog entry before it is embedded."""

    key: int
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)


_CATALOG_ADAPTER = TypeAdapter(list[MovieEntry])


def load_catalog(path: Path | None = None) -> list[MovieEntry]:
    """
    Return the validated movie catalog.

    Parameters
    ----------
    path
        JSON file holding an array of ``{"key", "title", "description"}``
        objects.  *None* selects the built-in catalog.

    Raises
    ------
    CatalogError
        If the file cannot be read, is not valid JSON, fails validation,
        or repeats a key.
    """
    try:
        if path is None:
            entries = _CATALOG_ADAPTER.validate_python(MOVIE_CATALOG)
            source = "built-in catalog"
        else:
            entries = _CATALOG_ADAPTER.validate_json(Path(path).read_bytes())
            source = str(path)
    except OSError as exc:
        raise CatalogError(f"Cannot read catalog {path}: {exc}") from exc
    except ValidationError as exc:
        raise CatalogError(f"Invalid catalog {path or '(built-in)'}: {exc}") from exc

    _check_unique_keys(entries)
    logger.info("[INGEST] Loaded %d movie(s) from %s.", len(entries), source)
    return entries


def parse_entries(raw: Iterable[Mapping[str, object]]) -> list[MovieEntry]:
    """Validate in-memory catalog dicts (same rules as ``load_catalog``)."""
    try:
        entries = _CATALOG_ADAPTER.validate_python(list(raw))
    except ValidationError as exc:
        raise CatalogError(f"Invalid catalog: {exc}") from exc
    _check_unique_keys(entries)
    return entries


def _check_unique_keys(entries: list[MovieEntry]) -> None:
    seen: set[int] = set()
    for entry in entries:
        if entry.key in seen:
            raise CatalogError(f"Duplicate movie key: {entry.key}")
        seen.add(entry.key)
        if not entry.title.strip() or not entry.description.strip():
            raise CatalogError(f"Movie {entry.key} has an empty title or description.")


class CatalogIngestor:
    """
    Catalog ingestion: clean → embed → build records → upsert.

    Parameters
    ----------
    collection
        Target ``InMemoryCollection`` (injected).
    embedder
        Any ``Embedder`` (e.g.
        ``GoogleGenerativeAIEmbeddings``).
    batch_size
        Descriptions per embedding request.
    """

    __slots__ = ("_collection", "_embedder", "_batch_size")

    def __init__(self, collection: InMemoryCollection, embedder: Embedder, batch_size: int = _EMBED_BATCH_SIZE) -> None:
        if batch_size < 1:
            raise ValueError(f"batch_size must be ≥ 1, got {batch_size}")
        self._collection = collection
        self._embedder = embedder
        self._batch_size = batch_size


    async def ingest(self, entries: Iterable[MovieEntry]) -> int:
        """
        Embed and store every entry.

        Returns
        -------
        int
            Number of records upserted.

        Raises
        ------
        ModelCallError
            If an embedding request fails.  Nothing is stored in that case.
        DimensionMismatchError
            If the embeddings do not fit the collection.
        """
        items = list(entries)
        if not items:
            logger.warning("[INGEST] Empty catalog — nothing to embed.")
            return 0

        t_start = time.perf_counter()
        descriptions = [clean_text(e.description) for e in items]

        vectors: list[list[float]] = []
        for i in range(0, len(descriptions), self._batch_size):
            batch = descriptions[i : i + self._batch_size]
            try:
                vectors.extend(await self._embedder.aembed_documents(batch))
            except Exception as exc:
                logger.exception("[INGEST] Embedding batch %d–%d failed.", i, i + len(batch) - 1)
                raise ModelCallError("embedding", str(exc)) from exc

        if len(vectors) != len(items):
            raise ModelCallError("embedding", f"expected {len(items)} vectors, got {len(vectors)}")

        records = [MovieRecord(key=e.key, title=e.title.strip(), description=desc, vector=vec) for e, desc, vec in zip(items, descriptions, vectors)]
        stored = self._collection.upsert_batch(records)

        elapsed_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[INGEST] %d movie(s) embedded and stored in %.1fms.", stored, elapsed_ms)
        return stored

"""Tests for catalog loading and ingestion."""

from __future__ import annotations

import json

import pytest
from langchain_core.embeddings import DeterministicFakeEmbedding

from movierag.src.core.exceptions import CatalogError, DimensionMismatchError, ModelCallError
from movierag.src.core.ingestor import CatalogIngestor, MovieEntry, load_catalog, parse_entries
from movierag.src.database.vector_store import InMemoryCollection

from conftest import FailingEmbeddings, KeywordEmbeddings


class ShortEmbeddings(KeywordEmbeddings):
    """Drops the last vector of every batch."""

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return super().embed_documents(texts)[:-1]


class TestLoadCatalog:
    def test_built_in_catalog(self):
        entries = load_catalog()
        assert [e.key for e in entries] == [1, 2, 3]
        assert [e.title for e in entries] == ["The Matrix", "Inception", "Interstellar"]

    def test_json_file(self, tmp_path):
        path = tmp_path / "movies.json"
        path.write_text(json.dumps([{"key": 7, "title": "Alien", "description": "A crew meets a deadly creature."}]), encoding="utf-8")
        entries = load_catalog(path)
        assert entries == [MovieEntry(key=7, title="Alien", description="A crew meets a deadly creature.")]

    def test_missing_file(self, tmp_path):
        with pytest.raises(CatalogError, match="Cannot read"):
            load_catalog(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "movies.json"
        path.write_text("[{not json", encoding="utf-8")
        with pytest.raises(CatalogError, match="Invalid catalog"):
            load_catalog(path)

    def test_missing_field(self, tmp_path):
        path = tmp_path / "movies.json"
        path.write_text(json.dumps([{"key": 1, "title": "Alien"}]), encoding="utf-8")
        with pytest.raises(CatalogError):
            load_catalog(path)

    def test_duplicate_keys(self, tmp_path):
        path = tmp_path / "movies.json"
        movies = [{"key": 1, "title": "A", "description": "a"}, {"key": 1, "title": "B", "description": "b"}]
        path.write_text(json.dumps(movies), encoding="utf-8")
        with pytest.raises(CatalogError, match="Duplicate movie key: 1"):
            load_catalog(path)

    def test_blank_title(self):
        with pytest.raises(CatalogError, match="empty title"):
            parse_entries([{"key": 1, "title": "   ", "description": "a"}])

    def test_empty_description(self):
        with pytest.raises(CatalogError):
            parse_entries([{"key": 1, "title": "A", "description": ""}])


class TestCatalogIngestor:
    @pytest.mark.asyncio
    async def test_ingest_built_in_catalog(self, embedder):
        collection = InMemoryCollection("movies")
        stored = await CatalogIngestor(collection, embedder).ingest(load_catalog())

        assert stored == 3
        assert [r.key for r in collection.get_all()] == [1, 2, 3]
        assert collection.get(2).vector.tolist() == [0.0, 1.0, 0.0]
        assert collection.dimensions == 3

    @pytest.mark.asyncio
    async def test_descriptions_are_cleaned(self, embedder):
        collection = InMemoryCollection("movies")
        entries = parse_entries([{"key": 1, "title": " Inception ", "description": "A   thief\u200b who enters a dream."}])
        await CatalogIngestor(collection, embedder).ingest(entries)

        record = collection.get(1)
        assert record.title == "Inception"
        assert record.description == "A thief who enters a dream."
        assert embedder.document_calls == [["A thief who enters a dream."]]

    @pytest.mark.asyncio
    async def test_batches(self, embedder):
        collection = InMemoryCollection("movies")
        await CatalogIngestor(collection, embedder, batch_size=2).ingest(load_catalog())
        assert [len(batch) for batch in embedder.document_calls] == [2, 1]
        assert collection.count() == 3

    @pytest.mark.asyncio
    async def test_empty_catalog(self, embedder):
        collection = InMemoryCollection("movies")
        assert await CatalogIngestor(collection, embedder).ingest([]) == 0
        assert embedder.document_calls == []

    @pytest.mark.asyncio
    async def test_embedding_failure(self):
        collection = InMemoryCollection("movies")
        with pytest.raises(ModelCallError) as exc_info:
            await CatalogIngestor(collection, FailingEmbeddings()).ingest(load_catalog())
        assert exc_info.value.stage == "embedding"
        assert isinstance(exc_info.value.__cause__, ConnectionError)
        assert collection.count() == 0

    @pytest.mark.asyncio
    async def test_vector_count_mismatch(self):
        collection = InMemoryCollection("movies")
        with pytest.raises(ModelCallError, match="expected 3 vectors, got 2"):
            await CatalogIngestor(collection, ShortEmbeddings()).ingest(load_catalog())
        assert collection.count() == 0

    @pytest.mark.asyncio
    async def test_declared_dimensions_mismatch(self, embedder):
        collection = InMemoryCollection("movies", dimensions=384)
        with pytest.raises(DimensionMismatchError):
            await CatalogIngestor(collection, embedder).ingest(load_catalog())
        assert collection.count() == 0

    @pytest.mark.asyncio
    async def test_langchain_fake_embeddings(self):
        collection = InMemoryCollection("movies")
        await CatalogIngestor(collection, DeterministicFakeEmbedding(size=8)).ingest(load_catalog())
        assert collection.dimensions == 8
        assert collection.count() == 3

    def test_invalid_batch_size(self, embedder):
        with pytest.raises(ValueError):
            CatalogIngestor(InMemoryCollection("movies"), embedder, batch_size=0)

"""
Shared test fixtures and fakes.

No test talks to a hosted model: embeddings come from ``KeywordEmbeddings``
(a keyword → vector table) and chat replies from ``CapturingChatModel``.
"""

from __future__ import annotations

from typing import Any

import pytest
from langchain_core.embeddings import Embeddings
from langchain_core.messages import AIMessage

from movierag.config.catalog import MOVIE_CATALOG
from movierag.src.database.records import MovieRecord
from movierag.src.database.vector_store import InMemoryCollection

# Each built-in movie description contains exactly one of these keywords.
MOVIE_KEYWORDS: dict[str, list[float]] = {
    "hacker": [1.0, 0.0, 0.0],
    "dream": [0.0, 1.0, 0.0],
    "wormhole": [0.0, 0.0, 1.0],
}


class KeywordEmbeddings(Embeddings):
    """Returns the vector of the first keyword found in the text, else ``default``."""

    def __init__(self, table: dict[str, list[float]] | None = None, default: list[float] | None = None) -> None:
        self.table = table if table is not None else MOVIE_KEYWORDS
        self.default = default if default is not None else [1.0, 1.0, 1.0]
        self.document_calls: list[list[str]] = []
        self.query_calls: list[str] = []

    def _lookup(self, text: str) -> list[float]:
        lowered = text.lower()
        for keyword, vector in self.table.items():
            if keyword in lowered:
                return list(vector)
        return list(self.default)

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        self.document_calls.append(list(texts))
        return [self._lookup(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        self.query_calls.append(text)
        return self._lookup(text)


class FailingEmbeddings(KeywordEmbeddings):
    """Every call fails as if the hosted endpoint were unreachable."""

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        raise ConnectionError("embedding endpoint unreachable")

    def embed_query(self, text: str) -> list[float]:
        raise ConnectionError("embedding endpoint unreachable")


class CapturingChatModel:
    """Records every conversation it receives and replies from a script."""

    def __init__(self, replies: list[Any] | None = None, error: Exception | None = None) -> None:
        self.replies = list(replies) if replies else ["Try Inception."]
        self.error = error
        self.calls: list[list[Any]] = []

    async def ainvoke(self, input: Any, *args: Any, **kwargs: Any) -> AIMessage:
        self.calls.append(list(input))
        if self.error is not None:
            raise self.error
        reply = self.replies[(len(self.calls) - 1) % len(self.replies)]
        return AIMessage(content=reply)


@pytest.fixture
def embedder() -> KeywordEmbeddings:
    return KeywordEmbeddings()


@pytest.fixture
def chat_model() -> CapturingChatModel:
    return CapturingChatModel()


@pytest.fixture
def movie_collection(embedder: KeywordEmbeddings) -> InMemoryCollection:
    """The built-in catalog, already embedded with ``KeywordEmbeddings``."""
    collection = InMemoryCollection("movies")
    vectors = embedder.embed_documents([m["description"] for m in MOVIE_CATALOG])
    for movie, vector in zip(MOVIE_CATALOG, vectors):
        collection.upsert(MovieRecord(key=movie["key"], title=movie["title"], description=movie["description"], vector=vector))
    embedder.document_calls.clear()
    return collection

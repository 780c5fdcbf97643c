"""
MovieRAG - RAG Engine
=======================
Orchestrates one Retrieval-Augmented Generation turn per user query.

Architecture
------------
``Embedder`` / ``ChatModel``
    Structural capability types for the two external collaborators.
    Any LangChain ``Embeddings`` and any LangChain chat model satisfy
    them, and so do the fakes used by the test suite.

``MovieAssistant``
    Sequential pipeline orchestrator.  Flow:
        1. Normalise query → reject blank input
        2. Embed query     → ``aembed_query`` (suspension point)
        3. Retrieve        → cosine top-k over the movie collection
        4. Build prompt    → system + history + question + one message per movie
        5. Call the LLM    → ``ainvoke`` (suspension point)
        6. Remember turn   → append question/answer to the history window
        7. Return answer

Every failure of an external call is logged and re-raised as
``ModelCallError``; the history is only updated after a successful turn.

Usage:
    from movierag.src.core.rag_engine import MovieAssistant
    assistant = MovieAssistant(collection, embedder, chat_model)
    answer = await assistant.respond("I want a movie about dreams")
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Protocol, Sequence, runtime_checkable

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from movierag.config.prompt_templates import MOVIE_CONTEXT_TEMPLATE, SYSTEM_PROMPT
from movierag.config.settings import settings
from movierag.src.core.exceptions import ModelCallError
from movierag.src.database.records import SearchResult
from movierag.src.database.vector_store import InMemoryCollection
from movierag.src.utils.logger import get_logger
from movierag.src.utils.text_utils import single_line

logger = get_logger(__name__)


# ══════════════════════════════════════════════════════════════════════
#  CAPABILITY PROTOCOLS
# ══════════════════════════════════════════════════════════════════════


@runtime_checkable
class Embedder(Protocol):
    """Anything that can produce embedding vectors from text."""

    async def aembed_documents(self, texts: list[str]) -> list[list[float]]: ...

    async def aembed_query(self, text: str) -> list[float]: ...


@runtime_checkable
class ChatModel(Protocol):
    """Anything that turns a conversation into a reply message."""

    async def ainvoke(self, input: Any, *args: Any, **kwargs: Any) -> Any: ...


# ══════════════════════════════════════════════════════════════════════
#  TURN RESULT
# ══════════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Turn:
    """Everything produced while answering one query."""

    query: str
    results: list[SearchResult] = field(default_factory=list)
    reply: str = ""


# ══════════════════════════════════════════════════════════════════════
#  MOVIE ASSISTANT
# ══════════════════════════════════════════════════════════════════════


class MovieAssistant:
    """
    Retrieval orchestrator: embed → search → prompt → generate.

    Parameters
    ----------
    collection
        The ``InMemoryCollection`` holding the embedded movies.
    embedder
        ``Embedder``-compatible object used for the query embedding.
    chat_model
        ``ChatModel``-compatible object that writes the answer.
    top
        Movies retrieved per query.  Defaults to ``settings.SEARCH_TOP``.
    history_limit
        Prior messages replayed to the model.  Defaults to
        ``settings.HISTORY_LIMIT``; ``0`` makes every turn independent.
    """

    __slots__ = ("_collection", "_embedder", "_llm", "_top", "_history_limit", "_history")

    def __init__(self, collection: InMemoryCollection, embedder: Embedder, chat_model: ChatModel, top: int | None = None, history_limit: int | None = None) -> None:
        self._collection = collection
        self._embedder = embedder
        self._llm = chat_model
        self._top = settings.SEARCH_TOP if top is None else top
        self._history_limit = settings.HISTORY_LIMIT if history_limit is None else history_limit
        self._history: list[BaseMessage] = []

        if self._top < 0:
            raise ValueError(f"top must be ≥ 0, got {self._top}")
        if self._history_limit < 0:
            raise ValueError(f"history_limit must be ≥ 0, got {self._history_limit}")


    @property
    def top(self) -> int:
        return self._top


    @property
    def history(self) -> tuple[BaseMessage, ...]:
        """Prior user/assistant messages, oldest first."""
        return tuple(self._history)


    def reset(self) -> None:
        """Forget the conversation history."""
        self._history.clear()
        logger.info("[RAG] Conversation history cleared.")


    async def respond(self, query: str) -> str:
        """Answer *query* and return only the reply text."""
        turn = await self.answer(query)
        return turn.reply


    async def answer(self, query: str) -> Turn:
        """
        Run the full pipeline for one user query.

        Raises
        ------
        ValueError
            If *query* is blank.
        ModelCallError
            If the embedding or chat call fails.
        DimensionMismatchError
            If the query embedding does not fit the collection.
        """
        t_start = time.perf_counter()
        question = single_line(query)
        if not question:
            raise ValueError("Query must not be empty.")

        # ── 1–3. Embed + retrieve ─────────────────────────────────────
        results = await self.retrieve(question)

        # ── 4. Build conversation ─────────────────────────────────────
        conversation = self.build_conversation(question, results)

        # ── 5. Call the LLM ───────────────────────────────────────────
        t_llm = time.perf_counter()
        try:
            response = await self._llm.ainvoke(conversation)
        except Exception as exc:
            logger.exception("[RAG] LLM call failed.")
            raise ModelCallError("chat", str(exc)) from exc
        reply = _message_text(response).strip()
        llm_ms = (time.perf_counter() - t_llm) * 1000
        logger.info("[RAG] LLM response: %.1fms (%d chars)", llm_ms, len(reply))

        # ── 6. Remember the turn ──────────────────────────────────────
        self._remember(HumanMessage(content=question), AIMessage(content=reply))

        total_ms = (time.perf_counter() - t_start) * 1000
        logger.info("[RAG] Turn total: %.1fms (llm=%.1f)", total_ms, llm_ms)
        return Turn(query=question, results=results, reply=reply)


    async def retrieve(self, query: str) -> list[SearchResult]:
        """Embed *query* and return the top matching movies."""
        t_embed = time.perf_counter()
        try:
            query_vector = await self._embedder.aembed_query(query)
        except Exception as exc:
            logger.exception("[RAG] Query embedding failed.")
            raise ModelCallError("embedding", str(exc)) from exc
        embed_ms = (time.perf_counter() - t_embed) * 1000

        t_search = time.perf_counter()
        results = self._collection.search(query_vector, top=self._top)
        search_ms = (time.perf_counter() - t_search) * 1000
        logger.info("[RAG] Retrieved %d movie(s): embed=%.1fms, search=%.1fms", len(results), embed_ms, search_ms)
        for result in results:
            logger.debug("[RAG]   key=%d '%s' score=%.4f", result.record.key, result.record.title, result.score)
        return results


    def build_conversation(self, query: str, results: Sequence[SearchResult]) -> list[BaseMessage]:
        """
        Assemble the message list sent to the chat model.

        Layout: system prompt, windowed history, the question, then one
        user message per retrieved movie (best match first).
        """
        conversation: list[BaseMessage] = [SystemMessage(content=SYSTEM_PROMPT)]
        if self._history_limit:
            conversation.extend(self._history[-self._history_limit :])
        conversation.append(HumanMessage(content=query))
        for result in results:
            conversation.append(HumanMessage(content=MOVIE_CONTEXT_TEMPLATE.format(title=result.record.title, description=result.record.description)))
        return conversation


    def _remember(self, *messages: BaseMessage) -> None:
        self._history.extend(messages)
        if self._history_limit:
            del self._history[: -self._history_limit]
        else:
            self._history.clear()


    def __repr__(self) -> str:
        return f"MovieAssistant(collection={self._collection!r}, top={self._top}, history={len(self._history)})"


def _message_text(message: object) -> str:
    """Extract plain text from a chat reply (string or content-part list)."""
    content = getattr(message, "content", message)
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts: list[str] = []
        for part in content:
            if isinstance(part, str):
                parts.append(part)
            elif isinstance(part, dict) and part.get("type", "text") == "text":
                parts.append(str(part.get("text", "")))
        return "".join(parts)
    return str(content)

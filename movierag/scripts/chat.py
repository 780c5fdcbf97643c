"""
MovieRAG - Console Chat
=========================
CLI entry point that orchestrates:
    1. Load settings (fail-fast on configuration errors).
    2. Resolve the Google API key (environment / ``.env`` / prompt).
    3. Initialise the Gemini embedder and chat model.
    4. Embed the movie catalog into an in-memory collection.
    5. Run the ``User>`` / ``Bot>`` loop until an empty line or EOF.

Flags:
    --show-results  Print the retrieved movies and scores before each answer.
    --top N         Movies retrieved per question (default: ``SEARCH_TOP``).
    --catalog PATH  JSON catalog to embed instead of the built-in one.

Usage:
    python -m movierag.scripts.chat
    python -m movierag.scripts.chat --show-results --top 3
    movierag-chat --catalog my_movies.json
"""

from __future__ import annotations

import argparse
import asyncio
import getpass
import sys
import time
from pathlib import Path
from typing import Callable, Sequence

from movierag.config.prompt_templates import API_KEY_PROMPT, BOT_PREFIX, MODEL_FAILURE_RESPONSE, RESULT_BLOCK_TEMPLATE, RESULTS_HEADER, RESULTS_RULE, SESSION_BANNER, USER_PROMPT
from movierag.src.core.exceptions import CatalogError, DimensionMismatchError, ModelCallError
from movierag.src.database.records import SearchResult
from movierag.src.utils.text_utils import single_line

ReadLine = Callable[[str], str]
Write = Callable[[str], None]


# ── CLI Argument Parsing ───────────────────────────────────────────────

def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="movierag-chat", description="MovieRAG — chat with a movie assistant grounded on an in-memory vector index.")
    parser.add_argument("--show-results", action="store_true", default=None, help="Print the retrieved movies and their similarity scores before each answer.")
    parser.add_argument("--top", type=int, default=None, metavar="N", help="Number of movies retrieved per question.")
    parser.add_argument("--catalog", type=Path, default=None, metavar="PATH", help="JSON catalog of {key, title, description} objects.")
    args = parser.parse_args(argv)
    if args.top is not None and args.top < 0:
        parser.error(f"--top must be ≥ 0, got {args.top}")
    return args


# ── Credential ─────────────────────────────────────────────────────────

def resolve_api_key(configured: str | None, read_secret: ReadLine = getpass.getpass) -> str:
    """
    Return the configured API key, or prompt until a non-blank one is entered.

    ``EOFError`` from *read_secret* propagates (no terminal to ask).
    """
    api_key = (configured or "").strip()
    while not api_key:
        api_key = (read_secret(API_KEY_PROMPT) or "").strip()
    return api_key


def _mask(secret: str) -> str:
    return f"****{secret[-4:]}" if len(secret) > 4 else "****"


# ── Chat Loop ──────────────────────────────────────────────────────────

def format_results(results: Sequence[SearchResult]) -> str:
    """Render retrieved movies as the verbose results block."""
    lines = [RESULTS_RULE, RESULTS_HEADER, ""]
    for result in results:
        lines.append(RESULT_BLOCK_TEMPLATE.format(title=result.record.title, description=result.record.description, score=result.score))
    lines.append(RESULTS_RULE)
    return "\n".join(lines)


async def run_chat(assistant: object, read_line: ReadLine = input, write: Write = print, show_results: bool = False) -> int:
    """
    Drive the console conversation.

    Reads ``User>`` lines until EOF or a line that is empty once cleaned
    (whitespace, zero-width and control characters only), and prints one
    ``Bot>`` reply per question.  A failed model call is reported and the
    loop carries on with the next question.

    Returns
    -------
    int
        Number of questions answered.
    """
    from movierag.src.utils.logger import get_logger

    logger = get_logger(__name__)
    answered = 0

    write(SESSION_BANNER)
    while True:
        try:
            query = read_line(USER_PROMPT)
        except EOFError:
            break
        query = single_line(query or "")
        if not query:
            break
        write("")

        try:
            turn = await assistant.answer(query)  # type: ignore[attr-defined]
        except ModelCallError as exc:
            logger.error("[CHAT] %s", exc)
            write(BOT_PREFIX + MODEL_FAILURE_RESPONSE.format(stage=exc.stage))
            write("")
            continue

        if show_results:
            write(format_results(turn.results))
            write("")

        write(BOT_PREFIX + turn.reply)
        write("")
        answered += 1

    logger.info("[CHAT] Session ended after %d answered question(s).", answered)
    return answered


# ── Main Orchestration ─────────────────────────────────────────────────

def main(argv: Sequence[str] | None = None) -> None:
    args = _parse_args(argv)

    # ── 0. Load settings + .env ────────────────────────────────────────
    try:
        from movierag.config.settings import settings
    except Exception as exc:
        print("\n[FATAL] Configuration error — check your environment / .env file:\n")
        print(f"  {exc}")
        print()
        sys.exit(1)

    # Settings are loaded, so the logger can be imported safely
    from movierag.src.utils.logger import get_logger
    logger = get_logger(__name__)

    show_results = settings.SHOW_SEARCH_RESULTS if args.show_results is None else args.show_results
    top = settings.SEARCH_TOP if args.top is None else args.top
    catalog_path = args.catalog or settings.CATALOG_PATH

    # ── 1. Credential ──────────────────────────────────────────────────
    configured = settings.GOOGLE_API_KEY.get_secret_value() if settings.GOOGLE_API_KEY else None
    try:
        api_key = resolve_api_key(configured)
    except (EOFError, KeyboardInterrupt):
        print("\n[FATAL] No Google API key provided.")
        sys.exit(1)

    _print_header(settings, api_key, top, catalog_path)

    try:
        asyncio.run(_chat_session(settings, api_key, top, show_results, catalog_path))
    except (CatalogError, DimensionMismatchError) as exc:
        logger.error("Fatal configuration problem: %s", exc)
        print(f"\n[FATAL] {exc}")
        sys.exit(1)
    except ModelCallError as exc:
        # Only ingestion failures reach here; the chat loop handles its own.
        logger.error("Catalog embedding failed: %s", exc)
        print(f"\n[FATAL] {exc}")
        sys.exit(1)
    except KeyboardInterrupt:
        print()


async def _chat_session(settings: object, api_key: str, top: int, show_results: bool, catalog_path: Path | None) -> int:
    from movierag.src.core.ingestor import CatalogIngestor, load_catalog
    from movierag.src.core.rag_engine import MovieAssistant
    from movierag.src.database.vector_store import InMemoryVectorStore
    from movierag.src.utils.logger import get_logger

    logger = get_logger(__name__)

    # ── 2. Models (timed) ──────────────────────────────────────────────
    t_models = time.perf_counter()
    embedder, chat_model = _build_models(settings, api_key)
    logger.info("Models initialised in %.1fms", (time.perf_counter() - t_models) * 1000)

    # ── 3. Catalog → collection (timed) ────────────────────────────────
    t_ingest = time.perf_counter()
    store = InMemoryVectorStore()
    movies = store.get_collection(settings.COLLECTION_NAME, dimensions=settings.EMBEDDING_DIMENSIONS)  # type: ignore[attr-defined]
    await CatalogIngestor(movies, embedder).ingest(load_catalog(catalog_path))
    logger.info("Catalog ready: %r in %.1fms", movies, (time.perf_counter() - t_ingest) * 1000)

    # ── 4. Chat ────────────────────────────────────────────────────────
    assistant = MovieAssistant(movies, embedder, chat_model, top=top)
    return await run_chat(assistant, show_results=show_results)


def _build_models(settings: object, api_key: str) -> tuple[object, object]:
    """Create the Gemini embedder and chat model via LangChain."""
    from langchain_google_genai import ChatGoogleGenerativeAI, GoogleGenerativeAIEmbeddings

    embedder = GoogleGenerativeAIEmbeddings(model=settings.EMBEDDING_MODEL, google_api_key=api_key)  # type: ignore[attr-defined]
    chat_model = ChatGoogleGenerativeAI(model=settings.LLM_MODEL, temperature=settings.LLM_TEMPERATURE, google_api_key=api_key)  # type: ignore[attr-defined]
    return embedder, chat_model


# ── Pretty-print helpers ──────────────────────────────────────────────

def _print_header(settings: object, api_key: str, top: int, catalog_path: Path | None) -> None:
    print()
    print("=" * 60)
    print("  MOVIERAG — Movie Search Assistant")
    print("=" * 60)
    print(f"  Environment  : {settings.ENV}")                 # type: ignore[attr-defined]
    print(f"  Embedding    : {settings.EMBEDDING_MODEL}")     # type: ignore[attr-defined]
    print(f"  Chat model   : {settings.LLM_MODEL}")           # type: ignore[attr-defined]
    print(f"  Catalog      : {catalog_path or 'built-in'}")
    print(f"  Top-k        : {top}")
    print(f"  API Key      : {_mask(api_key)}")
    print("=" * 60)
    print()


# ── Entry point ────────────────────────────────────────────────────────

if __name__ == "__main__":
    main()

"""
MovieRAG - Centralized Configuration
======================================
Uses ``pydantic-settings`` (``BaseSettings``) to load *all* configuration
from environment variables and the package-level ``.env`` file.

Security
--------
- ``GOOGLE_API_KEY`` is typed as ``SecretStr``.  The raw value is never
  exposed in repr, logs, or tracebacks.
- The key is **optional** at load time: the console entry point asks for
  it interactively when neither the environment nor ``.env`` provides one.

Retrieval
---------
``SEARCH_TOP`` is the number of movies injected into every prompt and
``EMBEDDING_DIMENSIONS`` optionally pins the vector width of the
collection (otherwise the first stored vector decides).  The width is
validated, never requested from the model.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings.

    Every field is loaded from environment variables (or ``.env``).

    Attributes
    ----------
    ENV : Literal["dev", "prod"]
        Environment mode controlling logging verbosity.
    GOOGLE_API_KEY : SecretStr | None
        API key for Google AI Studio (Gemini).  Access the raw value with
        ``settings.GOOGLE_API_KEY.get_secret_value()``.
    EMBEDDING_MODEL : str
        Model identifier passed to ``GoogleGenerativeAIEmbeddings``.
    EMBEDDING_DIMENSIONS : int | None
        Declared embedding width, checked against every stored vector.  It
        is *not* sent to the embedding model, so it must equal the
        model's native width (3072 for ``gemini-embedding-001``); any other
        value fails ingestion with ``DimensionMismatchError``.  ``None``
        lets the first upsert decide.
    LLM_MODEL : str
        Model identifier for the response-generation LLM.
    LLM_TEMPERATURE : float
        Sampling temperature for the chat model.
    COLLECTION_NAME : str
        Name of the in-memory movie collection.
    SEARCH_TOP : int
        How many movies are retrieved per user query.
    SHOW_SEARCH_RESULTS : bool
        Print the retrieved movies and their scores before every answer.
    HISTORY_LIMIT : int
        Maximum number of prior chat messages replayed to the model.
    CATALOG_PATH : Path | None
        Optional JSON catalog that replaces the built-in movie list.
    """

    # ── Environment Mode ───────────────────────────────────────────────
    ENV: Literal["dev", "prod"] = "prod"

    # ── API Key (prompted for when missing) ────────────────────────────
    GOOGLE_API_KEY: SecretStr | None = None

    # ── Model Configuration ────────────────────────────────────────────
    EMBEDDING_MODEL: str = "gemini-embedding-001"
    EMBEDDING_DIMENSIONS: int | None = None
    LLM_MODEL: str = "gemini-2.0-flash"
    LLM_TEMPERATURE: float = 0.3

    # ── Retrieval ──────────────────────────────────────────────────────
    COLLECTION_NAME: str = "movies"
    SEARCH_TOP: int = 2
    SHOW_SEARCH_RESULTS: bool = False

    # ── Conversation ───────────────────────────────────────────────────
    HISTORY_LIMIT: int = 6

    # ── Catalog ────────────────────────────────────────────────────────
    CATALOG_PATH: Path | None = None

    # ── Validators ─────────────────────────────────────────────────────

    @field_validator("SEARCH_TOP", "HISTORY_LIMIT")
    @classmethod
    def _non_negative(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"must be ≥ 0, got {v}")
        return v


    @field_validator("EMBEDDING_DIMENSIONS")
    @classmethod
    def _dimensions_positive(cls, v: int | None) -> int | None:
        if v is not None and v <= 0:
            raise ValueError(f"EMBEDDING_DIMENSIONS must be > 0, got {v}")
        return v


    @field_validator("LLM_TEMPERATURE")
    @classmethod
    def _temperature_range(cls, v: float) -> float:
        if not 0.0 <= v <= 2.0:
            raise ValueError(f"LLM_TEMPERATURE must be 0.0–2.0, got {v}")
        return v

    # ── Pydantic Settings Configuration ────────────────────────────────
    model_config = SettingsConfigDict(env_file=Path(__file__).resolve().parent.parent / ".env", env_file_encoding="utf-8", extra="ignore")


# ── Singleton Instance ─────────────────────────────────────────────────
# Import this throughout the project:
#     from movierag.config.settings import settings
settings = Settings()

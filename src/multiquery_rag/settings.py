from __future__ import annotations

import os
from dataclasses import dataclass, field

from dotenv import find_dotenv, load_dotenv

from .errors import ConfigurationError


@dataclass(slots=True)
class OpenAISettings:
    """Runtime model configuration for embedding and generation calls."""

    embedding_model: str = "text-embedding-3-small"
    embedding_dimensions: int = 768
    chat_model: str = "gpt-4.1-mini"
    router_model: str = "gpt-4.1"


@dataclass(slots=True)
class VectorStoreSettings:
    """Where the Chroma collection lives and what it is called."""

    collection_name: str = "learning_rag"
    persist_dir: str = "artifacts/chroma"
    host: str | None = None
    port: int = 8000


@dataclass(slots=True)
class RetrievalSettings:
    """Chunking, indexing, and search parameters."""

    top_k: int = 4
    chunk_size: int = 1000
    chunk_overlap: int = 200
    batch_size: int = 20


@dataclass(slots=True)
class Paths:
    """Input files used by the command-line tools."""

    pdf_path: str = "data/document.pdf"
    model_catalog_path: str | None = None


@dataclass(slots=True)
class AppSettings:
    """Bundle of every settings group, built once per run."""

    openai: OpenAISettings = field(default_factory=OpenAISettings)
    vector_store: VectorStoreSettings = field(default_factory=VectorStoreSettings)
    retrieval: RetrievalSettings = field(default_factory=RetrievalSettings)
    paths: Paths = field(default_factory=Paths)


def _int_env(name: str, default: int, minimum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from exc
    if minimum is not None and value < minimum:
        raise ConfigurationError(f"{name} must be at least {minimum}, got {value}")
    return value


def load_settings() -> AppSettings:
    """Load environment-backed settings and return typed config objects.

    Values are read from the process environment after merging a local
    `.env` file, if present.

    Returns:
        AppSettings with OpenAI, vector store, retrieval, and path settings.

    Raises:
        ConfigurationError: If a numeric variable cannot be parsed or is
            below its minimum (RAG_TOP_K must be at least 1).
    """
    load_dotenv(find_dotenv(usecwd=True))
    return AppSettings(
        openai=OpenAISettings(
            embedding_model=os.getenv("OPENAI_EMBEDDING_MODEL", "text-embedding-3-small"),
            embedding_dimensions=_int_env("OPENAI_EMBEDDING_DIMENSIONS", 768, minimum=1),
            chat_model=os.getenv("OPENAI_CHAT_MODEL", "gpt-4.1-mini"),
            router_model=os.getenv("OPENAI_ROUTER_MODEL", "gpt-4.1"),
        ),
        vector_store=VectorStoreSettings(
            collection_name=os.getenv("COLLECTION_NAME", "learning_rag"),
            persist_dir=os.getenv("CHROMA_PERSIST_DIR", "artifacts/chroma"),
            host=os.getenv("CHROMA_HOST") or None,
            port=_int_env("CHROMA_PORT", 8000),
        ),
        retrieval=RetrievalSettings(top_k=_int_env("RAG_TOP_K", 4, minimum=1)),
        paths=Paths(
            pdf_path=os.getenv("PDF_PATH", "data/document.pdf"),
            model_catalog_path=os.getenv("MODEL_CATALOG_PATH") or None,
        ),
    )


def require_api_key() -> str:
    """Return the OpenAI API key or fail fast when it is missing."""
    load_dotenv(find_dotenv(usecwd=True))
    api_key = os.getenv("OPENAI_API_KEY", "").strip()
    if not api_key:
        raise ConfigurationError(
            "OPENAI_API_KEY is not set. Add it to your environment or a .env file:\n"
            "  OPENAI_API_KEY=your_api_key_here"
        )
    return api_key

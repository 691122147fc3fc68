"""Shared pytest fixtures for multiquery_rag unit tests."""
from __future__ import annotations

import hashlib
import re
import uuid
from unittest.mock import MagicMock

import chromadb
import numpy as np
import pytest

from multiquery_rag.schema import Chunk, Document, RetrievalHit
from multiquery_rag.vector_store import ChromaVectorIndex

DIM = 64


class KeywordEmbedder:
    """Offline embedder: hashed bag-of-words vectors, so shared words mean high similarity."""

    def __init__(self, dimensions: int = DIM):
        self.dimensions = dimensions
        self.calls: list[list[str]] = []

    def _vector(self, text: str) -> np.ndarray:
        vector = np.zeros(self.dimensions, dtype=np.float32)
        for token in re.findall(r"[a-z0-9]+", text.lower()):
            bucket = int(hashlib.md5(token.encode("utf-8")).hexdigest(), 16) % self.dimensions
            vector[bucket] += 1.0
        if not vector.any():
            vector[0] = 1.0
        return vector

    def embed_documents(self, texts: list[str]) -> np.ndarray:
        self.calls.append(list(texts))
        return np.array([self._vector(text) for text in texts], dtype=np.float32)

    def embed_query(self, text: str) -> list[float]:
        return self._vector(text).tolist()


def _make_generator(output: str = "", error: Exception | None = None) -> MagicMock:
    generator = MagicMock()
    if error is not None:
        generator.generate.side_effect = error
    else:
        generator.generate.return_value = output
    return generator


@pytest.fixture()
def make_generator():
    """Factory for generative-text fakes returning `output` or raising `error`."""
    return _make_generator


@pytest.fixture()
def embedder() -> KeywordEmbedder:
    return KeywordEmbedder()


@pytest.fixture()
def chroma_index(tmp_path) -> ChromaVectorIndex:
    client = chromadb.PersistentClient(path=str(tmp_path / "chroma"))
    return ChromaVectorIndex(client=client, collection_name=f"test_{uuid.uuid4().hex[:8]}")


@pytest.fixture()
def sample_document() -> Document:
    return Document(
        doc_id="node-p0001",
        source="node.pdf",
        page=1,
        text="The event loop lets Node.js perform non-blocking I/O operations.",
    )


@pytest.fixture()
def sample_chunks() -> list[Chunk]:
    return [
        Chunk(
            chunk_id="node-p0001-C000",
            doc_id="node-p0001",
            source="node.pdf",
            page=1,
            start_index=0,
            text="The event loop lets Node.js perform non-blocking I/O operations.",
        ),
        Chunk(
            chunk_id="node-p0002-C000",
            doc_id="node-p0002",
            source="node.pdf",
            page=2,
            start_index=0,
            text="Streams process data piece by piece instead of loading it all into memory.",
        ),
        Chunk(
            chunk_id="node-p0003-C000",
            doc_id="node-p0003",
            source="node.pdf",
            page=3,
            start_index=0,
            text="Modules are loaded with require or import and cached after the first load.",
        ),
    ]


@pytest.fixture()
def sample_hits() -> list[RetrievalHit]:
    return [
        RetrievalHit(
            text="Streams process data piece by piece.",
            score=0.85,
            metadata={"page": 2},
            query="How do streams work?",
        ),
        RetrievalHit(
            text="The event loop handles callbacks.",
            score=0.72,
            metadata={"page": 1},
            query="What is the event loop?",
        ),
        RetrievalHit(
            text="Modules are cached after the first load.",
            score=0.60,
            metadata={"page": 3},
            query=None,
        ),
    ]

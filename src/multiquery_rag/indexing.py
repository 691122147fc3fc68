"""Startup indexing: embed source chunks and upsert them into the vector index.

Batches run one after another so at most `batch_size` texts are in flight to
the embedding service at any time.
"""
from __future__ import annotations

import logging
import math
from typing import Callable

from .errors import IndexingError
from .schema import Chunk

logger = logging.getLogger(__name__)


def index_chunks(chunks: list[Chunk], embedder, index, batch_size: int = 20) -> int:
    """Embed and upsert chunks in sequential batches.

    Args:
        chunks: Chunk records to index.
        embedder: Handle exposing `embed_documents(texts) -> matrix`.
        index: Vector index exposing `ensure()` and `upsert(chunks, embeddings)`.
        batch_size: Number of chunks embedded per request.

    Returns:
        Number of chunks stored.

    Raises:
        IndexingError: If any embedding or upsert call fails.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be at least 1")

    try:
        index.ensure()
        total_batches = math.ceil(len(chunks) / batch_size)
        for batch_number, start in enumerate(range(0, len(chunks), batch_size), start=1):
            batch = chunks[start : start + batch_size]
            logger.info("Processing batch %d/%d", batch_number, total_batches)
            vectors = embedder.embed_documents([chunk.text for chunk in batch])
            index.upsert(batch, [list(map(float, vector)) for vector in vectors])
    except IndexingError:
        raise
    except Exception as exc:
        raise IndexingError(f"Error adding documents to vector store: {exc}") from exc

    logger.info("All %d chunks added to vector store.", len(chunks))
    return len(chunks)


def _index_from_scratch(load_chunks, embedder, index, batch_size: int) -> int:
    # a failed run must not leave a partially filled collection behind
    try:
        index_chunks(load_chunks(), embedder, index, batch_size=batch_size)
    except IndexingError:
        logger.error("Indexing failed; removing partially built collection.")
        index.drop()
        raise
    return index.count()


def ensure_indexed(
    load_chunks: Callable[[], list[Chunk]],
    embedder,
    index,
    batch_size: int = 20,
) -> int:
    """Index source chunks when the collection is missing or empty.

    Args:
        load_chunks: Zero-argument callable producing the chunks; only called
            when indexing is needed.
        embedder: Embedding service handle.
        index: Vector index handle.
        batch_size: Number of chunks embedded per request.

    Returns:
        Number of points in the collection after the check.

    Raises:
        IndexingError: If indexing fails; the collection is deleted first so
            the next startup indexes again from scratch.
    """
    if not index.exists():
        logger.info("Vector store not found. Starting initial indexing...")
        return _index_from_scratch(load_chunks, embedder, index, batch_size)

    point_count = index.count()
    if point_count == 0:
        logger.info("Vector store exists but is empty. Starting indexing...")
        return _index_from_scratch(load_chunks, embedder, index, batch_size)

    logger.info("Vector store ready with %d indexed chunks.", point_count)
    return point_count

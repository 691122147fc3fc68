from __future__ import annotations

import hashlib
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Callable

from .query_expansion import DEFAULT_TOPIC, generate_query_variations
from .schema import QueryVariation, RetrievalHit

logger = logging.getLogger(__name__)

PREFIX_KEY_LENGTH = 100


def prefix_key(text: str, length: int = PREFIX_KEY_LENGTH) -> str:
    """Identity key built from the leading characters of a hit's text."""
    return text[:length]


def content_hash_key(text: str) -> str:
    """Exact identity key: SHA-256 of the full hit text."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def single_query_search(query: str, embedder, index, k: int = 4) -> list[RetrievalHit]:
    """Embed one query and return its nearest chunks tagged with that query.

    Args:
        query: Query text to embed and search.
        embedder: Handle exposing `embed_query(text) -> list[float]`.
        index: Vector index exposing `search(vector, limit)`.
        k: Number of nearest chunks to request.

    Returns:
        Ranked hits, or an empty list if embedding or search fails.
    """
    try:
        vector = embedder.embed_query(query)
        hits = index.search(vector, limit=k)
    except Exception as exc:  # noqa: BLE001
        logger.error('Error performing similarity search for query "%s": %s', query, exc)
        return []

    return [
        RetrievalHit(text=hit.text, score=hit.score, metadata=hit.metadata, query=query)
        for hit in hits
    ]


def fan_out_search(
    variations: list[QueryVariation],
    embedder,
    index,
    k: int = 4,
    max_workers: int | None = None,
) -> list[RetrievalHit]:
    """Search every query variation concurrently and concatenate the hits.

    All searches are submitted at once and joined before returning. A search
    that fails contributes no hits and does not affect the others.

    Args:
        variations: Query variations to search.
        embedder: Embedding service handle.
        index: Vector index handle.
        k: Per-variation result limit.
        max_workers: Thread pool size; defaults to one thread per variation.

    Returns:
        Flat list of hits from all variations, in variation order.
    """
    if not variations:
        return []

    workers = max_workers or len(variations)
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(single_query_search, variation.text, embedder, index, k)
            for variation in variations
        ]
        per_variation: list[list[RetrievalHit]] = []
        for variation, future in zip(variations, futures, strict=True):
            try:
                per_variation.append(future.result())
            except Exception as exc:  # noqa: BLE001
                logger.error('Search for variation "%s" failed: %s', variation.text, exc)
                per_variation.append([])

    return [hit for hits in per_variation for hit in hits]


def merge_hits(
    hits: list[RetrievalHit],
    k: int = 4,
    key: Callable[[str], str] = prefix_key,
) -> list[RetrievalHit]:
    """Deduplicate hits by identity key, then rank by score and truncate.

    For each key the hit with the strictly higher score wins; on a tie the
    hit seen first is kept.

    Args:
        hits: Flattened hits from all query variations.
        k: Maximum number of merged results.
        key: Function mapping hit text to its identity key.

    Returns:
        At most `k` hits with distinct keys, sorted by score descending.
    """
    best: dict[str, RetrievalHit] = {}
    for hit in hits:
        identity = key(hit.text)
        current = best.get(identity)
        if current is None or current.score < hit.score:
            best[identity] = hit

    ranked = sorted(best.values(), key=lambda hit: hit.score, reverse=True)
    return ranked[: max(k, 0)]


def parallel_query_search(
    query: str,
    generator,
    embedder,
    index,
    k: int = 4,
    topic: str = DEFAULT_TOPIC,
    key: Callable[[str], str] = prefix_key,
) -> list[RetrievalHit]:
    """Expand a query, search all variations in parallel, and merge the hits.

    Args:
        query: Original user query.
        generator: Generative-text handle used for paraphrasing.
        embedder: Embedding service handle.
        index: Vector index handle.
        k: Number of merged results to return.
        topic: Subject passed to the query expander.
        key: Identity key used for deduplication.

    Returns:
        Merged Result Set for the query.
    """
    try:
        variations = generate_query_variations(query, generator, topic=topic)
        logger.info("Generated %d query variations.", len(variations))
        for position, variation in enumerate(variations):
            logger.info("Variation %d (%s): %s", position, variation.origin, variation.text)

        hits = fan_out_search(variations, embedder, index, k=k)
        return merge_hits(hits, k=k, key=key)
    except Exception as exc:  # noqa: BLE001
        logger.error("Error in parallel query search, falling back to single query: %s", exc)
        return single_query_search(query, embedder, index, k=k)

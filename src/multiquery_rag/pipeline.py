from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import partial
from typing import Callable

from openai import OpenAI

from .chunking import split_documents
from .embeddings import OpenAIEmbedder
from .indexing import ensure_indexed
from .llm import OpenAIGenerator
from .pdf_loader import load_pdf_documents
from .qa import answer_with_context
from .query_expansion import DEFAULT_TOPIC
from .retrieval import parallel_query_search, single_query_search
from .schema import Chunk, RetrievalHit
from .settings import AppSettings
from .tracing import ATTR_INPUT_VALUE, ATTR_OUTPUT_VALUE, traced_generation, traced_retrieval
from .vector_store import ChromaVectorIndex, build_chroma_client

logger = logging.getLogger(__name__)

MODE_PARALLEL = "parallel"
MODE_SIMPLE = "simple"


@dataclass(slots=True)
class RagServices:
    """Service handles shared by indexing, search, and answering for one run."""

    embedder: OpenAIEmbedder
    generator: OpenAIGenerator
    index: ChromaVectorIndex


@dataclass(slots=True)
class QueryOutcome:
    """Answer for one user question plus the context it was built from."""

    question: str
    answer: str
    hits: list[RetrievalHit] = field(default_factory=list)


def prepare_chunks(pdf_path: str, chunk_size: int = 1000, chunk_overlap: int = 200) -> list[Chunk]:
    """Load a PDF and split its pages into chunks.

    Args:
        pdf_path: Source PDF file.
        chunk_size: Maximum characters per chunk.
        chunk_overlap: Characters shared between consecutive chunks.

    Returns:
        Chunk records ready for indexing.
    """
    documents = load_pdf_documents(pdf_path)
    chunks = split_documents(documents, chunk_size=chunk_size, chunk_overlap=chunk_overlap)
    logger.info("Split %d pages into %d chunks", len(documents), len(chunks))
    return chunks


def build_services(settings: AppSettings, client: OpenAI | None = None) -> RagServices:
    """Construct the embedding, generation, and vector index handles."""
    client = client or OpenAI()
    return RagServices(
        embedder=OpenAIEmbedder(
            client=client,
            model=settings.openai.embedding_model,
            dimensions=settings.openai.embedding_dimensions,
        ),
        generator=OpenAIGenerator(client=client, model=settings.openai.chat_model),
        index=ChromaVectorIndex(
            client=build_chroma_client(settings.vector_store),
            collection_name=settings.vector_store.collection_name,
        ),
    )


def ensure_pdf_indexed(services: RagServices, settings: AppSettings, pdf_path: str | None = None) -> int:
    """Index the configured PDF unless the collection already holds points."""
    retrieval = settings.retrieval
    source = pdf_path or settings.paths.pdf_path
    return ensure_indexed(
        partial(
            prepare_chunks,
            source,
            chunk_size=retrieval.chunk_size,
            chunk_overlap=retrieval.chunk_overlap,
        ),
        services.embedder,
        services.index,
        batch_size=retrieval.batch_size,
    )


def build_search_fn(
    services: RagServices,
    mode: str = MODE_PARALLEL,
    k: int = 4,
    topic: str = DEFAULT_TOPIC,
) -> Callable[[str], list[RetrievalHit]]:
    """Return a `query -> hits` callable for the selected retrieval mode."""
    if mode == MODE_SIMPLE:

        def search(query: str) -> list[RetrievalHit]:
            return single_query_search(query, services.embedder, services.index, k=k)

    elif mode == MODE_PARALLEL:

        def search(query: str) -> list[RetrievalHit]:
            return parallel_query_search(
                query,
                services.generator,
                services.embedder,
                services.index,
                k=k,
                topic=topic,
            )

    else:
        raise ValueError(f"Unknown retrieval mode: {mode!r}")
    return search


def build_answer_fn(services: RagServices, topic: str = DEFAULT_TOPIC) -> Callable[[str, list[RetrievalHit]], str]:
    def answer(question: str, hits: list[RetrievalHit]) -> str:
        return answer_with_context(question, hits, services.generator, topic=topic)

    return answer


def build_query_handler(
    search_fn: Callable[[str], list[RetrievalHit]],
    answer_fn: Callable[[str, list[RetrievalHit]], str],
    tracer=None,
    model_name: str = "",
) -> Callable[[str], QueryOutcome]:
    """Compose retrieval and answering into one `question -> QueryOutcome` step.

    When a tracer is given, each question becomes a ``rag-query`` trace with
    ``retrieval`` and ``generation`` child spans.
    """
    if tracer is None:

        def handle(question: str) -> QueryOutcome:
            hits = search_fn(question)
            return QueryOutcome(question=question, answer=answer_fn(question, hits), hits=hits)

        return handle

    traced_search = traced_retrieval(search_fn, tracer)
    traced_answer = traced_generation(answer_fn, tracer, model_name=model_name)

    def handle_traced(question: str) -> QueryOutcome:
        with tracer.start_as_current_span("rag-query") as span:
            span.set_attribute(ATTR_INPUT_VALUE, question)
            hits = traced_search(question)
            answer = traced_answer(question, hits)
            span.set_attribute(ATTR_OUTPUT_VALUE, answer[:500])
            return QueryOutcome(question=question, answer=answer, hits=hits)

    return handle_traced

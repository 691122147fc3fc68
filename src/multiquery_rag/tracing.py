"""OpenTelemetry tracing for the question-answering loop.

Each user query can be recorded as one trace:

    rag-query            (parent, one per question)
    ├── retrieval        (query expansion + fan-out search + merge)
    └── generation       (answer synthesis)

Spans use the OpenInference attribute names understood by Arize Phoenix and
other OTLP backends. Tracing is opt-in; when it is never configured the no-op
global provider is used and spans are discarded.

    from multiquery_rag.tracing import configure_tracing, get_tracer, traced_retrieval

    configure_tracing(endpoint="http://localhost:6006/v1/traces")
    search = traced_retrieval(search, get_tracer("multiquery-rag"))
"""
from __future__ import annotations

from typing import Callable

from opentelemetry import trace
from opentelemetry.sdk.resources import Resource, SERVICE_NAME
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    ConsoleSpanExporter,
    SimpleSpanProcessor,
    SpanExporter,
)

from .schema import RetrievalHit

ATTR_INPUT_VALUE = "input.value"
ATTR_OUTPUT_VALUE = "output.value"
ATTR_LLM_MODEL_NAME = "llm.model_name"
ATTR_RETRIEVAL_DOCUMENTS = "retrieval.documents"
ATTR_RETRIEVAL_TOP_SCORE = "retrieval.top_score"
ATTR_RETRIEVAL_QUERIES = "retrieval.queries"

_provider: TracerProvider | None = None


def configure_tracing(
    endpoint: str | None = None,
    service_name: str = "multiquery-rag",
    exporter: SpanExporter | None = None,
) -> TracerProvider:
    """Create and register a global TracerProvider.

    Args:
        endpoint: OTLP HTTP endpoint URL (e.g. ``http://localhost:6006/v1/traces``).
            When *None* and no *exporter* is given, spans are printed to stdout.
        service_name: Service label shown by the observability backend.
        exporter: Pre-built exporter, e.g. ``InMemorySpanExporter`` in tests.
            Takes precedence over *endpoint*.

    Returns:
        The configured provider, also installed as the global OTel provider.
    """
    global _provider

    resource = Resource(attributes={SERVICE_NAME: service_name})
    provider = TracerProvider(resource=resource)

    if exporter is not None:
        chosen_exporter: SpanExporter = exporter
    elif endpoint is not None:
        try:
            from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
                OTLPSpanExporter,
            )
        except ImportError as exc:  # pragma: no cover
            raise ImportError(
                "opentelemetry-exporter-otlp-proto-http is required to export "
                "traces to an OTLP endpoint.  Install it with:\n"
                "  pip install opentelemetry-exporter-otlp-proto-http"
            ) from exc
        chosen_exporter = OTLPSpanExporter(endpoint=endpoint)
    else:
        chosen_exporter = ConsoleSpanExporter()

    # Synchronous export: spans are visible as soon as each query finishes.
    provider.add_span_processor(SimpleSpanProcessor(chosen_exporter))
    trace.set_tracer_provider(provider)
    _provider = provider
    return provider


def get_tracer(name: str) -> trace.Tracer:
    """Return a tracer from the configured provider, or the global no-op one."""
    if _provider is not None:
        return _provider.get_tracer(name)
    return trace.get_tracer(name)


def traced_retrieval(
    search_fn: Callable[[str], list[RetrievalHit]],
    tracer: trace.Tracer,
) -> Callable[[str], list[RetrievalHit]]:
    """Wrap a search callable so every call is recorded as a ``retrieval`` span.

    Recorded attributes: the query, the number of merged hits, the best score,
    and the distinct variations that produced the hits.
    """

    def _wrapped(query: str) -> list[RetrievalHit]:
        with tracer.start_as_current_span("retrieval") as span:
            span.set_attribute(ATTR_INPUT_VALUE, query)
            try:
                hits = search_fn(query)
            except Exception as exc:
                span.set_status(trace.StatusCode.ERROR, str(exc))
                span.record_exception(exc)
                raise
            span.set_attribute(ATTR_RETRIEVAL_DOCUMENTS, len(hits))
            if hits:
                span.set_attribute(ATTR_RETRIEVAL_TOP_SCORE, max(hit.score for hit in hits))
                queries = sorted({hit.query for hit in hits if hit.query})
                if queries:
                    span.set_attribute(ATTR_RETRIEVAL_QUERIES, queries)
            span.set_status(trace.StatusCode.OK)
            return hits

    return _wrapped


def traced_generation(
    answer_fn: Callable[[str, list[RetrievalHit]], str],
    tracer: trace.Tracer,
    model_name: str = "",
) -> Callable[[str, list[RetrievalHit]], str]:
    """Wrap an answer callable so every call is recorded as a ``generation`` span."""

    def _wrapped(question: str, hits: list[RetrievalHit]) -> str:
        with tracer.start_as_current_span("generation") as span:
            span.set_attribute(ATTR_INPUT_VALUE, question)
            if model_name:
                span.set_attribute(ATTR_LLM_MODEL_NAME, model_name)
            try:
                answer = answer_fn(question, hits)
            except Exception as exc:
                span.set_status(trace.StatusCode.ERROR, str(exc))
                span.record_exception(exc)
                raise
            span.set_attribute(ATTR_OUTPUT_VALUE, answer[:500])
            span.set_status(trace.StatusCode.OK)
            return answer

    return _wrapped

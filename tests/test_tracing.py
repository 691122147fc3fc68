"""Tests for tracing.py: configure_tracing, get_tracer, traced_retrieval, traced_generation.

OTel spans are collected with InMemorySpanExporter so tests run fully offline.
"""
from __future__ import annotations

import pytest
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter
from opentelemetry.trace import StatusCode

from multiquery_rag.schema import RetrievalHit
from multiquery_rag.tracing import (
    ATTR_INPUT_VALUE,
    ATTR_LLM_MODEL_NAME,
    ATTR_OUTPUT_VALUE,
    ATTR_RETRIEVAL_DOCUMENTS,
    ATTR_RETRIEVAL_QUERIES,
    ATTR_RETRIEVAL_TOP_SCORE,
    configure_tracing,
    get_tracer,
    traced_generation,
    traced_retrieval,
)


@pytest.fixture()
def mem_exporter() -> InMemorySpanExporter:
    """Fresh InMemorySpanExporter behind a newly configured provider."""
    exporter = InMemorySpanExporter()
    configure_tracing(exporter=exporter, service_name="test-service")
    return exporter


def _span(exporter: InMemorySpanExporter, name: str):
    return next(s for s in exporter.get_finished_spans() if s.name == name)


def _fake_search(query: str) -> list[RetrievalHit]:
    return [
        RetrievalHit(text="chunk a", score=0.91, query=query),
        RetrievalHit(text="chunk b", score=0.75, query=f"{query} examples"),
        RetrievalHit(text="chunk c", score=0.40, query=None),
    ]


class TestConfigureTracing:
    def test_returns_tracer_provider(self):
        provider = configure_tracing(exporter=InMemorySpanExporter())
        assert isinstance(provider, TracerProvider)

    def test_missing_otlp_package_raises_import_error(self, monkeypatch):
        import builtins

        real_import = builtins.__import__

        def mock_import(name, *args, **kwargs):
            if "otlp" in name:
                raise ImportError("mocked missing package")
            return real_import(name, *args, **kwargs)

        monkeypatch.setattr(builtins, "__import__", mock_import)
        with pytest.raises(ImportError, match="opentelemetry-exporter-otlp"):
            configure_tracing(endpoint="http://localhost:6006/v1/traces")


class TestGetTracer:
    def test_returns_tracer(self, mem_exporter):
        assert hasattr(get_tracer("multiquery_rag.test"), "start_as_current_span")


class TestTracedRetrieval:
    def test_returns_same_hits(self, mem_exporter):
        wrapped = traced_retrieval(_fake_search, get_tracer("retrieval"))
        hits = wrapped("streams")
        assert [hit.text for hit in hits] == ["chunk a", "chunk b", "chunk c"]

    def test_span_attributes(self, mem_exporter):
        traced_retrieval(_fake_search, get_tracer("retrieval"))("streams")
        span = _span(mem_exporter, "retrieval")
        assert span.attributes[ATTR_INPUT_VALUE] == "streams"
        assert span.attributes[ATTR_RETRIEVAL_DOCUMENTS] == 3
        assert span.attributes[ATTR_RETRIEVAL_TOP_SCORE] == pytest.approx(0.91)
        assert list(span.attributes[ATTR_RETRIEVAL_QUERIES]) == ["streams", "streams examples"]

    def test_empty_results_skip_score_attributes(self, mem_exporter):
        traced_retrieval(lambda query: [], get_tracer("retrieval"))("nothing")
        span = _span(mem_exporter, "retrieval")
        assert span.attributes[ATTR_RETRIEVAL_DOCUMENTS] == 0
        assert ATTR_RETRIEVAL_TOP_SCORE not in span.attributes

    def test_span_status_error_on_exception(self, mem_exporter):
        def broken(query: str):
            raise RuntimeError("index unavailable")

        with pytest.raises(RuntimeError):
            traced_retrieval(broken, get_tracer("retrieval"))("q")
        assert _span(mem_exporter, "retrieval").status.status_code == StatusCode.ERROR


class TestTracedGeneration:
    def _fake_answer(self, question: str, hits: list[RetrievalHit]) -> str:
        return f"Answer to '{question}' from {len(hits)} contexts."

    def test_returns_same_answer(self, mem_exporter):
        wrapped = traced_generation(self._fake_answer, get_tracer("generation"))
        assert wrapped("What is a stream?", _fake_search("q")) == "Answer to 'What is a stream?' from 3 contexts."

    def test_span_records_model_and_output(self, mem_exporter):
        wrapped = traced_generation(self._fake_answer, get_tracer("generation"), model_name="gpt-4.1-mini")
        wrapped("question?", [])
        span = _span(mem_exporter, "generation")
        assert span.attributes[ATTR_LLM_MODEL_NAME] == "gpt-4.1-mini"
        assert span.attributes[ATTR_OUTPUT_VALUE].startswith("Answer to")

    def test_output_truncated_to_500_chars(self, mem_exporter):
        wrapped = traced_generation(lambda q, hits: "x" * 2000, get_tracer("generation"))
        wrapped("q", [])
        assert len(_span(mem_exporter, "generation").attributes[ATTR_OUTPUT_VALUE]) == 500

    def test_span_status_error_on_exception(self, mem_exporter):
        def broken(question, hits):
            raise ValueError("bad")

        with pytest.raises(ValueError):
            traced_generation(broken, get_tracer("generation"))("q", [])
        assert _span(mem_exporter, "generation").status.status_code == StatusCode.ERROR

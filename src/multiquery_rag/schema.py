from __future__ import annotations

from dataclasses import dataclass, field

ORIGIN_ORIGINAL = "original"
ORIGIN_GENERATED = "generated"
ORIGIN_FALLBACK = "fallback"


@dataclass(slots=True)
class Document:
    """Single page of text extracted from a source PDF."""

    doc_id: str
    source: str
    page: int
    text: str


@dataclass(slots=True, frozen=True)
class Chunk:
    """Chunked segment of a source document used for retrieval."""

    chunk_id: str
    doc_id: str
    source: str
    page: int
    start_index: int
    text: str

    def metadata(self) -> dict[str, str | int]:
        """Payload metadata stored next to the chunk vector."""
        return {
            "chunk_id": self.chunk_id,
            "doc_id": self.doc_id,
            "source": self.source,
            "page": self.page,
            "start_index": self.start_index,
        }


@dataclass(slots=True, frozen=True)
class QueryVariation:
    """User query or one of its paraphrases, tagged with where it came from."""

    text: str
    origin: str = ORIGIN_ORIGINAL


@dataclass(slots=True)
class RetrievalHit:
    """Nearest-neighbour search result tagged with the query that found it."""

    text: str
    score: float
    metadata: dict = field(default_factory=dict)
    query: str | None = None


@dataclass(slots=True, frozen=True)
class ModelRecord:
    """Static description of an AI model offered to the model router."""

    name: str
    provider: str
    best_for: str
    pricing: str
    limitations: str

"""Retrieval-augmented question answering over PDFs with multi-query retrieval."""

from .schema import Chunk, Document, ModelRecord, QueryVariation, RetrievalHit

__all__ = ["Document", "Chunk", "QueryVariation", "RetrievalHit", "ModelRecord"]

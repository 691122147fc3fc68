from __future__ import annotations

import logging
import uuid
from pathlib import Path

import chromadb

from .schema import Chunk, RetrievalHit
from .settings import VectorStoreSettings

logger = logging.getLogger(__name__)


def build_chroma_client(settings: VectorStoreSettings):
    """Create a Chroma client for a remote server or a local persistent store.

    Args:
        settings: Vector store settings; `host` selects the HTTP client.

    Returns:
        A Chroma client instance.
    """
    if settings.host:
        logger.info("Connecting to Chroma server at %s:%s", settings.host, settings.port)
        return chromadb.HttpClient(host=settings.host, port=settings.port)

    Path(settings.persist_dir).mkdir(parents=True, exist_ok=True)
    return chromadb.PersistentClient(path=settings.persist_dir)


class ChromaVectorIndex:
    """Cosine nearest-neighbour index over chunk embeddings in one collection."""

    def __init__(self, client, collection_name: str):
        self.client = client
        self.collection_name = collection_name
        self._collection = None

    def exists(self) -> bool:
        # list_collections yields names or Collection objects depending on the chromadb release
        names = {getattr(entry, "name", entry) for entry in self.client.list_collections()}
        return self.collection_name in names

    def create(self):
        """Create the collection with cosine distance and return it."""
        self._collection = self.client.create_collection(
            name=self.collection_name,
            metadata={"hnsw:space": "cosine"},
        )
        logger.info("Collection %s created.", self.collection_name)
        return self._collection

    def ensure(self):
        """Return the collection, creating it first when it does not exist."""
        if self._collection is not None:
            return self._collection
        if not self.exists():
            return self.create()
        self._collection = self.client.get_collection(name=self.collection_name)
        return self._collection

    def count(self) -> int:
        return self.ensure().count()

    def drop(self) -> None:
        """Delete the collection and every point in it, if it exists."""
        if self.exists():
            self.client.delete_collection(name=self.collection_name)
            logger.info("Collection %s deleted.", self.collection_name)
        self._collection = None

    def upsert(self, chunks: list[Chunk], embeddings: list[list[float]]) -> list[str]:
        """Store chunk vectors with their text and metadata as payload.

        Args:
            chunks: Chunk records to store.
            embeddings: Embedding vectors aligned to chunks.

        Returns:
            The generated point ids, aligned to chunks.
        """
        if len(chunks) != len(embeddings):
            raise ValueError(
                f"Got {len(chunks)} chunks but {len(embeddings)} embeddings; they must align."
            )
        if not chunks:
            return []

        ids = [str(uuid.uuid4()) for _ in chunks]
        self.ensure().upsert(
            ids=ids,
            embeddings=embeddings,
            documents=[chunk.text for chunk in chunks],
            metadatas=[chunk.metadata() for chunk in chunks],
        )
        return ids

    def search(self, vector: list[float], limit: int = 4) -> list[RetrievalHit]:
        """Return the `limit` nearest chunks ranked by cosine similarity.

        Args:
            vector: Embedded query vector.
            limit: Maximum number of hits to return.

        Returns:
            Hits with `score = 1 - cosine distance`, best first.
        """
        response = self.ensure().query(
            query_embeddings=[vector],
            n_results=limit,
            include=["documents", "metadatas", "distances"],
        )

        docs = response["documents"][0]
        metadatas = response["metadatas"][0]
        distances = response["distances"][0]

        return [
            RetrievalHit(text=text, score=float(1.0 - distance), metadata=dict(metadata or {}))
            for text, metadata, distance in zip(docs, metadatas, distances, strict=True)
        ]

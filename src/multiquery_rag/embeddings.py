from __future__ import annotations

import numpy as np
from openai import OpenAI


def embed_texts(
    texts: list[str],
    model: str = "text-embedding-3-small",
    dimensions: int = 768,
    client: OpenAI | None = None,
) -> np.ndarray:
    """Generate embedding vectors for input texts using OpenAI embeddings API.

    Args:
        texts: Input strings to embed.
        model: Embedding model name.
        dimensions: Output vector size requested from the API.
        client: Existing OpenAI client; a new one is created when omitted.

    Returns:
        A `float32` NumPy matrix shaped `(len(texts), dimensions)`.
    """
    if not texts:
        return np.zeros((0, dimensions), dtype=np.float32)
    client = client or OpenAI()
    response = client.embeddings.create(model=model, input=texts, dimensions=dimensions)
    vectors = [row.embedding for row in response.data]
    return np.array(vectors, dtype=np.float32)


class OpenAIEmbedder:
    """Embedding service handle shared by indexing and search."""

    def __init__(
        self,
        client: OpenAI | None = None,
        model: str = "text-embedding-3-small",
        dimensions: int = 768,
    ):
        self.client = client or OpenAI()
        self.model = model
        self.dimensions = dimensions

    def embed_documents(self, texts: list[str]) -> np.ndarray:
        return embed_texts(texts, model=self.model, dimensions=self.dimensions, client=self.client)

    def embed_query(self, text: str) -> list[float]:
        return self.embed_documents([text])[0].tolist()

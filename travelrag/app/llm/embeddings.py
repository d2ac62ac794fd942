"""Embedding clients: text to fixed-length vectors."""

import hashlib
import logging
import math
import re
from typing import Protocol

from openai import AsyncOpenAI

from travelrag.app.config import Settings, get_settings
from travelrag.app.errors import EmbeddingError

logger = logging.getLogger(__name__)

_TOKEN_RE = re.compile(r"\w+")


class EmbeddingClient(Protocol):
    """Protocol for embedding client implementations."""

    dimension: int

    async def embed(self, text: str) -> list[float]:
        """Embed text into a vector of length ``dimension``.

        Raises:
            EmbeddingError: On transport failure
        """
        ...


class OpenAIEmbeddingClient:
    """OpenAI embeddings (text-embedding-3 family supports reduced dimensions)."""

    def __init__(self, api_key: str, model: str, dimension: int):
        self.client = AsyncOpenAI(api_key=api_key)
        self.model = model
        self.dimension = dimension

    async def embed(self, text: str) -> list[float]:
        try:
            response = await self.client.embeddings.create(
                model=self.model, input=text, dimensions=self.dimension
            )
        except Exception as e:
            raise EmbeddingError(f"OpenAI embedding failed: {e}") from e

        vector = list(response.data[0].embedding)
        if len(vector) != self.dimension:
            raise EmbeddingError(
                f"Embedding dimension mismatch: expected {self.dimension}, got {len(vector)}"
            )
        return vector


class HashingEmbeddingClient:
    """Deterministic bag-of-words embedder for offline use and tests.

    Each lower-cased token is hashed to a bucket with a sign; the vector is
    L2-normalised so cosine similarity reflects token overlap.
    """

    def __init__(self, dimension: int = 256):
        self.dimension = dimension

    async def embed(self, text: str) -> list[float]:
        vector = [0.0] * self.dimension
        for token in _TOKEN_RE.findall(text.lower()):
            digest = hashlib.sha256(token.encode()).digest()
            bucket = int.from_bytes(digest[:4], "big") % self.dimension
            sign = 1.0 if digest[4] % 2 == 0 else -1.0
            vector[bucket] += sign

        norm = math.sqrt(sum(v * v for v in vector))
        if norm == 0:
            return vector
        return [v / norm for v in vector]


def get_embedding_client(settings: Settings | None = None) -> EmbeddingClient:
    """Factory: OpenAI embeddings if a key is configured, hashing embedder otherwise."""
    settings = settings or get_settings()
    api_key = settings.openai_api_key

    if api_key and api_key.get_secret_value():
        logger.info(f"Using OpenAI embeddings ({settings.embedding_model})")
        return OpenAIEmbeddingClient(
            api_key=api_key.get_secret_value(),
            model=settings.embedding_model,
            dimension=settings.embedding_dimensions,
        )

    logger.warning("No OpenAI API key configured, using hashing embedder")
    return HashingEmbeddingClient()

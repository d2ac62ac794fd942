"""Vector index contract and an in-memory implementation."""

import logging
import math
from typing import Any, Protocol

from pydantic import BaseModel

from travelrag.app.errors import VectorIndexError

logger = logging.getLogger(__name__)

PATTERN_COLLECTION = "pattern"
PHRASE_COLLECTION = "phrase"


class VectorMatch(BaseModel):
    """A single similarity hit."""

    id: str
    score: float
    metadata: dict[str, Any]


class VectorIndex(Protocol):
    """Protocol for vector index implementations.

    ``query`` returns hits in descending score order. ``filter`` is a map of
    metadata field to required value (exact equality).
    """

    async def upsert(
        self, collection: str, id: str, vector: list[float], metadata: dict[str, Any]
    ) -> None:
        ...

    async def query(
        self,
        collection: str,
        vector: list[float],
        top_k: int,
        filter: dict[str, Any] | None = None,
    ) -> list[VectorMatch]:
        ...


def cosine_similarity(a: list[float], b: list[float]) -> float:
    """Cosine similarity; zero vectors have similarity 0."""
    dot = sum(x * y for x, y in zip(a, b, strict=True))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


class InMemoryVectorIndex:
    """In-memory vector index with exact cosine search.

    Scores are cosine similarity clamped to [0, 1].
    """

    def __init__(self, dimension: int | None = None) -> None:
        self.dimension = dimension
        self._collections: dict[str, dict[str, tuple[list[float], dict[str, Any]]]] = {}

    def _check_dimension(self, vector: list[float]) -> None:
        if self.dimension is None:
            self.dimension = len(vector)
        elif len(vector) != self.dimension:
            raise VectorIndexError(
                f"Vector dimension mismatch: expected {self.dimension}, got {len(vector)}"
            )

    async def upsert(
        self, collection: str, id: str, vector: list[float], metadata: dict[str, Any]
    ) -> None:
        self._check_dimension(vector)
        self._collections.setdefault(collection, {})[id] = (list(vector), dict(metadata))

    async def query(
        self,
        collection: str,
        vector: list[float],
        top_k: int,
        filter: dict[str, Any] | None = None,
    ) -> list[VectorMatch]:
        self._check_dimension(vector)
        filter = filter or {}

        matches: list[VectorMatch] = []
        for record_id, (stored, metadata) in self._collections.get(collection, {}).items():
            if any(metadata.get(field) != value for field, value in filter.items()):
                continue
            score = max(0.0, min(1.0, cosine_similarity(vector, stored)))
            matches.append(VectorMatch(id=record_id, score=score, metadata=metadata))

        # Sort by score descending, then by id for determinism
        matches.sort(key=lambda m: (-m.score, m.id))
        return matches[:top_k]

    def count(self, collection: str | None = None) -> int:
        """Number of stored vectors, in one collection or overall."""
        if collection is not None:
            return len(self._collections.get(collection, {}))
        return sum(len(records) for records in self._collections.values())

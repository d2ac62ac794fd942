"""Retrieval layer - similarity queries against the pattern and phrase collections.

Failures are not swallowed here: an embedding, index or parsing error
surfaces as RetrievalError, because no recommendation can be trusted
without retrieval. ``retrieve_patterns`` wraps the same call in an
Outcome for callers that branch on status.
"""

import logging
import time
from typing import Any

from travelrag.app.config import Settings, get_settings
from travelrag.app.errors import EmbeddingError, Outcome, RetrievalError, VectorIndexError
from travelrag.app.llm.embeddings import EmbeddingClient
from travelrag.app.models.retrieval import PatternFilters, RAGResult, ResultKind
from travelrag.app.utils.metrics import rag_retrieval_hits_total
from travelrag.app.vector.corpus import parse_language_pattern, parse_success_pattern
from travelrag.app.vector.index import PATTERN_COLLECTION, PHRASE_COLLECTION, VectorIndex, VectorMatch

logger = logging.getLogger(__name__)

PHRASE_SOURCE = "language_corpus"


def build_pattern_filter(filters: PatternFilters | None) -> dict[str, Any]:
    """Translate caller filters into index equality conditions.

    Destinations are compared lower-cased; empty values are not filtered on.
    """
    conditions: dict[str, Any] = {"type": ResultKind.pattern.value}
    if filters is None:
        return conditions
    if filters.destination:
        conditions["destination"] = filters.destination.strip().lower()
    if filters.budget_tier:
        conditions["budgetTier"] = filters.budget_tier.value
    if filters.category:
        conditions["category"] = filters.category.strip().lower()
    return conditions


class PatternRetriever:
    """Scored retrieval over both corpus collections."""

    def __init__(
        self,
        index: VectorIndex,
        embedder: EmbeddingClient,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._index = index
        self._embedder = embedder
        self.top_k = settings.rag_top_k
        self.phrase_top_k = settings.phrase_top_k
        self.pattern_threshold = settings.pattern_score_threshold
        self.phrase_threshold = settings.phrase_score_threshold

    async def _search(
        self, collection: str, text: str, top_k: int, conditions: dict[str, Any]
    ) -> list[VectorMatch]:
        try:
            vector = await self._embedder.embed(text)
            return await self._index.query(collection, vector, top_k, conditions)
        except (EmbeddingError, VectorIndexError) as e:
            raise RetrievalError(f"{collection} retrieval failed: {e}") from e

    async def query_patterns(
        self, text: str, filters: PatternFilters | None = None
    ) -> list[RAGResult]:
        """Retrieve success patterns scoring at least the pattern threshold.

        Index order (descending similarity) is preserved.

        Raises:
            RetrievalError: On embedding, index or metadata errors
        """
        conditions = build_pattern_filter(filters)
        matches = await self._search(PATTERN_COLLECTION, text, self.top_k, conditions)

        results = [
            RAGResult(
                type=ResultKind.pattern,
                content=parse_success_pattern(match.metadata, fallback_id=match.id),
                confidence=match.score,
                source=match.metadata.get("source") or "unknown",
            )
            for match in matches
            if match.score >= self.pattern_threshold
        ]
        rag_retrieval_hits_total.labels(collection=PATTERN_COLLECTION).inc(len(results))
        logger.info(
            f"Pattern retrieval: {len(results)}/{len(matches)} hits above {self.pattern_threshold}",
            extra={"structured": {"filter": conditions, "hits": len(results)}},
        )
        return results

    async def query_phrases(self, text: str) -> list[RAGResult]:
        """Retrieve language patterns scoring at least the phrase threshold.

        Raises:
            RetrievalError: On embedding, index or metadata errors
        """
        conditions = {"type": ResultKind.phrase.value}
        matches = await self._search(PHRASE_COLLECTION, text, self.phrase_top_k, conditions)

        results = [
            RAGResult(
                type=ResultKind.phrase,
                content=parse_language_pattern(match.metadata, fallback_id=match.id),
                confidence=match.score,
                source=PHRASE_SOURCE,
            )
            for match in matches
            if match.score >= self.phrase_threshold
        ]
        rag_retrieval_hits_total.labels(collection=PHRASE_COLLECTION).inc(len(results))
        return results

    async def retrieve_patterns(
        self, text: str, filters: PatternFilters | None = None
    ) -> Outcome[list[RAGResult]]:
        """Pattern retrieval as a tagged outcome (success or failed)."""
        start = time.monotonic()
        try:
            results = await self.query_patterns(text, filters)
        except RetrievalError as e:
            elapsed_ms = (time.monotonic() - start) * 1000
            logger.error(f"Pattern retrieval failed after {elapsed_ms:.1f}ms: {e}")
            return Outcome.failed(e)
        return Outcome.success(results)

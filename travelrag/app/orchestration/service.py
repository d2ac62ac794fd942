"""Request pipeline: text -> intent -> retrieval -> fused recommendation.

Intent extraction and reasoning degrade; retrieval failure is the single
hard error of a query and surfaces as QueryFailedError.
"""

import logging
import time
import uuid
from datetime import date
from functools import lru_cache
from pathlib import Path
from typing import Any

from travelrag.app.config import Settings, get_settings
from travelrag.app.errors import CancelToken, QueryFailedError
from travelrag.app.fusion.confidence import overall_confidence
from travelrag.app.fusion.engine import RecommendationEngine
from travelrag.app.intent.extractor import IntentExtractor
from travelrag.app.intent.merge import apply_hints
from travelrag.app.llm.client import CompletionClient, get_completion_client
from travelrag.app.llm.embeddings import EmbeddingClient, get_embedding_client
from travelrag.app.models.common import BudgetTier
from travelrag.app.models.intent import IntentHints, TravelIntent
from travelrag.app.models.recommendation import QueryResponse, TravelRecommendation
from travelrag.app.models.retrieval import PatternFilters
from travelrag.app.models.schedule import Activity, DayPlan, PlanPreferences, TimeSlot
from travelrag.app.models.venue import CorpusBatch, LanguagePattern, Venue
from travelrag.app.retrieval.retriever import PatternRetriever
from travelrag.app.scheduling.planner import DayScheduler
from travelrag.app.scheduling.rules import parse_opening_hours
from travelrag.app.utils.logging import StructuredQueryLogger
from travelrag.app.utils.metrics import rag_query_latency_ms
from travelrag.app.vector.corpus import CorpusWriter, load_corpus_file
from travelrag.app.vector.index import InMemoryVectorIndex, VectorIndex

logger = logging.getLogger(__name__)


def _elapsed_ms(start: float) -> float:
    return (time.monotonic() - start) * 1000


def venue_to_activity(venue: Venue) -> Activity:
    """Turn a recommended venue into something the scheduler can place."""
    hours = parse_opening_hours(venue.opening_hours)
    open_time, close_time = hours if hours else (None, None)
    return Activity(
        name=venue.name,
        type=venue.type,
        address=venue.address or "",
        price=venue.price_range,
        open_time=open_time,
        close_time=close_time,
        booking=venue.booking_method,
        needs_reservation="reservation" in venue.booking_method.lower(),
        coordinates=venue.coordinates,
    )


class RecommendationService:
    """Answers travel queries and plans days from the results."""

    def __init__(
        self,
        index: VectorIndex,
        embedder: EmbeddingClient,
        completion: CompletionClient,
        settings: Settings | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.corpus = CorpusWriter(index, embedder)
        self.retriever = PatternRetriever(index, embedder, self.settings)
        self.extractor = IntentExtractor(self.retriever, completion, self.corpus, self.settings)
        self.engine = RecommendationEngine(completion, self.settings)
        self.scheduler = DayScheduler(self.settings)
        self.query_logger = StructuredQueryLogger()

    async def answer_query(
        self,
        user_text: str,
        context_hints: IntentHints | None = None,
        cancel_token: CancelToken | None = None,
    ) -> QueryResponse:
        """Run the full pipeline for one request.

        Args:
            user_text: Free-text travel request
            context_hints: Optional caller preferences overriding extraction
            cancel_token: Checked between stages

        Returns:
            QueryResponse with intent, recommendation and confidence

        Raises:
            QueryFailedError: If pattern retrieval fails
            QueryCancelledError: If the token is cancelled mid-request
        """
        cancel_token = cancel_token or CancelToken()
        trace_id = str(uuid.uuid4())
        start = time.monotonic()

        stage_start = time.monotonic()
        extraction = await self.extractor.extract(user_text)
        intent = apply_hints(extraction.unwrap(), context_hints)
        self.query_logger.log_stage(
            trace_id,
            "intent",
            extraction.status,
            _elapsed_ms(stage_start),
            destination=intent.destination,
            confidence=intent.confidence,
            reason=extraction.reason,
        )
        cancel_token.throw_if_cancelled()

        stage_start = time.monotonic()
        filters = PatternFilters(
            destination=intent.destination or None, budget_tier=intent.budget_tier
        )
        retrieval = await self.retriever.retrieve_patterns(user_text, filters)
        self.query_logger.log_stage(
            trace_id,
            "retrieval",
            retrieval.status,
            _elapsed_ms(stage_start),
            hits=len(retrieval.value or []),
        )
        if not retrieval.ok:
            rag_query_latency_ms.labels(outcome="failed").observe(_elapsed_ms(start))
            raise QueryFailedError("Pattern retrieval failed") from retrieval.error
        patterns = retrieval.unwrap()
        cancel_token.throw_if_cancelled()

        stage_start = time.monotonic()
        recommendation = await self.engine.recommend(intent, patterns, user_text)
        self.query_logger.log_stage(
            trace_id,
            "fusion",
            "success",
            _elapsed_ms(stage_start),
            venues=len(recommendation.venues),
            fallback=recommendation.is_fallback,
        )

        processing_ms = _elapsed_ms(start)
        outcome = "fallback" if recommendation.is_fallback else "success"
        rag_query_latency_ms.labels(outcome=outcome).observe(processing_ms)

        response = QueryResponse(
            intent=intent,
            recommendation=recommendation,
            overall_confidence=overall_confidence(
                intent.confidence, patterns, recommendation.confidence
            ),
            processing_time_ms=round(processing_ms, 2),
            sources=[p.source for p in patterns],
            trace_id=trace_id,
        )
        logger.info(
            f"Query completed: confidence={response.overall_confidence:.2f} "
            f"venues={len(recommendation.venues)} time={processing_ms:.0f}ms"
        )
        return response

    def record_booking(
        self, query: str, intent: TravelIntent, booked_venue: Venue, satisfaction: float
    ) -> None:
        """Record a confirmed booking for later corpus curation (log only)."""
        logger.info(
            f"Learning from successful booking: {booked_venue.name}",
            extra={
                "structured": {
                    "destination": intent.destination,
                    "venue": booked_venue.name,
                    "satisfaction": satisfaction,
                    "query": query[:50],
                }
            },
        )

    async def ingest(self, batch: CorpusBatch) -> dict[str, int]:
        """Embed and store a batch of patterns; return how many of each were stored.

        Raises:
            EmbeddingError: If a pattern cannot be embedded
            VectorIndexError: If the index rejects a pattern
        """
        await self.corpus.upsert_batch(batch)
        counts = {
            "successPatterns": len(batch.success_patterns),
            "languagePatterns": len(batch.language_patterns),
        }
        logger.info(f"Ingested corpus batch: {counts}")
        return counts

    async def seed_from_file(self, path: str | Path) -> dict[str, int]:
        logger.info(f"Seeding corpus from {path}")
        return await self.ingest(load_corpus_file(path))

    async def learn_from_correction(
        self, text: str, intent: TravelIntent, correct_budget: BudgetTier
    ) -> LanguagePattern | None:
        """Store the user's budget phrasing so future queries extract it directly."""
        return await self.extractor.learn_from_feedback(text, intent, correct_budget)

    def plan_day(
        self,
        recommendation: TravelRecommendation,
        day: date,
        fixed_bookings: list[TimeSlot] | None = None,
        intent: TravelIntent | None = None,
    ) -> DayPlan:
        """Schedule the recommended venues (primary then alternatives) into a day."""
        activities = [
            venue_to_activity(v) for v in [*recommendation.venues, *recommendation.alternatives]
        ]
        preferences = PlanPreferences()
        if intent is not None:
            preferences = PlanPreferences(
                pace=intent.pace,
                budget=intent.budget_tier,
                interests=list(intent.interests),
                group_type=intent.group_type,
            )
        return self.scheduler.create_day_plan(day, activities, fixed_bookings, preferences)

    def stats(self) -> dict[str, Any]:
        return {
            "pattern_score_threshold": self.retriever.pattern_threshold,
            "phrase_score_threshold": self.retriever.phrase_threshold,
            "top_k": self.retriever.top_k,
            "model": self.settings.openai_model,
            "embedding_model": self.settings.embedding_model,
        }


@lru_cache
def get_service() -> RecommendationService:
    """Process-wide service wired from settings."""
    settings = get_settings()
    return RecommendationService(
        index=InMemoryVectorIndex(),
        embedder=get_embedding_client(settings),
        completion=get_completion_client(settings),
        settings=settings,
    )

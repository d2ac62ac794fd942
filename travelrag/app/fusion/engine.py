"""Fusion & recommendation engine.

Merges the top retrieved success patterns into one ranked, deduplicated
venue list, explains it with a single completion call, and falls back to
a synthetic recommendation when retrieval found nothing.
"""

import logging

from travelrag.app.config import Settings, get_settings
from travelrag.app.errors import CompletionError, Outcome
from travelrag.app.fusion.confidence import NO_SIGNAL_CONFIDENCE, recommendation_confidence
from travelrag.app.llm.client import CompletionClient
from travelrag.app.llm.prompts import build_reasoning_prompt
from travelrag.app.models.common import BudgetTier
from travelrag.app.models.intent import TravelIntent
from travelrag.app.models.recommendation import (
    MAX_ALTERNATIVES,
    MAX_LOCAL_TIPS,
    MAX_PRIMARY_VENUES,
    RecommendationSource,
    TravelRecommendation,
)
from travelrag.app.models.retrieval import RAGResult, ResultKind
from travelrag.app.models.venue import SuccessPattern, Venue
from travelrag.app.utils.metrics import rag_fallback_total, rag_stage_degraded_total

logger = logging.getLogger(__name__)

MAX_FUSED_PATTERNS = 3

BUDGET_PRICE_RANGES: dict[BudgetTier, str] = {
    BudgetTier.low: "€5-20",
    BudgetTier.medium: "€20-50",
    BudgetTier.high: "€50-100",
    BudgetTier.luxury: "€100+",
}

GENERIC_REASONING = "These recommendations are based on successful patterns from similar travelers."
FALLBACK_TIPS = ["Consider booking in advance", "Check local weather conditions"]


def budget_price_range(tier: BudgetTier) -> str:
    return BUDGET_PRICE_RANGES[tier]


def deduplicate_venues(venues: list[Venue]) -> list[Venue]:
    """Drop repeated venues; the first occurrence of each identity wins."""
    seen: set[tuple[str, str]] = set()
    unique: list[Venue] = []
    for venue in venues:
        key = venue.identity_key()
        if key in seen:
            continue
        seen.add(key)
        unique.append(venue)
    return unique


def unique_in_order(items: list[str]) -> list[str]:
    return list(dict.fromkeys(items))


def fallback_recommendation(intent: TravelIntent) -> TravelRecommendation:
    """Synthetic single-venue recommendation used when no pattern was retrieved."""
    interest = intent.primary_interest or "attraction"
    destination = intent.destination or "your destination"
    interests = " and ".join(intent.interests) if intent.interests else "travel"

    venue = Venue(
        name=f"Top {interest} in {destination}",
        type=interest,
        price_range=budget_price_range(intent.budget_tier),
        booking_method="online",
        rating=4.0,
        special_notes=["Popular with travelers", "Recommended for first-time visitors"],
    )
    return TravelRecommendation(
        venues=[venue],
        confidence=NO_SIGNAL_CONFIDENCE,
        reasoning=(
            f"I don't have specific success patterns for {destination} yet, "
            f"but this is a popular choice for {interests} enthusiasts."
        ),
        alternatives=[],
        local_tips=list(FALLBACK_TIPS),
        source=RecommendationSource.fallback,
    )


class RecommendationEngine:
    """Builds recommendations from retrieved success patterns."""

    def __init__(self, completion: CompletionClient, settings: Settings | None = None) -> None:
        settings = settings or get_settings()
        self._completion = completion
        self._temperature = settings.reasoning_temperature
        self._max_tokens = settings.reasoning_max_tokens

    async def recommend(
        self, intent: TravelIntent, patterns: list[RAGResult], original_text: str
    ) -> TravelRecommendation:
        """Fuse retrieved patterns into a recommendation.

        Args:
            intent: Resolved intent for the request
            patterns: Pattern hits in retrieval order
            original_text: The user's literal request

        Returns:
            Retrieved recommendation, or the fallback if ``patterns`` is empty
        """
        success_patterns = [
            p for p in patterns
            if p.type == ResultKind.pattern and isinstance(p.content, SuccessPattern)
        ]
        if not success_patterns:
            logger.warning("No success patterns found, using fallback recommendation")
            rag_fallback_total.inc()
            return fallback_recommendation(intent)

        all_venues: list[Venue] = []
        insights: list[str] = []
        for result in success_patterns[:MAX_FUSED_PATTERNS]:
            pattern = result.content
            assert isinstance(pattern, SuccessPattern)
            all_venues.extend(pattern.venues)
            insights.extend(pattern.metadata.local_insights)

        unique_venues = deduplicate_venues(all_venues)
        top_venues = unique_venues[:MAX_PRIMARY_VENUES]
        alternatives = unique_venues[MAX_PRIMARY_VENUES : MAX_PRIMARY_VENUES + MAX_ALTERNATIVES]

        reasoning = await self.generate_reasoning(intent, top_venues, insights, original_text)

        return TravelRecommendation(
            venues=top_venues,
            confidence=recommendation_confidence(success_patterns, len(top_venues)),
            reasoning=reasoning.value or GENERIC_REASONING,
            alternatives=alternatives,
            local_tips=unique_in_order(insights)[:MAX_LOCAL_TIPS],
            source=RecommendationSource.retrieved,
        )

    async def generate_reasoning(
        self,
        intent: TravelIntent,
        venues: list[Venue],
        local_tips: list[str],
        original_text: str,
    ) -> Outcome[str]:
        """Explain the selection; degrades to a generic sentence on failure."""
        prompt = build_reasoning_prompt(original_text, intent, venues, local_tips)
        try:
            reasoning = await self._completion.complete(
                prompt, temperature=self._temperature, max_tokens=self._max_tokens
            )
        except CompletionError as e:
            logger.warning(f"Reasoning generation failed, using generic sentence: {e}")
            rag_stage_degraded_total.labels(stage="reasoning").inc()
            return Outcome.degraded(GENERIC_REASONING, reason="reasoning_failed", error=e)
        return Outcome.success(reasoning.strip())

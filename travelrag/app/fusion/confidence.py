"""Confidence arithmetic for fused recommendations.

These weights drive user-visible trust signals; change them only together
with the product owners of those signals.
"""

from collections.abc import Sequence

from travelrag.app.models.recommendation import MAX_PRIMARY_VENUES
from travelrag.app.models.retrieval import RAGResult

# Stand-in for missing signal: fallback recommendations and empty retrievals
NO_SIGNAL_CONFIDENCE = 0.3
VENUE_BONUS_WEIGHT = 0.2

INTENT_WEIGHT = 0.3
PATTERN_WEIGHT = 0.4
RECOMMENDATION_WEIGHT = 0.3


def average_pattern_confidence(patterns: Sequence[RAGResult]) -> float | None:
    """Mean retrieval score, or None if nothing was retrieved."""
    if not patterns:
        return None
    return sum(p.confidence for p in patterns) / len(patterns)


def recommendation_confidence(patterns: Sequence[RAGResult], venue_count: int) -> float:
    """avg(pattern scores) + min(venues / 5, 1) * 0.2, capped at 1.0."""
    average = average_pattern_confidence(patterns)
    if average is None or venue_count == 0:
        return NO_SIGNAL_CONFIDENCE

    venue_bonus = min(venue_count / MAX_PRIMARY_VENUES, 1.0) * VENUE_BONUS_WEIGHT
    return min(average + venue_bonus, 1.0)


def overall_confidence(
    intent_confidence: float,
    patterns: Sequence[RAGResult],
    recommendation_conf: float,
) -> float:
    """Weighted blend of intent, retrieval and recommendation confidence."""
    average = average_pattern_confidence(patterns)
    pattern_term = NO_SIGNAL_CONFIDENCE if average is None else average
    return (
        intent_confidence * INTENT_WEIGHT
        + pattern_term * PATTERN_WEIGHT
        + recommendation_conf * RECOMMENDATION_WEIGHT
    )

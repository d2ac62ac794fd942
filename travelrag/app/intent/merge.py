"""Field-by-field merge of intent fragments.

Precedence per field:
- destination, budget_tier, group_type, pace: phrase pattern, then AI, then default
- dates: AI only (phrase patterns never carry dates)
- interests: union of both sources, first occurrence order
- confidence: max(ai, pattern, floor)
"""

import logging
from datetime import date
from typing import Any, TypeVar

from travelrag.app.models.common import BudgetTier, GroupType, Pace
from travelrag.app.models.intent import (
    INTENT_CONFIDENCE_FLOOR,
    DateRange,
    IntentFragment,
    IntentHints,
    TravelIntent,
)
from travelrag.app.models.retrieval import RAGResult, ResultKind
from travelrag.app.models.venue import LanguagePattern

logger = logging.getLogger(__name__)

E = TypeVar("E")

DEFAULT_BUDGET = BudgetTier.medium
DEFAULT_GROUP = GroupType.solo
DEFAULT_PACE = Pace.moderate


def first_present(*values: E | None) -> E | None:
    """Return the first value that is not None or empty."""
    for value in values:
        if value is not None and value != "":
            return value
    return None


def merge_interests(*sources: list[str] | tuple[str, ...]) -> list[str]:
    """Union of interest lists with duplicates removed."""
    merged: list[str] = []
    for source in sources:
        for interest in source:
            if interest and interest not in merged:
                merged.append(interest)
    return merged


def fragment_from_patterns(text: str, results: list[RAGResult]) -> IntentFragment:
    """Absorb every phrase pattern with a phrase literally present in the text.

    Later matching patterns overwrite earlier scalar values; interests accumulate.
    """
    message = text.lower()
    budget: BudgetTier | None = None
    group: GroupType | None = None
    pace: Pace | None = None
    interests: list[str] = []
    confidence = 0.0

    for result in results:
        if result.type != ResultKind.phrase or not isinstance(result.content, LanguagePattern):
            continue
        pattern = result.content
        if not any(phrase.lower() in message for phrase in pattern.phrases if phrase):
            continue

        confidence = max(confidence, result.confidence)
        mapping = pattern.maps_to
        if mapping.budget_tier:
            budget = mapping.budget_tier
        if mapping.interests:
            interests.extend(mapping.interests)
        if mapping.pace:
            pace = mapping.pace
        if mapping.group_type:
            group = mapping.group_type

    return IntentFragment(
        interests=tuple(merge_interests(interests)),
        budget_tier=budget,
        group_type=group,
        pace=pace,
        confidence=confidence,
    )


def _enum_or_none(enum_cls: type[E], value: Any) -> E | None:
    if not isinstance(value, str):
        return None
    try:
        return enum_cls(value.strip().lower())  # type: ignore[call-arg]
    except ValueError:
        return None


def _parse_dates(value: Any) -> DateRange | None:
    if not isinstance(value, dict):
        return None
    try:
        return DateRange(
            start=date.fromisoformat(str(value["start"])),
            end=date.fromisoformat(str(value["end"])),
        )
    except (KeyError, ValueError):
        return None


def _parse_confidence(value: Any) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    return max(0.0, min(1.0, confidence))


def fragment_from_ai(data: dict[str, Any]) -> IntentFragment:
    """Build a fragment from the model's JSON guess, dropping invalid fields."""
    destination = data.get("destination")
    if not isinstance(destination, str) or destination.strip().lower() in ("", "null", "none"):
        destination = None

    raw_interests = data.get("interests") or []
    interests = [str(i) for i in raw_interests if i] if isinstance(raw_interests, list) else []

    return IntentFragment(
        destination=destination.strip() if destination else None,
        dates=_parse_dates(data.get("dates")),
        interests=tuple(merge_interests(interests)),
        budget_tier=_enum_or_none(BudgetTier, data.get("budgetTier", data.get("budget_tier"))),
        group_type=_enum_or_none(GroupType, data.get("groupType", data.get("group_type"))),
        pace=_enum_or_none(Pace, data.get("pace")),
        confidence=_parse_confidence(data.get("confidence")),
    )


def merge_fragments(
    ai: IntentFragment, pattern: IntentFragment, original_text: str
) -> TravelIntent:
    """Merge the AI guess and the phrase-pattern fragment into a TravelIntent."""
    return TravelIntent(
        destination=first_present(pattern.destination, ai.destination) or "",
        dates=ai.dates,
        interests=merge_interests(ai.interests, pattern.interests),
        budget_tier=first_present(pattern.budget_tier, ai.budget_tier) or DEFAULT_BUDGET,
        group_type=first_present(pattern.group_type, ai.group_type) or DEFAULT_GROUP,
        pace=first_present(pattern.pace, ai.pace) or DEFAULT_PACE,
        original_text=original_text,
        confidence=max(ai.confidence, pattern.confidence, INTENT_CONFIDENCE_FLOOR),
    )


def apply_hints(intent: TravelIntent, hints: IntentHints | None) -> TravelIntent:
    """Override extracted scalars with caller hints; union hinted interests."""
    if hints is None:
        return intent
    update: dict[str, Any] = {"interests": merge_interests(intent.interests, hints.interests)}
    if hints.destination:
        update["destination"] = hints.destination
    if hints.budget_tier:
        update["budget_tier"] = hints.budget_tier
    if hints.group_type:
        update["group_type"] = hints.group_type
    if hints.pace:
        update["pace"] = hints.pace
    return intent.model_copy(update=update)

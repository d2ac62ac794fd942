"""Tests for confidence arithmetic and the recommendation engine."""

import pytest
from fakes import ScriptedCompletion, make_pattern, make_venue

from travelrag.app.config import Settings
from travelrag.app.fusion.confidence import overall_confidence, recommendation_confidence
from travelrag.app.fusion.engine import (
    GENERIC_REASONING,
    RecommendationEngine,
    deduplicate_venues,
    fallback_recommendation,
)
from travelrag.app.models.common import BudgetTier
from travelrag.app.models.intent import TravelIntent
from travelrag.app.models.recommendation import RecommendationSource
from travelrag.app.models.retrieval import RAGResult, ResultKind
from travelrag.app.models.venue import SuccessPattern


def hit(pattern: SuccessPattern, score: float) -> RAGResult:
    return RAGResult(type=ResultKind.pattern, content=pattern, confidence=score, source="curated")


def make_intent(**kwargs: object) -> TravelIntent:
    defaults: dict[str, object] = {
        "destination": "Berlin",
        "interests": ["clubs"],
        "budget_tier": BudgetTier.low,
        "original_text": "broke students berlin clubs",
        "confidence": 0.8,
    }
    defaults.update(kwargs)
    return TravelIntent(**defaults)  # type: ignore[arg-type]


class TestConfidence:
    """Confidence formulas."""

    def test_recommendation_confidence(self) -> None:
        patterns = [hit(make_pattern("a", []), 0.8), hit(make_pattern("b", []), 0.6)]
        # avg 0.7 + (2/5) * 0.2
        assert recommendation_confidence(patterns, 2) == pytest.approx(0.78)
        # venue bonus caps at 0.2
        assert recommendation_confidence(patterns, 9) == pytest.approx(0.9)

    def test_recommendation_confidence_caps_at_one(self) -> None:
        assert recommendation_confidence([hit(make_pattern("a", []), 0.95)], 5) == 1.0

    def test_recommendation_confidence_without_signal(self) -> None:
        assert recommendation_confidence([], 3) == 0.3
        assert recommendation_confidence([hit(make_pattern("a", []), 0.9)], 0) == 0.3

    def test_overall_confidence(self) -> None:
        patterns = [hit(make_pattern("a", []), 0.8)]
        assert overall_confidence(0.9, patterns, 0.7) == pytest.approx(
            0.3 * 0.9 + 0.4 * 0.8 + 0.3 * 0.7
        )

    def test_overall_confidence_without_patterns_uses_stand_in(self) -> None:
        assert overall_confidence(0.5, [], 0.3) == pytest.approx(0.15 + 0.12 + 0.09)

    def test_deterministic(self) -> None:
        patterns = [hit(make_pattern("a", []), 0.71), hit(make_pattern("b", []), 0.64)]
        results = {overall_confidence(0.6, patterns, 0.77) for _ in range(20)}
        assert len(results) == 1


class TestDeduplicate:
    """Venue identity is (lower-cased name, type)."""

    def test_first_occurrence_wins(self) -> None:
        venues = [
            make_venue("Club A", price_range="€10"),
            make_venue("club a", price_range="€99"),
            make_venue("Club A", type="bar"),
        ]
        unique = deduplicate_venues(venues)
        assert [(v.name, v.type, v.price_range) for v in unique] == [
            ("Club A", "club", "€10"),
            ("Club A", "bar", ""),
        ]

    def test_idempotent(self) -> None:
        venues = [make_venue(n) for n in ("A", "b", "a", "B", "c")]
        once = deduplicate_venues(venues)
        assert deduplicate_venues(once) == once


class TestRecommend:
    """Fusion of retrieved patterns."""

    @pytest.mark.asyncio
    async def test_fuses_top_three_patterns(self, settings: Settings) -> None:
        patterns = [
            hit(make_pattern("p1", [make_venue("A"), make_venue("B")], insights=["t1", "t2"]), 0.9),
            hit(make_pattern("p2", [make_venue("b"), make_venue("C"), make_venue("D")], insights=["t2", "t3"]), 0.8),
            hit(make_pattern("p3", [make_venue(n) for n in "EFGH"], insights=["t4", "t5", "t6"]), 0.7),
            hit(make_pattern("p4", [make_venue("Z")], insights=["t7"]), 0.65),
        ]
        completion = ScriptedCompletion(text="  Because they fit.  ")
        engine = RecommendationEngine(completion, settings)

        rec = await engine.recommend(make_intent(), patterns, "broke students berlin clubs")

        assert [v.name for v in rec.venues] == ["A", "B", "C", "D", "E"]
        assert [v.name for v in rec.alternatives] == ["F", "G", "H"]
        assert rec.local_tips == ["t1", "t2", "t3", "t4", "t5"]
        assert rec.reasoning == "Because they fit."
        assert rec.source == RecommendationSource.retrieved
        # avg of all four scores + full venue bonus
        assert rec.confidence == pytest.approx(min((0.9 + 0.8 + 0.7 + 0.65) / 4 + 0.2, 1.0))

    @pytest.mark.asyncio
    async def test_reasoning_prompt_carries_request_and_venues(self, settings: Settings) -> None:
        completion = ScriptedCompletion()
        engine = RecommendationEngine(completion, settings)
        pattern = make_pattern(
            "p1",
            [make_venue("Club A", price_range="€10", address="Mitte")],
            insights=["i1", "i2", "i3", "i4"],
        )

        await engine.recommend(make_intent(), [hit(pattern, 0.9)], "broke students berlin clubs")

        prompt = completion.prompts[0]
        assert "broke students berlin clubs" in prompt
        assert "Club A (club) - €10 - Mitte" in prompt
        assert "i3" in prompt
        assert "i4" not in prompt

    @pytest.mark.asyncio
    async def test_reasoning_failure_uses_generic_sentence(
        self, settings: Settings, failing_completion: ScriptedCompletion
    ) -> None:
        engine = RecommendationEngine(failing_completion, settings)
        pattern = make_pattern("p1", [make_venue("A")])

        rec = await engine.recommend(make_intent(), [hit(pattern, 0.9)], "x")

        assert rec.reasoning == GENERIC_REASONING
        assert [v.name for v in rec.venues] == ["A"]

    @pytest.mark.asyncio
    async def test_generate_reasoning_reports_degraded(
        self, settings: Settings, failing_completion: ScriptedCompletion
    ) -> None:
        engine = RecommendationEngine(failing_completion, settings)
        outcome = await engine.generate_reasoning(make_intent(), [], [], "x")
        assert outcome.status == "degraded"
        assert outcome.value == GENERIC_REASONING

    @pytest.mark.asyncio
    async def test_empty_patterns_fall_back(self, settings: Settings) -> None:
        completion = ScriptedCompletion()
        engine = RecommendationEngine(completion, settings)

        rec = await engine.recommend(make_intent(), [], "x")

        assert rec.is_fallback
        assert completion.prompts == []


class TestFallback:
    """Synthetic recommendation when nothing was retrieved."""

    @pytest.mark.parametrize(
        ("tier", "price"),
        [
            (BudgetTier.low, "€5-20"),
            (BudgetTier.medium, "€20-50"),
            (BudgetTier.high, "€50-100"),
            (BudgetTier.luxury, "€100+"),
        ],
    )
    def test_price_by_budget(self, tier: BudgetTier, price: str) -> None:
        rec = fallback_recommendation(make_intent(budget_tier=tier))
        assert rec.venues[0].price_range == price

    def test_fallback_shape(self) -> None:
        rec = fallback_recommendation(
            make_intent(destination="Antarctica", interests=["vegan", "ice cream"])
        )
        assert rec.confidence == 0.3
        assert rec.source == RecommendationSource.fallback
        assert rec.venues[0].name == "Top vegan in Antarctica"
        assert "don't have specific success patterns for Antarctica" in rec.reasoning
        assert rec.alternatives == []

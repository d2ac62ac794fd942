"""Intent extractor - AI guess plus learned phrase patterns.

Extraction is best effort: it never raises. Any failure of the phrase
lookup or of the completion call degrades to a low-confidence intent and
is reported through the Outcome status.
"""

import asyncio
import hashlib
import logging

from travelrag.app.config import Settings, get_settings
from travelrag.app.errors import CompletionError, Outcome, RetrievalError
from travelrag.app.intent.merge import fragment_from_ai, fragment_from_patterns, merge_fragments
from travelrag.app.llm.client import CompletionClient
from travelrag.app.llm.prompts import build_intent_prompt
from travelrag.app.models.common import BudgetTier
from travelrag.app.models.intent import IntentFragment, TravelIntent
from travelrag.app.models.retrieval import RAGResult
from travelrag.app.models.venue import LanguageMapping, LanguagePattern
from travelrag.app.retrieval.retriever import PatternRetriever
from travelrag.app.utils.metrics import rag_stage_degraded_total
from travelrag.app.vector.corpus import CorpusWriter

logger = logging.getLogger(__name__)

# Confidence reported by the AI source when the completion call fails
AI_FAILURE_CONFIDENCE = 0.3
LEARNED_PATTERN_CONFIDENCE = 0.8
BUDGET_KEYWORDS = ("budget", "cheap", "expensive", "affordable", "luxury", "broke", "money")


def extract_budget_phrases(message: str) -> list[str]:
    """Phrases of up to two words either side of each budget keyword."""
    words = message.lower().split()
    phrases: list[str] = []
    for i, word in enumerate(words):
        if any(keyword in word for keyword in BUDGET_KEYWORDS):
            start = max(0, i - 2)
            end = min(len(words), i + 3)
            phrases.append(" ".join(words[start:end]))
    return phrases


class IntentExtractor:
    """Derives a TravelIntent from raw text."""

    def __init__(
        self,
        retriever: PatternRetriever,
        completion: CompletionClient,
        corpus: CorpusWriter | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._retriever = retriever
        self._completion = completion
        self._corpus = corpus
        self._temperature = settings.intent_temperature
        self._max_tokens = settings.intent_max_tokens

    async def _phrase_fragment(self, text: str) -> tuple[IntentFragment, str | None]:
        try:
            results: list[RAGResult] = await self._retriever.query_phrases(text)
        except RetrievalError as e:
            logger.warning(f"Phrase pattern lookup failed, continuing without: {e}")
            return IntentFragment(), "phrase_lookup_failed"
        return fragment_from_patterns(text, results), None

    async def _ai_fragment(self, text: str) -> tuple[IntentFragment, str | None]:
        try:
            data = await self._completion.complete_structured(
                build_intent_prompt(text),
                temperature=self._temperature,
                max_tokens=self._max_tokens,
            )
        except CompletionError as e:
            logger.warning(f"AI intent extraction failed: {e}")
            return IntentFragment(confidence=AI_FAILURE_CONFIDENCE), "ai_extraction_failed"
        return fragment_from_ai(data), None

    async def extract(self, text: str) -> Outcome[TravelIntent]:
        """Extract intent, reporting whether any source degraded."""
        try:
            (pattern, pattern_issue), (ai, ai_issue) = await asyncio.gather(
                self._phrase_fragment(text), self._ai_fragment(text)
            )
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception("Unexpected intent extraction failure")
            rag_stage_degraded_total.labels(stage="intent").inc()
            fallback = merge_fragments(
                IntentFragment(confidence=AI_FAILURE_CONFIDENCE), IntentFragment(), text
            )
            return Outcome.degraded(fallback, reason="unexpected_error", error=e)

        intent = merge_fragments(ai, pattern, text)
        issues = [issue for issue in (pattern_issue, ai_issue) if issue]

        logger.info(
            f"Extracted intent: destination={intent.destination!r} "
            f"budget={intent.budget_tier.value} confidence={intent.confidence:.2f}"
        )

        if issues:
            rag_stage_degraded_total.labels(stage="intent").inc()
            return Outcome.degraded(intent, reason=",".join(issues))
        return Outcome.success(intent)

    async def extract_intent(self, text: str) -> TravelIntent:
        """Extract intent; never raises."""
        outcome = await self.extract(text)
        assert outcome.value is not None
        return outcome.value

    async def learn_from_feedback(
        self, text: str, intent: TravelIntent, correct_budget: BudgetTier
    ) -> LanguagePattern | None:
        """Learn a budget phrase pattern when the user corrects the budget tier.

        Returns the stored pattern, or None when nothing was learned.
        """
        if correct_budget == intent.budget_tier:
            return None

        phrases = extract_budget_phrases(text)
        if not phrases:
            return None

        digest = hashlib.sha256(f"{correct_budget.value}:{text}".encode()).hexdigest()[:12]
        pattern = LanguagePattern(
            id=f"budget_{digest}",
            intent="budget_expression",
            phrases=phrases,
            confidence=LEARNED_PATTERN_CONFIDENCE,
            maps_to=LanguageMapping(budget_tier=correct_budget),
            examples=[text],
        )

        if self._corpus is None:
            logger.warning("No corpus writer configured; learned pattern not stored")
            return pattern

        await self._corpus.upsert_language_patterns([pattern])
        logger.info(f"Learned budget phrases {phrases} -> {correct_budget.value}")
        return pattern

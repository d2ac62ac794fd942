"""Corpus codec - how patterns are stored as vector metadata and read back.

Venue lists, insights, phrases and mappings are stored as JSON strings so
that every metadata value stays a scalar.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from travelrag.app.errors import RetrievalError
from travelrag.app.llm.embeddings import EmbeddingClient
from travelrag.app.models.retrieval import ResultKind
from travelrag.app.models.venue import (
    CorpusBatch,
    LanguageMapping,
    LanguagePattern,
    PatternMetadata,
    SuccessPattern,
    Venue,
)
from travelrag.app.vector.index import PATTERN_COLLECTION, PHRASE_COLLECTION, VectorIndex

logger = logging.getLogger(__name__)


def pattern_search_text(pattern: SuccessPattern) -> str:
    """Searchable text for a success pattern."""
    venue_names = " ".join(v.name for v in pattern.venues)
    venue_types = " ".join(v.type for v in pattern.venues)
    insights = " ".join(pattern.metadata.local_insights)
    return (
        f"{pattern.destination} {pattern.category} {venue_names} {venue_types} "
        f"{insights} {pattern.budget_tier.value if pattern.budget_tier else ''}"
    )


def phrase_search_text(pattern: LanguagePattern) -> str:
    return " | ".join(pattern.phrases)


def success_pattern_metadata(pattern: SuccessPattern) -> dict[str, Any]:
    """Flatten a success pattern into index metadata."""
    metadata: dict[str, Any] = {
        "type": ResultKind.pattern.value,
        "id": pattern.id,
        "destination": pattern.destination.lower(),
        "category": pattern.category.lower(),
        "successRate": pattern.success_rate,
        "userSatisfaction": pattern.user_satisfaction,
        "venues": json.dumps([v.model_dump(mode="json", by_alias=True) for v in pattern.venues]),
        "source": pattern.metadata.source,
        "bookingPattern": pattern.metadata.booking_pattern,
        "localInsights": json.dumps(pattern.metadata.local_insights),
        "searchText": pattern_search_text(pattern),
    }
    if pattern.budget_tier:
        metadata["budgetTier"] = pattern.budget_tier.value
    if pattern.metadata.last_updated:
        metadata["lastUpdated"] = pattern.metadata.last_updated
    return metadata


def language_pattern_metadata(pattern: LanguagePattern) -> dict[str, Any]:
    """Flatten a language pattern into index metadata."""
    return {
        "type": ResultKind.phrase.value,
        "id": pattern.id,
        "intent": pattern.intent,
        "confidence": pattern.confidence,
        "phrases": json.dumps(pattern.phrases),
        "mapsTo": json.dumps(pattern.maps_to.model_dump(mode="json", by_alias=True, exclude_none=True)),
        "searchText": phrase_search_text(pattern),
    }


def _json_field(metadata: dict[str, Any], key: str, default: Any) -> Any:
    value = metadata.get(key)
    if value is None or value == "":
        return default
    if isinstance(value, str):
        return json.loads(value)
    return value


def parse_success_pattern(metadata: dict[str, Any], fallback_id: str = "") -> SuccessPattern:
    """Rebuild a success pattern from index metadata.

    Raises:
        RetrievalError: If the stored metadata is malformed
    """
    try:
        venues = [Venue.model_validate(v) for v in _json_field(metadata, "venues", [])]
        return SuccessPattern(
            id=metadata.get("id") or fallback_id,
            destination=metadata.get("destination", ""),
            category=metadata.get("category", ""),
            venues=venues,
            budget_tier=metadata.get("budgetTier"),
            success_rate=metadata.get("successRate") or 0.0,
            user_satisfaction=metadata.get("userSatisfaction") or 0.0,
            metadata=PatternMetadata(
                source=metadata.get("source") or "unknown",
                last_updated=metadata.get("lastUpdated"),
                booking_pattern=metadata.get("bookingPattern") or "",
                local_insights=_json_field(metadata, "localInsights", []),
            ),
        )
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        raise RetrievalError(f"Malformed success pattern metadata ({fallback_id}): {e}") from e


def parse_language_pattern(metadata: dict[str, Any], fallback_id: str = "") -> LanguagePattern:
    """Rebuild a language pattern from index metadata.

    Raises:
        RetrievalError: If the stored metadata is malformed
    """
    try:
        return LanguagePattern(
            id=metadata.get("id") or fallback_id,
            intent=metadata.get("intent", ""),
            phrases=_json_field(metadata, "phrases", []),
            confidence=metadata.get("confidence") or 0.0,
            maps_to=LanguageMapping.model_validate(_json_field(metadata, "mapsTo", {})),
        )
    except (json.JSONDecodeError, ValidationError, TypeError) as e:
        raise RetrievalError(f"Malformed language pattern metadata ({fallback_id}): {e}") from e


class CorpusWriter:
    """Embeds and upserts corpus records."""

    def __init__(self, index: VectorIndex, embedder: EmbeddingClient) -> None:
        self._index = index
        self._embedder = embedder

    async def upsert_success_patterns(self, patterns: list[SuccessPattern]) -> None:
        logger.info(f"Upserting {len(patterns)} success patterns")
        for pattern in patterns:
            vector = await self._embedder.embed(pattern_search_text(pattern))
            await self._index.upsert(
                PATTERN_COLLECTION,
                f"success_{pattern.id}",
                vector,
                success_pattern_metadata(pattern),
            )

    async def upsert_language_patterns(self, patterns: list[LanguagePattern]) -> None:
        logger.info(f"Upserting {len(patterns)} language patterns")
        for pattern in patterns:
            vector = await self._embedder.embed(phrase_search_text(pattern))
            await self._index.upsert(
                PHRASE_COLLECTION,
                f"language_{pattern.id}",
                vector,
                language_pattern_metadata(pattern),
            )

    async def upsert_batch(self, batch: CorpusBatch) -> None:
        await self.upsert_success_patterns(batch.success_patterns)
        await self.upsert_language_patterns(batch.language_patterns)


def load_corpus_file(path: str | Path) -> CorpusBatch:
    """Read a JSON corpus file ({"successPatterns": [...], "languagePatterns": [...]}).

    Raises:
        FileNotFoundError: If the file does not exist
        pydantic.ValidationError: If the file is not a valid corpus batch
    """
    return CorpusBatch.model_validate_json(Path(path).read_text(encoding="utf-8"))

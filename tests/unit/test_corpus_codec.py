"""Tests for how patterns are stored as index metadata."""

import json

import pytest
from fakes import FixedEmbedder, ScriptedIndex, make_pattern, make_venue

from travelrag.app.errors import RetrievalError
from travelrag.app.models.common import BudgetTier, Geo
from travelrag.app.models.venue import LanguageMapping, LanguagePattern
from travelrag.app.vector.corpus import (
    CorpusWriter,
    language_pattern_metadata,
    parse_language_pattern,
    parse_success_pattern,
    pattern_search_text,
    success_pattern_metadata,
)


def test_success_pattern_metadata_layout() -> None:
    pattern = make_pattern(
        "b1",
        [make_venue("Berghain", address="Am Wriezener Bhf", coordinates=Geo(lat=52.51, lng=13.44))],
        destination="Berlin",
        category="Nightlife",
        insights=["Sunday is the day"],
    )

    metadata = success_pattern_metadata(pattern)

    assert metadata["type"] == "success_pattern"
    assert metadata["destination"] == "berlin"
    assert metadata["category"] == "nightlife"
    assert metadata["budgetTier"] == "low"
    assert metadata["successRate"] == 0.9
    assert json.loads(metadata["localInsights"]) == ["Sunday is the day"]
    venue = json.loads(metadata["venues"])[0]
    assert venue["priceRange"] == ""
    assert venue["coordinates"] == {"lat": 52.51, "lng": 13.44}
    # every value is a scalar
    assert all(isinstance(v, (str, int, float)) for v in metadata.values())


def test_budget_tier_is_normalised_to_filterable_value() -> None:
    pattern = make_pattern("b1", [make_venue("Club A")], budget_tier="Low")

    metadata = success_pattern_metadata(pattern)

    assert pattern.budget_tier is BudgetTier.low
    assert metadata["budgetTier"] == BudgetTier.low.value
    assert pattern_search_text(pattern).endswith(" low")


def test_unknown_budget_tier_is_rejected() -> None:
    with pytest.raises(ValueError):
        make_pattern("b1", [make_venue("Club A")], budget_tier="cheapish")


def test_success_pattern_survives_storage() -> None:
    pattern = make_pattern(
        "b1", [make_venue("Club A", price_range="€10", special_notes=["cash only"])]
    )

    restored = parse_success_pattern(success_pattern_metadata(pattern))

    assert restored.venues == pattern.venues
    assert restored.metadata.source == "curated"
    assert restored.destination == "berlin"


def test_language_pattern_survives_storage() -> None:
    pattern = LanguagePattern(
        id="l1",
        intent="budget_expression",
        phrases=["broke", "skint"],
        confidence=0.9,
        maps_to=LanguageMapping(budget_tier=BudgetTier.low, interests=["street food"]),
    )

    metadata = language_pattern_metadata(pattern)
    restored = parse_language_pattern(metadata)

    assert metadata["searchText"] == "broke | skint"
    assert json.loads(metadata["mapsTo"]) == {"budgetTier": "low", "interests": ["street food"]}
    assert restored.maps_to == pattern.maps_to
    assert restored.phrases == pattern.phrases


def test_search_text_covers_names_types_and_insights() -> None:
    pattern = make_pattern("p", [make_venue("Club A", "club")], insights=["Bring cash"])
    text = pattern_search_text(pattern)
    for word in ("Berlin", "nightlife", "Club A", "club", "Bring cash", "low"):
        assert word in text


def test_parse_rejects_invalid_venue() -> None:
    metadata = {"id": "x", "venues": json.dumps([{"name": "no type"}])}
    with pytest.raises(RetrievalError):
        parse_success_pattern(metadata)


@pytest.mark.asyncio
async def test_corpus_writer_prefixes_ids() -> None:
    index = ScriptedIndex()
    embedder = FixedEmbedder()
    writer = CorpusWriter(index, embedder)

    await writer.upsert_success_patterns([make_pattern("b1", [make_venue("A")])])
    await writer.upsert_language_patterns([LanguagePattern(id="l1", phrases=["broke"])])

    assert [(c, i) for c, i, _ in index.upserts] == [
        ("pattern", "success_b1"),
        ("phrase", "language_l1"),
    ]
    assert embedder.calls[1] == "broke"

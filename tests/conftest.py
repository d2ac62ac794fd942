"""Shared pytest fixtures for all test suites."""

import pytest
from fakes import ScriptedCompletion, make_pattern, make_venue

from travelrag.app.config import Settings
from travelrag.app.errors import CompletionError
from travelrag.app.models.venue import LanguageMapping, LanguagePattern, SuccessPattern


@pytest.fixture
def settings() -> Settings:
    """Settings with defaults only (no API key, no .env)."""
    return Settings(_env_file=None, openai_api_key=None)


@pytest.fixture
def broke_phrase() -> LanguagePattern:
    return LanguagePattern(
        id="broke_low",
        intent="budget_expression",
        phrases=["broke", "on a shoestring"],
        confidence=0.9,
        maps_to=LanguageMapping(budget_tier="low"),
    )


@pytest.fixture
def berlin_pattern() -> SuccessPattern:
    return make_pattern(
        "berlin_clubs",
        [
            make_venue("Club A", price_range="€10-15"),
            make_venue("Club B", price_range="Free"),
        ],
        insights=["Clubs open late", "Bring cash"],
    )


@pytest.fixture
def failing_completion() -> ScriptedCompletion:
    error = CompletionError("provider down")
    return ScriptedCompletion(text=error, structured=error)

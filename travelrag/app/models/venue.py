"""Corpus models - venues, success patterns and language patterns."""

from pydantic import Field, field_validator

from travelrag.app.models.common import BudgetTier, CorpusModel, Geo, GroupType, Pace


class Venue(CorpusModel):
    """A concrete place that can be recommended.

    Two venues are the same venue when their lower-cased names and their
    types match exactly.
    """

    name: str
    type: str
    address: str | None = None
    price_range: str = ""
    booking_method: str = "online"
    rating: float = Field(0.0, ge=0.0, le=5.0)
    coordinates: Geo | None = None
    opening_hours: str | None = None
    website: str | None = None
    special_notes: list[str] = Field(default_factory=list)

    def identity_key(self) -> tuple[str, str]:
        """Deduplication key."""
        return (self.name.lower(), self.type)


class PatternMetadata(CorpusModel):
    """Provenance and local knowledge attached to a success pattern."""

    source: str = "unknown"
    last_updated: str | None = None
    booking_pattern: str = ""
    local_insights: list[str] = Field(default_factory=list)


class SuccessPattern(CorpusModel):
    """A destination + category cluster of venues that worked for travellers."""

    id: str
    destination: str
    category: str = ""
    venues: list[Venue] = Field(default_factory=list)
    budget_tier: BudgetTier | None = None
    success_rate: float = Field(0.0, ge=0.0, le=1.0)
    user_satisfaction: float = Field(0.0, ge=0.0, le=5.0)
    metadata: PatternMetadata = Field(default_factory=PatternMetadata)

    @field_validator("budget_tier", mode="before")
    @classmethod
    def normalise_budget_tier(cls, v: object) -> object:
        """Corpus files spell tiers in any case ("Low", "LOW")."""
        if isinstance(v, str):
            return v.strip().lower() or None
        return v


class LanguageMapping(CorpusModel):
    """Intent fragment a colloquial phrase maps to."""

    budget_tier: BudgetTier | None = None
    interests: list[str] = Field(default_factory=list)
    pace: Pace | None = None
    group_type: GroupType | None = None


class LanguagePattern(CorpusModel):
    """Maps natural-language phrases to an intent fragment.

    Only used during intent extraction; never shown to users.
    """

    id: str
    intent: str = ""
    phrases: list[str] = Field(default_factory=list)
    confidence: float = Field(0.0, ge=0.0, le=1.0)
    maps_to: LanguageMapping = Field(default_factory=LanguageMapping)
    examples: list[str] = Field(default_factory=list)


class CorpusBatch(CorpusModel):
    """Patterns ingested together, from a seed file or over HTTP."""

    success_patterns: list[SuccessPattern] = Field(default_factory=list)
    language_patterns: list[LanguagePattern] = Field(default_factory=list)

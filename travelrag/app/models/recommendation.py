"""Recommendation models - fused output and request/response envelopes."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from travelrag.app.models.common import BudgetTier
from travelrag.app.models.intent import IntentHints, TravelIntent
from travelrag.app.models.venue import LanguagePattern, Venue

MAX_PRIMARY_VENUES = 5
MAX_ALTERNATIVES = 3
MAX_LOCAL_TIPS = 5


class RecommendationSource(str, Enum):
    """Where a recommendation came from."""

    retrieved = "retrieved"
    fallback = "fallback"


class TravelRecommendation(BaseModel):
    """Ranked, deduplicated venues with an explanation."""

    venues: list[Venue] = Field(..., max_length=MAX_PRIMARY_VENUES)
    confidence: float = Field(..., ge=0.0, le=1.0)
    reasoning: str
    alternatives: list[Venue] = Field(default_factory=list, max_length=MAX_ALTERNATIVES)
    local_tips: list[str] = Field(default_factory=list, max_length=MAX_LOCAL_TIPS)
    source: RecommendationSource

    @property
    def is_fallback(self) -> bool:
        return self.source == RecommendationSource.fallback


class QueryContext(BaseModel):
    """Optional conversation context sent with a query."""

    model_config = ConfigDict(populate_by_name=True)

    previous_messages: list[str] = Field(default_factory=list, alias="previousMessages")
    user_preferences: IntentHints | None = Field(None, alias="userPreferences")
    trip_id: str | None = Field(None, alias="tripId")


class QueryRequest(BaseModel):
    """Inbound query body."""

    model_config = ConfigDict(populate_by_name=True)

    user_message: str = Field(..., min_length=1, alias="userMessage")
    context: QueryContext | None = None


class QueryResponse(BaseModel):
    """Answer to a free-text travel request."""

    intent: TravelIntent
    recommendation: TravelRecommendation
    overall_confidence: float = Field(..., ge=0.0, le=1.0)
    processing_time_ms: float
    sources: list[str]
    trace_id: str


class BookingFeedback(BaseModel):
    """A confirmed booking reported back for learning."""

    query: str
    intent: TravelIntent
    booked_venue: Venue
    satisfaction: float = Field(..., ge=0.0, le=5.0)


class IntentCorrection(BaseModel):
    """A user's correction of the budget tier extracted from their query."""

    text: str = Field(..., min_length=1)
    intent: TravelIntent
    correct_budget: BudgetTier


class IntentCorrectionResult(BaseModel):
    """Outcome of an intent correction."""

    learned: bool
    pattern: LanguagePattern | None = None

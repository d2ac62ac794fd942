"""Models package - re-exports for convenience."""

from travelrag.app.models.common import BudgetTier, Geo, GroupType, Pace
from travelrag.app.models.freshness import FreshnessResult, ValidationStatus, VenueUpdates
from travelrag.app.models.intent import DateRange, IntentFragment, IntentHints, TravelIntent
from travelrag.app.models.recommendation import (
    BookingFeedback,
    IntentCorrection,
    IntentCorrectionResult,
    QueryContext,
    QueryRequest,
    QueryResponse,
    RecommendationSource,
    TravelRecommendation,
)
from travelrag.app.models.retrieval import PatternFilters, RAGResult, ResultKind
from travelrag.app.models.schedule import (
    Activity,
    DayPlan,
    DayPlanRequest,
    PlanPreferences,
    TimeSlot,
)
from travelrag.app.models.venue import (
    CorpusBatch,
    LanguageMapping,
    LanguagePattern,
    PatternMetadata,
    SuccessPattern,
    Venue,
)

__all__ = [
    # Common
    "Geo",
    "BudgetTier",
    "GroupType",
    "Pace",
    # Intent
    "TravelIntent",
    "IntentFragment",
    "IntentHints",
    "DateRange",
    # Corpus
    "CorpusBatch",
    "Venue",
    "SuccessPattern",
    "PatternMetadata",
    "LanguagePattern",
    "LanguageMapping",
    # Retrieval
    "RAGResult",
    "ResultKind",
    "PatternFilters",
    # Recommendation
    "TravelRecommendation",
    "RecommendationSource",
    "QueryRequest",
    "QueryContext",
    "QueryResponse",
    "BookingFeedback",
    "IntentCorrection",
    "IntentCorrectionResult",
    # Schedule
    "Activity",
    "TimeSlot",
    "DayPlan",
    "DayPlanRequest",
    "PlanPreferences",
    # Freshness
    "FreshnessResult",
    "ValidationStatus",
    "VenueUpdates",
]

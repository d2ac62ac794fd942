"""Intent models - structured interpretation of a free-text request."""

from datetime import date

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from travelrag.app.models.common import BudgetTier, GroupType, Pace

# Merged intents never report less than this; see merge_fragments
INTENT_CONFIDENCE_FLOOR = 0.5


class DateRange(BaseModel):
    """Travel dates."""

    start: date
    end: date

    @field_validator("end")
    @classmethod
    def validate_end_after_start(cls, v: date, info: ValidationInfo) -> date:
        """Ensure end >= start."""
        if "start" in info.data and v < info.data["start"]:
            raise ValueError("end must be >= start")
        return v


class IntentFragment(BaseModel):
    """Partial intent produced by a single extraction source.

    Fragments are immutable; merging picks fields one by one.
    """

    model_config = ConfigDict(frozen=True)

    destination: str | None = None
    dates: DateRange | None = None
    interests: tuple[str, ...] = ()
    budget_tier: BudgetTier | None = None
    group_type: GroupType | None = None
    pace: Pace | None = None
    confidence: float = Field(0.0, ge=0.0, le=1.0)


class TravelIntent(BaseModel):
    """Resolved intent for a single request."""

    destination: str = ""  # empty means unresolved
    dates: DateRange | None = None
    interests: list[str] = Field(default_factory=list)
    budget_tier: BudgetTier = BudgetTier.medium
    group_type: GroupType = GroupType.solo
    pace: Pace = Pace.moderate
    original_text: str
    confidence: float = Field(..., ge=INTENT_CONFIDENCE_FLOOR, le=1.0)

    @property
    def primary_interest(self) -> str | None:
        return self.interests[0] if self.interests else None


class IntentHints(BaseModel):
    """Caller-supplied preferences that override extracted values."""

    model_config = ConfigDict(populate_by_name=True)

    destination: str | None = None
    interests: list[str] = Field(default_factory=list)
    budget_tier: BudgetTier | None = Field(None, alias="budgetTier")
    group_type: GroupType | None = Field(None, alias="groupType")
    pace: Pace | None = None

"""Schedule models - day plans built from ranked activities."""

from datetime import date, time

from pydantic import BaseModel, ConfigDict, Field, model_validator

from travelrag.app.models.common import BudgetTier, Geo, GroupType, Pace


class Activity(BaseModel):
    """Something that can fill a time slot."""

    name: str
    type: str
    address: str = ""
    duration_min: int = Field(60, ge=0)
    price: str = ""
    open_time: time | None = None
    close_time: time | None = None
    booking: str | None = None
    needs_reservation: bool = False
    coordinates: Geo | None = None


class TimeSlot(BaseModel):
    """An activity placed at a time of day."""

    time: time
    activity: Activity
    travel_time_min: int | None = None  # from the previous slot only
    tips: list[str] = Field(default_factory=list)
    fixed: bool = False


class PlanPreferences(BaseModel):
    """Traveller preferences that shape slot selection."""

    pace: Pace = Pace.moderate
    budget: BudgetTier = BudgetTier.medium
    interests: list[str] = Field(default_factory=list)
    group_type: GroupType = GroupType.solo


class DayPlan(BaseModel):
    """Plan for a single day."""

    date: date
    day_of_week: str
    slots: list[TimeSlot]
    total_cost: str
    total_cost_eur: int
    walking_distance_km: float
    warnings: list[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_slot_order(self) -> "DayPlan":
        """Ensure slots are strictly ordered by time."""
        for i in range(len(self.slots) - 1):
            current = self.slots[i].time
            following = self.slots[i + 1].time
            if current >= following:
                raise ValueError(f"Slots out of order: {current} >= {following} on {self.date}")
        return self


class DayPlanRequest(BaseModel):
    """Request body for planning a day from explicit activities."""

    model_config = ConfigDict(populate_by_name=True)

    date: date
    activities: list[Activity]
    fixed_bookings: list[TimeSlot] = Field(default_factory=list, alias="fixedBookings")
    preferences: PlanPreferences = Field(default_factory=PlanPreferences)

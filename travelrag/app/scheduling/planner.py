"""Day scheduler - places ranked activities into a pace template.

Fixed bookings keep their times unconditionally. Each remaining template
slot takes the best unused activity that fits the slot type, is open at
that time, and matches the budget; ties on interest score keep input
order. Slots nobody fits are left out of the plan.
"""

import logging
from datetime import date, time

from travelrag.app.config import Settings
from travelrag.app.models.schedule import Activity, DayPlan, PlanPreferences, TimeSlot
from travelrag.app.scheduling import rules
from travelrag.app.scheduling.geo import TravelEstimator
from travelrag.app.scheduling.templates import template_for

logger = logging.getLogger(__name__)

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def day_of_week(day: date) -> str:
    return WEEKDAYS[day.weekday()]


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def _activity_key(activity: Activity) -> tuple[str, str]:
    return (activity.name.lower(), activity.type)


class DayScheduler:
    """Builds a DayPlan for a single date."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._travel = TravelEstimator(settings)

    def select_activity(
        self,
        slot_type: str,
        at: time,
        weekday: str,
        candidates: list[Activity],
        preferences: PlanPreferences,
    ) -> Activity | None:
        """Best-matching activity for one template slot, or None."""
        suitable = [
            activity
            for activity in candidates
            if rules.slot_accepts(slot_type, activity.type)
            and rules.is_open_at(activity, at, weekday)
            and rules.matches_budget(activity.price, preferences.budget)
        ]
        if not suitable:
            return None

        # sorted() is stable, so equal scores keep input order
        ranked = sorted(
            suitable, key=lambda a: -rules.interest_score(a, preferences.interests)
        )
        return ranked[0]

    def create_day_plan(
        self,
        day: date,
        available_activities: list[Activity],
        fixed_bookings: list[TimeSlot] | None = None,
        preferences: PlanPreferences | None = None,
    ) -> DayPlan:
        """Create a time-ordered plan for ``day``.

        Args:
            day: Date being planned
            available_activities: Candidate activities in ranked order
            fixed_bookings: Externally fixed slots (flights, reservations)
            preferences: Pace, budget and interests

        Returns:
            DayPlan with travel times, totals and advisory warnings

        Raises:
            ValueError: If two fixed bookings share a minute
        """
        preferences = preferences or PlanPreferences()
        fixed_bookings = fixed_bookings or []
        weekday = day_of_week(day)

        slots: list[TimeSlot] = []
        planned_minutes: set[int] = set()
        used: set[tuple[str, str]] = set()

        for booking in fixed_bookings:
            if _minutes(booking.time) in planned_minutes:
                raise ValueError(f"Two fixed bookings at {booking.time.strftime('%H:%M')}")
            planned_minutes.add(_minutes(booking.time))
            used.add(_activity_key(booking.activity))
            slots.append(booking.model_copy(update={"fixed": True, "travel_time_min": None}))

        for template_slot in template_for(preferences.pace):
            if _minutes(template_slot.time) in planned_minutes:
                continue

            candidates = [a for a in available_activities if _activity_key(a) not in used]
            activity = self.select_activity(
                template_slot.slot_type, template_slot.time, weekday, candidates, preferences
            )
            if activity is None:
                logger.debug(f"No activity fits {template_slot.slot_type} at {template_slot.time}")
                continue

            slots.append(
                TimeSlot(
                    time=template_slot.time,
                    activity=activity,
                    tips=rules.generate_tips(activity, template_slot.time),
                )
            )
            planned_minutes.add(_minutes(template_slot.time))
            used.add(_activity_key(activity))

        slots.sort(key=lambda s: s.time)
        distances = self._add_travel_times(slots)
        total_eur = sum(rules.parse_price_eur(s.activity.price) for s in slots)

        return DayPlan(
            date=day,
            day_of_week=weekday,
            slots=slots,
            total_cost=f"€{total_eur}",
            total_cost_eur=total_eur,
            walking_distance_km=round(sum(distances), 1),
            warnings=self._warnings(slots, weekday),
        )

    def _add_travel_times(self, slots: list[TimeSlot]) -> list[float]:
        """Set travel time on each slot from its predecessor; return leg distances."""
        distances: list[float] = []
        for i in range(1, len(slots)):
            distance = self._travel.distance_km(slots[i - 1].activity, slots[i].activity)
            slots[i].travel_time_min = self._travel.travel_minutes(distance)
            distances.append(distance)
        return distances

    def _warnings(self, slots: list[TimeSlot], weekday: str) -> list[str]:
        warnings: list[str] = []

        closure = rules.DAY_CLOSURE_WARNINGS.get(weekday)
        if closure:
            keyword, message = closure
            if any(keyword in s.activity.type.lower() for s in slots):
                warnings.append(message)

        for i in range(1, len(slots)):
            previous, current = slots[i - 1], slots[i]
            previous_end = _minutes(previous.time) + previous.activity.duration_min
            if previous_end + (current.travel_time_min or 0) > _minutes(current.time):
                warnings.append(
                    f"Tight timing between {previous.activity.name} and {current.activity.name}"
                )

        if any(rules.is_outdoor(s.activity) for s in slots):
            warnings.append(rules.WEATHER_WARNING)

        return warnings

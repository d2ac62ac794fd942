"""Rule tables used by the day scheduler.

Each policy lives in a named table with a small function that applies it,
so a policy change is a one-line diff with a matching unit test.
"""

import re
from datetime import time

from travelrag.app.models.common import BudgetTier
from travelrag.app.models.schedule import Activity

# --- Slot compatibility -------------------------------------------------------

# Slot-type keyword -> activity-type keywords that may fill it.
# Slot types matching no keyword accept any activity.
SLOT_ACTIVITY_TYPES: dict[str, tuple[str, ...]] = {
    "breakfast": ("breakfast", "cafe"),
    "lunch": ("restaurant", "lunch"),
    "dinner": ("restaurant", "dinner"),
    "coffee": ("cafe", "coffee"),
    "nightlife": ("club", "bar"),
}


def slot_accepts(slot_type: str, activity_type: str) -> bool:
    activity_type = activity_type.lower()
    for keyword, accepted in SLOT_ACTIVITY_TYPES.items():
        if keyword in slot_type and not any(a in activity_type for a in accepted):
            return False
    return True


# --- Budget -------------------------------------------------------------------

# A low-budget traveller needs one of these in the price text
LOW_BUDGET_MARKERS = ("free", "€5", "€10", "€15", "budget")
# A medium-budget traveller is put off by these words
MEDIUM_BUDGET_EXCLUSIONS = ("luxury",)
# ...and by any euro amount at or above this
MEDIUM_BUDGET_CEILING_EUR = 100

_EURO_AMOUNT_RE = re.compile(r"€\s?(\d+)")


def _has_marker(text: str, marker: str) -> bool:
    """Substring match; euro amounts must not continue with another digit."""
    if marker.startswith("€"):
        return re.search(re.escape(marker) + r"(?!\d)", text) is not None
    return marker in text


def euro_amounts(price: str) -> list[int]:
    return [int(amount) for amount in _EURO_AMOUNT_RE.findall(price)]


def matches_budget(price: str, budget: BudgetTier) -> bool:
    price = price.lower()
    if budget == BudgetTier.low:
        return any(_has_marker(price, m) for m in LOW_BUDGET_MARKERS)
    if budget == BudgetTier.medium:
        if any(m in price for m in MEDIUM_BUDGET_EXCLUSIONS):
            return False
        return all(amount < MEDIUM_BUDGET_CEILING_EUR for amount in euro_amounts(price))
    return True


# --- Prices -------------------------------------------------------------------


def parse_price_eur(price: str) -> int:
    """First euro amount in a price string; 0 when there is none.

    Unparseable prices count as 0, so totals undercount rather than guess.
    """
    match = _EURO_AMOUNT_RE.search(price)
    return int(match.group(1)) if match else 0


# --- Opening hours ------------------------------------------------------------

# Venues closed on given weekdays regardless of their listed hours
FLAGSHIP_CLOSURES: dict[str, frozenset[str]] = {
    "berghain": frozenset({"Monday"}),
}


def closed_by_override(name: str, day_of_week: str) -> bool:
    lowered = name.lower()
    return any(
        venue in lowered and day_of_week in days for venue, days in FLAGSHIP_CLOSURES.items()
    )


def _minutes(t: time) -> int:
    return t.hour * 60 + t.minute


def is_open_at(activity: Activity, at: time, day_of_week: str) -> bool:
    """Whether the activity can be visited at ``at`` on ``day_of_week``.

    Activities without listed hours are always open. A close time earlier
    than the open time marks an overnight venue.
    """
    if closed_by_override(activity.name, day_of_week):
        return False

    if activity.open_time is None or activity.close_time is None:
        return True

    now = _minutes(at)
    opens = _minutes(activity.open_time)
    closes = _minutes(activity.close_time)

    if closes < opens:
        return now >= opens or now <= closes
    return opens <= now <= closes


_HOURS_RE = re.compile(r"(\d{1,2}):(\d{2})\s*[-–]\s*(\d{1,2}):(\d{2})")


def parse_opening_hours(hours: str | None) -> tuple[time, time] | None:
    """Parse "HH:MM-HH:MM" (first range found); None if absent or unparseable."""
    if not hours:
        return None
    match = _HOURS_RE.search(hours)
    if not match:
        return None
    oh, om, ch, cm = (int(g) for g in match.groups())
    if oh > 23 or ch > 24 or om > 59 or cm > 59:
        return None
    # 24:00 means midnight at close
    return time(oh, om), time(0, cm) if ch == 24 else time(ch, cm)


# --- Interest scoring ---------------------------------------------------------

INTEREST_MATCH_POINTS = 10


def interest_score(activity: Activity, interests: list[str]) -> int:
    """10 points per interest found in the activity's name or type."""
    name = activity.name.lower()
    kind = activity.type.lower()
    score = 0
    for interest in interests:
        keyword = interest.lower()
        if keyword and (keyword in kind or keyword in name):
            score += INTEREST_MATCH_POINTS
    return score


# --- Warnings -----------------------------------------------------------------

# Weekday -> (activity-type keyword, warning)
DAY_CLOSURE_WARNINGS: dict[str, tuple[str, str]] = {
    "Monday": ("museum", "Many museums closed on Mondays - verify opening hours"),
    "Sunday": ("shop", "Many shops closed on Sundays in Germany"),
}

OUTDOOR_TYPES = ("park", "market", "outdoor")
WEATHER_WARNING = "Check weather forecast for outdoor activities"


def is_outdoor(activity: Activity) -> bool:
    kind = activity.type.lower()
    return any(t in kind for t in OUTDOOR_TYPES)


# --- Tips ---------------------------------------------------------------------

FLAGSHIP_CLUB_TIPS: dict[str, list[str]] = {
    "berghain": [
        "Dress code: Black/techno style",
        "Don't be too drunk or too sober",
        "Go in small groups or alone",
        "Rejection is common - have backup plan",
    ],
}


def generate_tips(activity: Activity, at: time) -> list[str]:
    """Practical tips for visiting ``activity`` at ``at``."""
    tips: list[str] = []
    hour = at.hour
    kind = activity.type.lower()
    name = activity.name.lower()

    if "restaurant" in kind:
        if 12 <= hour <= 14:
            tips.append("Lunch rush - reservation recommended")
        if 19 <= hour <= 21:
            tips.append("Peak dinner time - expect wait without reservation")

    if "club" in kind:
        flagship = next((t for v, t in FLAGSHIP_CLUB_TIPS.items() if v in name), None)
        tips.extend(flagship if flagship else ["Check dress code in advance"])

    if "museum" in kind:
        tips.append("Audio guide available")
        if 10 <= hour <= 16:
            tips.append("Peak hours - skip-the-line ticket worth it")

    if "cafe" in kind:
        tips.append("Good wifi for remote work")
        tips.append("Power outlets available")

    return tips

"""Tests for the scheduler's rule tables, one rule at a time."""

from datetime import time

import pytest

from travelrag.app.models.common import BudgetTier
from travelrag.app.models.schedule import Activity
from travelrag.app.scheduling import rules


def activity(name: str = "Spot", type: str = "club", **kwargs: object) -> Activity:
    """Helper to create test activity."""
    return Activity(name=name, type=type, **kwargs)  # type: ignore[arg-type]


class TestSlotCompatibility:
    """Slot type -> activity type."""

    @pytest.mark.parametrize(
        ("slot", "kind", "expected"),
        [
            ("breakfast", "cafe", True),
            ("breakfast", "Breakfast spot", True),
            ("breakfast", "restaurant", False),
            ("lunch", "restaurant", True),
            ("quick_lunch", "restaurant", True),
            ("dinner", "club", False),
            ("coffee", "cafe", True),
            ("nightlife", "bar", True),
            ("nightlife", "museum", False),
            ("morning_activity", "museum", True),
            ("late_night_food", "club", True),
        ],
    )
    def test_slot_accepts(self, slot: str, kind: str, expected: bool) -> None:
        assert rules.slot_accepts(slot, kind) is expected


class TestBudget:
    """Free-text price strings against the budget tier."""

    @pytest.mark.parametrize(
        ("price", "expected"),
        [("Free", True), ("€10-15", True), ("€5", True), ("Budget friendly", True), ("€50", False), ("", False)],
    )
    def test_low(self, price: str, expected: bool) -> None:
        assert rules.matches_budget(price, BudgetTier.low) is expected

    @pytest.mark.parametrize(
        ("price", "expected"),
        [
            ("€20-40", True),
            ("", True),
            ("€99", True),
            ("€100+", False),
            ("€200", False),
            ("€150", False),
            ("€1000", False),
            ("€2000 tasting", False),
            ("€80-€120", False),
            ("Luxury tasting", False),
        ],
    )
    def test_medium(self, price: str, expected: bool) -> None:
        assert rules.matches_budget(price, BudgetTier.medium) is expected

    def test_high_and_luxury_accept_everything(self) -> None:
        assert rules.matches_budget("€200", BudgetTier.high)
        assert rules.matches_budget("Free", BudgetTier.luxury)

    def test_euro_marker_needs_digit_boundary(self) -> None:
        """"€5" must not match "€50"."""
        assert not rules.matches_budget("€50", BudgetTier.low)
        assert not rules.matches_budget("€150", BudgetTier.low)


class TestPrices:
    @pytest.mark.parametrize(
        ("price", "expected"),
        [("€15", 15), ("€10-15", 10), ("Entry € 20", 20), ("Free", 0), ("varies", 0), ("", 0)],
    )
    def test_parse_price_eur(self, price: str, expected: int) -> None:
        assert rules.parse_price_eur(price) == expected

    def test_euro_amounts_finds_every_amount(self) -> None:
        assert rules.euro_amounts("€50-€120, tasting € 2000") == [50, 120, 2000]
        assert rules.euro_amounts("Free") == []


class TestOpeningHours:
    """Open-hours checks at an exact time."""

    def test_no_hours_means_open(self) -> None:
        assert rules.is_open_at(activity(), time(4, 0), "Tuesday")

    def test_regular_hours(self) -> None:
        museum = activity(type="museum", open_time=time(10, 0), close_time=time(18, 0))
        assert rules.is_open_at(museum, time(10, 0), "Tuesday")
        assert rules.is_open_at(museum, time(18, 0), "Tuesday")
        assert not rules.is_open_at(museum, time(9, 59), "Tuesday")

    def test_overnight_venue(self) -> None:
        club = activity(open_time=time(23, 0), close_time=time(6, 0))
        assert rules.is_open_at(club, time(1, 0), "Saturday")
        assert rules.is_open_at(club, time(23, 30), "Saturday")
        assert not rules.is_open_at(club, time(12, 0), "Saturday")

    def test_flagship_override_beats_hours(self) -> None:
        berghain = activity("Berghain", open_time=time(0, 0), close_time=time(23, 59))
        assert not rules.is_open_at(berghain, time(12, 0), "Monday")
        assert rules.is_open_at(berghain, time(12, 0), "Sunday")

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("10:00-18:00", (time(10, 0), time(18, 0))),
            ("Fri-Sat 23:00 – 06:00", (time(23, 0), time(6, 0))),
            ("08:00-24:00", (time(8, 0), time(0, 0))),
            ("Mon closed", None),
            (None, None),
            ("25:00-26:00", None),
        ],
    )
    def test_parse_opening_hours(self, text: str | None, expected: object) -> None:
        assert rules.parse_opening_hours(text) == expected


def test_interest_score_counts_name_and_type_matches() -> None:
    techno = activity("Techno Bunker", type="club")
    assert rules.interest_score(techno, ["techno", "club", "art"]) == 20
    assert rules.interest_score(techno, []) == 0


class TestTips:
    def test_restaurant_rush_hours(self) -> None:
        restaurant = activity(type="restaurant")
        assert rules.generate_tips(restaurant, time(13, 0)) == ["Lunch rush - reservation recommended"]
        assert rules.generate_tips(restaurant, time(16, 0)) == []

    def test_flagship_club_tips(self) -> None:
        tips = rules.generate_tips(activity("Berghain"), time(23, 30))
        assert "Dress code: Black/techno style" in tips
        assert rules.generate_tips(activity("Other Club"), time(23, 30)) == [
            "Check dress code in advance"
        ]

    def test_cafe_tips(self) -> None:
        assert "Good wifi for remote work" in rules.generate_tips(activity(type="cafe"), time(9, 0))


def test_outdoor_detection() -> None:
    assert rules.is_outdoor(activity(type="Flea market"))
    assert not rules.is_outdoor(activity(type="museum"))

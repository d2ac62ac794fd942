"""Pace-dependent day templates: ordered (time, slot type) pairs."""

from datetime import time
from typing import NamedTuple

from travelrag.app.models.common import Pace


class TemplateSlot(NamedTuple):
    time: time
    slot_type: str


PACE_TEMPLATES: dict[Pace, list[TemplateSlot]] = {
    Pace.relaxed: [
        TemplateSlot(time(9, 30), "breakfast"),
        TemplateSlot(time(11, 0), "morning_activity"),
        TemplateSlot(time(13, 30), "lunch"),
        TemplateSlot(time(15, 30), "afternoon_activity"),
        TemplateSlot(time(17, 30), "coffee"),
        TemplateSlot(time(19, 30), "dinner"),
        TemplateSlot(time(22, 0), "evening_activity"),
    ],
    Pace.moderate: [
        TemplateSlot(time(9, 0), "breakfast"),
        TemplateSlot(time(10, 30), "morning_activity"),
        TemplateSlot(time(13, 0), "lunch"),
        TemplateSlot(time(14, 30), "afternoon_activity"),
        TemplateSlot(time(17, 0), "coffee"),
        TemplateSlot(time(19, 0), "dinner"),
        TemplateSlot(time(21, 30), "evening_activity"),
        TemplateSlot(time(23, 30), "nightlife"),
    ],
    Pace.intensive: [
        TemplateSlot(time(8, 0), "breakfast"),
        TemplateSlot(time(9, 30), "morning_activity"),
        TemplateSlot(time(12, 0), "quick_lunch"),
        TemplateSlot(time(13, 0), "afternoon_activity_1"),
        TemplateSlot(time(15, 30), "afternoon_activity_2"),
        TemplateSlot(time(17, 30), "coffee"),
        TemplateSlot(time(19, 0), "dinner"),
        TemplateSlot(time(21, 0), "evening_activity"),
        TemplateSlot(time(23, 0), "nightlife"),
        TemplateSlot(time(2, 0), "late_night_food"),
    ],
}


def template_for(pace: Pace) -> list[TemplateSlot]:
    return PACE_TEMPLATES[pace]

"""Common types and enums shared across all models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CorpusModel(BaseModel):
    """Base for records stored in the vector corpus.

    Corpus metadata is written in camelCase; Python code uses snake_case.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Geo(CorpusModel):
    """Geographic coordinates (WGS84)."""

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)


class BudgetTier(str, Enum):
    """Spending tier of a traveller or a pattern."""

    low = "low"
    medium = "medium"
    high = "high"
    luxury = "luxury"


class GroupType(str, Enum):
    """Who is travelling."""

    solo = "solo"
    couple = "couple"
    friends = "friends"
    family = "family"


class Pace(str, Enum):
    """How packed a day should be."""

    relaxed = "relaxed"
    moderate = "moderate"
    intensive = "intensive"

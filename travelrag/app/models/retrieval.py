"""Retrieval models - scored hits from the vector corpus."""

from enum import Enum

from pydantic import BaseModel, Field

from travelrag.app.models.common import BudgetTier
from travelrag.app.models.venue import LanguagePattern, SuccessPattern


class ResultKind(str, Enum):
    """Which corpus collection a hit came from."""

    pattern = "success_pattern"
    phrase = "language_pattern"


class RAGResult(BaseModel):
    """A single retrieval hit."""

    type: ResultKind
    content: SuccessPattern | LanguagePattern
    confidence: float = Field(..., ge=0.0, le=1.0)  # index similarity
    source: str


class PatternFilters(BaseModel):
    """Exact-match metadata filters for pattern retrieval."""

    destination: str | None = None
    budget_tier: BudgetTier | None = None
    category: str | None = None

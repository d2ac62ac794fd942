"""Freshness models - whether a venue is still operating."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from travelrag.app.models.venue import Venue


class ValidationStatus(str, Enum):
    """Operating status of a venue."""

    open = "open"
    closed = "closed"
    uncertain = "uncertain"


class VenueUpdates(BaseModel):
    """Fields that changed since the venue entered the corpus."""

    address: str | None = None
    price_range: str | None = None
    website: str | None = None
    opening_hours: str | None = None


class FreshnessResult(BaseModel):
    """Outcome of validating one venue."""

    venue: Venue
    is_valid: bool
    status: ValidationStatus
    confidence: float = Field(..., ge=0.0, le=1.0)
    checked_at: datetime
    updated_fields: VenueUpdates | None = None

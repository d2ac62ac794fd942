"""Venue freshness validator.

Combines a website reachability probe with an AI status check to decide
whether a recommended venue is still operating. Results are cached per
venue for the configured TTL.
"""

import logging
from datetime import timedelta
from typing import Any

import httpx

from travelrag.app.config import Settings, get_settings
from travelrag.app.errors import CompletionError
from travelrag.app.freshness.cache import Clock, FreshnessCache, utc_now
from travelrag.app.llm.client import CompletionClient
from travelrag.app.llm.prompts import build_venue_status_prompt
from travelrag.app.models.freshness import FreshnessResult, ValidationStatus, VenueUpdates
from travelrag.app.models.venue import Venue
from travelrag.app.utils.metrics import freshness_cache_hits_total, freshness_status_total

logger = logging.getLogger(__name__)

NON_URL_WEBSITES = ("Walk-in only", "Pay at door")
ICONIC_VENUES = ("berghain", "golden gai")
ICONIC_CONFIDENCE = 0.9
NEUTRAL_CONFIDENCE = 0.5
REACHABLE_BONUS = 0.3
UNREACHABLE_PENALTY = 0.2
UNCERTAIN_NOTE = "Status uncertain - verify before visiting"
USER_AGENT = "Mozilla/5.0 (compatible; VenueValidator/1.0)"


def cache_key(venue: Venue) -> str:
    return f"{venue.name}_{venue.address or venue.type}"


def is_iconic(venue: Venue) -> bool:
    name = venue.name.lower()
    return any(iconic in name for iconic in ICONIC_VENUES)


def parse_status_answer(data: dict[str, Any]) -> tuple[bool | None, float, VenueUpdates | None]:
    """Read ``stillOpen``, ``confidence`` and ``updates`` from the AI answer."""
    still_open = data.get("stillOpen")
    if not isinstance(still_open, bool):
        still_open = None

    try:
        confidence = float(data.get("confidence", 0.0))
    except (TypeError, ValueError):
        confidence = 0.0
    confidence = min(max(confidence, 0.0), 1.0)

    updates = None
    raw_updates = data.get("updates")
    if isinstance(raw_updates, dict):
        updates = VenueUpdates(
            address=raw_updates.get("address") or None,
            price_range=raw_updates.get("priceRange") or None,
            website=raw_updates.get("website") or None,
            opening_hours=raw_updates.get("hours") or None,
        )
    return still_open, confidence, updates


class FreshnessValidator:
    """Checks whether venues are still open."""

    def __init__(
        self,
        completion: CompletionClient,
        http_client: httpx.AsyncClient | None = None,
        clock: Clock = utc_now,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self._completion = completion
        self._http_client = http_client
        self._clock = clock
        self._timeout = settings.freshness_http_timeout_s
        self._cache: FreshnessCache[FreshnessResult] = FreshnessCache(
            ttl=timedelta(hours=settings.freshness_ttl_hours), clock=clock
        )

    async def check_website(self, url: str) -> bool:
        """HEAD the venue website; 2xx and 3xx count as reachable."""
        if not url or url in NON_URL_WEBSITES:
            return True

        close_client = False
        client = self._http_client
        if client is None:
            client = httpx.AsyncClient(timeout=self._timeout)
            close_client = True

        try:
            response = await client.head(url, headers={"User-Agent": USER_AGENT})
            return 200 <= response.status_code < 400
        except httpx.HTTPError as e:
            logger.info(f"Website check failed for {url}: {e}")
            return False
        finally:
            if close_client:
                await client.aclose()

    async def check_status(self, venue: Venue) -> dict[str, Any]:
        """Ask the completion client whether the venue still operates."""
        prompt = build_venue_status_prompt(venue, self._clock().date())
        try:
            return await self._completion.complete_structured(
                prompt, temperature=0.0, max_tokens=200
            )
        except CompletionError as e:
            logger.warning(f"Status check failed for {venue.name}: {e}")
            return {"stillOpen": None, "confidence": 0.0}

    def combine(
        self, venue: Venue, website_reachable: bool, answer: dict[str, Any]
    ) -> FreshnessResult:
        """Combine the website and AI signals into one result."""
        confidence = NEUTRAL_CONFIDENCE
        if venue.website and venue.website.startswith("http"):
            confidence += REACHABLE_BONUS if website_reachable else -UNREACHABLE_PENALTY

        still_open, ai_confidence, updates = parse_status_answer(answer)
        if still_open is True:
            confidence = max(confidence, ai_confidence)
            status, is_valid = ValidationStatus.open, True
        elif still_open is False:
            confidence = ai_confidence
            status, is_valid = ValidationStatus.closed, False
        else:
            status, is_valid = ValidationStatus.uncertain, confidence > NEUTRAL_CONFIDENCE

        if is_iconic(venue):
            confidence = max(confidence, ICONIC_CONFIDENCE)
            status, is_valid = ValidationStatus.open, True

        return FreshnessResult(
            venue=venue,
            is_valid=is_valid,
            status=status,
            confidence=min(max(confidence, 0.0), 1.0),
            checked_at=self._clock(),
            updated_fields=updates,
        )

    async def validate(self, venue: Venue) -> FreshnessResult:
        """Validate a single venue, using the cache when fresh."""
        key = cache_key(venue)
        cached = self._cache.get(key)
        if cached is not None:
            freshness_cache_hits_total.inc()
            logger.debug(f"Using cached validation for {venue.name}")
            return cached

        website_reachable = False
        if venue.website:
            website_reachable = await self.check_website(venue.website)
        answer = await self.check_status(venue)

        result = self.combine(venue, website_reachable, answer)
        self._cache.set(key, result)
        freshness_status_total.labels(status=result.status.value).inc()

        if result.status == ValidationStatus.closed:
            logger.info(f"Venue {venue.name} appears closed")
        return result

    async def validate_venues(self, venues: list[Venue]) -> list[Venue]:
        """Validate venues one by one, dropping closed ones.

        A failure while validating one venue marks it uncertain with zero
        confidence and does not affect the rest of the batch.
        """
        validated: list[Venue] = []
        for venue in venues:
            try:
                result = await self.validate(venue)
            except Exception as e:
                logger.warning(f"Validation of {venue.name} failed: {e}")
                result = FreshnessResult(
                    venue=venue,
                    is_valid=False,
                    status=ValidationStatus.uncertain,
                    confidence=0.0,
                    checked_at=self._clock(),
                )

            if result.status == ValidationStatus.closed:
                continue

            updated = apply_updates(venue, result.updated_fields)
            if result.status == ValidationStatus.uncertain:
                updated = updated.model_copy(
                    update={"special_notes": [*updated.special_notes, UNCERTAIN_NOTE]}
                )
            validated.append(updated)

        logger.info(f"Validated: {len(validated)}/{len(venues)} venues are valid")
        return validated

    def stats(self) -> dict[str, int]:
        return {"cache_size": len(self._cache)}


def apply_updates(venue: Venue, updates: VenueUpdates | None) -> Venue:
    """Copy fresh field values onto the venue."""
    if updates is None:
        return venue
    changes = updates.model_dump(exclude_none=True)
    if not changes:
        return venue
    return venue.model_copy(update=changes)

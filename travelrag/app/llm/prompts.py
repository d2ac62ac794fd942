"""Prompt templates for intent extraction, reasoning and venue status checks.

The colloquial-cue tables in INTENT_PROMPT are product policy; keep them
word for word so extraction behaves the same across model upgrades.
"""

from datetime import date

from travelrag.app.models.intent import TravelIntent
from travelrag.app.models.venue import Venue

INTENT_PROMPT = """
Extract travel intent from this message. Return JSON only:

Message: "{message}"

Extract:
{{
  "destination": "city/country name or null",
  "dates": {{"start": "YYYY-MM-DD", "end": "YYYY-MM-DD"}} or null,
  "interests": ["array", "of", "interests"],
  "budgetTier": "low|medium|high|luxury",
  "groupType": "solo|couple|friends|family",
  "pace": "relaxed|moderate|intensive",
  "confidence": 0.0-1.0
}}

Budget indicators:
- "broke", "budget", "cheap" = low
- "reasonable", "moderate" = medium
- "nice", "good" = high
- "luxury", "best", "splurge" = luxury

Group indicators:
- "I", "me", "solo" = solo
- "we", "my partner", "couple" = couple
- "friends", "group", "us" = friends
- "family", "kids", "children" = family
"""

REASONING_PROMPT = """
Based on successful travel patterns, provide contextual reasoning for these recommendations:

User Request: "{request}"
User Intent: {destination}, {interests}, {budget} budget

Retrieved Successful Venues:
{venues}

Local Tips:
{tips}

Write a brief reasoning (2-3 sentences) explaining WHY these venues match their request and what makes them successful choices. Be specific about the connection to their interests and budget.
"""

VENUE_STATUS_PROMPT = """
Current date: {today}

Is this venue still open and operating?
Venue: {name}
Address: {address}
Type: {type}

Provide:
1. Is it still open? (yes/no/uncertain)
2. Any changes to address, hours, or prices?
3. Confidence level (0-1)

Return JSON:
{{
  "stillOpen": true/false/null,
  "confidence": 0.0-1.0,
  "lastKnownStatus": "description",
  "updates": {{
    "address": "new address if changed",
    "hours": "current hours if known",
    "priceRange": "current prices if changed"
  }}
}}
"""


def build_intent_prompt(message: str) -> str:
    return INTENT_PROMPT.format(message=message)


def build_reasoning_prompt(
    request: str, intent: TravelIntent, venues: list[Venue], tips: list[str]
) -> str:
    """Build the explanation prompt; only the first three tips are included."""
    venue_lines = "\n".join(
        f"{v.name} ({v.type}) - {v.price_range} - {v.address or 'location TBD'}" for v in venues
    )
    return REASONING_PROMPT.format(
        request=request,
        destination=intent.destination,
        interests=", ".join(intent.interests),
        budget=intent.budget_tier.value,
        venues=venue_lines,
        tips="\n".join(tips[:3]),
    )


def build_venue_status_prompt(venue: Venue, today: date) -> str:
    return VENUE_STATUS_PROMPT.format(
        today=today.isoformat(),
        name=venue.name,
        address=venue.address or "Unknown",
        type=venue.type,
    )

"""Recommendation endpoints - POST /rag/query, /rag/bookings, /rag/day-plan,
/rag/patterns and /rag/intent-corrections."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from travelrag.app.errors import EmbeddingError, QueryFailedError, VectorIndexError
from travelrag.app.models.recommendation import (
    BookingFeedback,
    IntentCorrection,
    IntentCorrectionResult,
    QueryRequest,
    QueryResponse,
)
from travelrag.app.models.schedule import DayPlan, DayPlanRequest
from travelrag.app.models.venue import CorpusBatch
from travelrag.app.orchestration.service import RecommendationService, get_service

router = APIRouter(prefix="/rag", tags=["rag"])
logger = logging.getLogger(__name__)


@router.post("/query", response_model=QueryResponse)
async def query(
    request: QueryRequest,
    service: Annotated[RecommendationService, Depends(get_service)],
) -> QueryResponse:
    """Answer a free-text travel request with concrete venues.

    Raises:
        HTTPException: 502 if pattern retrieval failed
    """
    hints = request.context.user_preferences if request.context else None
    try:
        return await service.answer_query(request.user_message, hints)
    except QueryFailedError as e:
        logger.error(f"Query failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "retrieval_failed", "message": str(e)},
        ) from e


@router.post("/bookings", status_code=status.HTTP_202_ACCEPTED)
async def record_booking(
    feedback: BookingFeedback,
    service: Annotated[RecommendationService, Depends(get_service)],
) -> dict[str, str]:
    """Accept booking feedback for learning."""
    service.record_booking(
        feedback.query, feedback.intent, feedback.booked_venue, feedback.satisfaction
    )
    return {"status": "accepted"}


@router.post("/day-plan", response_model=DayPlan)
async def day_plan(
    request: DayPlanRequest,
    service: Annotated[RecommendationService, Depends(get_service)],
) -> DayPlan:
    """Plan a single day from explicit activities and fixed bookings."""
    try:
        return service.scheduler.create_day_plan(
            request.date, request.activities, request.fixed_bookings, request.preferences
        )
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e


@router.post("/patterns", status_code=status.HTTP_201_CREATED)
async def ingest_patterns(
    batch: CorpusBatch,
    service: Annotated[RecommendationService, Depends(get_service)],
) -> dict[str, int]:
    """Add success and language patterns to the corpus.

    Raises:
        HTTPException: 502 if embedding or storing a pattern failed
    """
    try:
        return await service.ingest(batch)
    except (EmbeddingError, VectorIndexError) as e:
        logger.error(f"Corpus ingest failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "ingest_failed", "message": str(e)},
        ) from e


@router.post("/intent-corrections", response_model=IntentCorrectionResult)
async def correct_intent(
    correction: IntentCorrection,
    service: Annotated[RecommendationService, Depends(get_service)],
) -> IntentCorrectionResult:
    """Learn from a corrected budget tier; returns the learned pattern, if any."""
    try:
        pattern = await service.learn_from_correction(
            correction.text, correction.intent, correction.correct_budget
        )
    except (EmbeddingError, VectorIndexError) as e:
        logger.error(f"Learning from correction failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": "ingest_failed", "message": str(e)},
        ) from e
    return IntentCorrectionResult(learned=pattern is not None, pattern=pattern)

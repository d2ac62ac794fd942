"""Health check endpoint."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from travelrag.app.orchestration.service import RecommendationService, get_service

router = APIRouter()


@router.get("/health")
async def health(
    service: Annotated[RecommendationService, Depends(get_service)],
) -> dict[str, Any]:
    """Liveness plus the retrieval configuration in effect."""
    return {"status": "ok", "config": service.stats()}

"""Prometheus metrics endpoint."""

from fastapi import APIRouter, Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

router = APIRouter()


@router.get("/metrics")
async def metrics() -> Response:
    """Prometheus metrics endpoint.

    Exposes all registered Prometheus metrics including:
    - rag_query_latency_ms{outcome}
    - rag_retrieval_hits_total{collection}
    - rag_stage_degraded_total{stage}
    - freshness_status_total{status}
    """
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)

"""FastAPI application."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from travelrag.app.api.routes.health import router as health_router
from travelrag.app.api.routes.metrics import router as metrics_router
from travelrag.app.api.routes.query import router as query_router
from travelrag.app.orchestration.service import get_service

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Load the seed corpus, when one is configured, before serving."""
    service = get_service()
    seed_path = service.settings.corpus_seed_path
    if seed_path is not None:
        counts = await service.seed_from_file(seed_path)
        logger.info(f"Corpus seeded from {seed_path}: {counts}")
    else:
        logger.info("No corpus seed configured; starting with an empty corpus")
    yield


app = FastAPI(title="Travel RAG API", version="0.1.0", lifespan=lifespan)

# Register routes
app.include_router(health_router, tags=["health"])
app.include_router(metrics_router, tags=["metrics"])
app.include_router(query_router)


@app.get("/")
async def root() -> dict[str, str]:
    """Root endpoint."""
    return {"message": "Travel RAG API", "version": "0.1.0"}

"""Structured logging for pipeline stages."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class StructuredQueryLogger:
    """Structured logger for query pipeline stages."""

    def log_stage(
        self,
        trace_id: str,
        stage: str,
        outcome: str,
        latency_ms: float,
        **details: Any,
    ) -> None:
        """Log one pipeline stage with structured data."""
        log_data: dict[str, Any] = {
            "trace_id": trace_id,
            "stage": stage,
            "outcome": outcome,
            "latency_ms": round(latency_ms, 2),
        }
        log_data.update(details)

        log_msg = f"Query stage: {stage} - {outcome}"

        if outcome == "success":
            logger.info(log_msg, extra={"structured": log_data})
        elif outcome == "degraded":
            logger.warning(log_msg, extra={"structured": log_data})
        else:
            logger.error(log_msg, extra={"structured": log_data})

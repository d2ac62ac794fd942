"""Prometheus metrics for the recommendation pipeline."""

from prometheus_client import Counter, Histogram

rag_query_latency_ms = Histogram(
    "rag_query_latency_ms",
    "End-to-end query latency in milliseconds",
    ["outcome"],
    buckets=[50, 100, 250, 500, 1000, 2000, 4000, 8000, 16000],
)

rag_retrieval_hits_total = Counter(
    "rag_retrieval_hits_total",
    "Retrieval hits above the score threshold",
    ["collection"],
)

rag_fallback_total = Counter(
    "rag_fallback_total",
    "Queries answered with a fallback recommendation",
)

rag_stage_degraded_total = Counter(
    "rag_stage_degraded_total",
    "Pipeline stages that degraded instead of failing",
    ["stage"],
)

freshness_cache_hits_total = Counter(
    "freshness_cache_hits_total",
    "Venue validations served from cache",
)

freshness_status_total = Counter(
    "freshness_status_total",
    "Venue validation outcomes",
    ["status"],
)

"""
Client-side metrics for healthboard.

Counters and histograms describing how the backend answers, built on the
idempotent factories in ``healthboard.observability``.
"""

from healthboard.observability import create_counter, create_gauge, create_histogram

# ── Backend queries ──────────────────────────────────────────────

BACKEND_QUERIES = create_counter(
    "healthboard_backend_queries_total",
    "Queries sent to the metrics backend by endpoint and outcome",
    ["endpoint", "outcome"],
)

BACKEND_QUERY_DURATION = create_histogram(
    "healthboard_backend_query_duration_seconds",
    "Round-trip time of metrics backend queries",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
    labelnames=["endpoint"],
)

# ── Dashboard ────────────────────────────────────────────────────

STALE_STATUSES = create_counter(
    "healthboard_stale_statuses_total",
    "Status samples dropped for being older than the staleness window",
)

MONITORED_APIS = create_gauge(
    "healthboard_monitored_apis",
    "APIs with a recent status sample in the last fetch",
)

HISTORY_SOURCE = create_counter(
    "healthboard_history_source_total",
    "Latency history answers by the query strategy that produced them",
    ["source"],
)

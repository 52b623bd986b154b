"""
Prometheus metrics for Stagebot Team Learning observability.

Defines all metrics emitted for monitoring feedback ingestion, pattern
and stats queries, and configuration cascade resolution.
"""

from prometheus_client import Counter, Histogram

# ============================================================================
# Feedback Ingestion Metrics
# ============================================================================

feedback_submitted_total = Counter(
    "stagebot_feedback_submitted_total",
    "Total feedback events stored",
    labelnames=("extension", "helpful"),  # helpful: true/false
)

feedback_validation_failures_total = Counter(
    "stagebot_feedback_validation_failures_total",
    "Total feedback submissions rejected by structural validation",
)

# ============================================================================
# Query Metrics
# ============================================================================

patterns_query_duration_seconds = Histogram(
    "stagebot_patterns_query_duration_seconds",
    "Time taken to scan a partition and aggregate learned patterns",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, float("inf")),
    labelnames=("extension",),
)

patterns_returned = Histogram(
    "stagebot_patterns_returned",
    "Number of learned patterns returned per query",
    buckets=(0, 1, 3, 5, 10, 15, 25, 50, float("inf")),
)

stats_query_duration_seconds = Histogram(
    "stagebot_stats_query_duration_seconds",
    "Time taken to scan the full feedback table and compute statistics",
    buckets=(0.1, 0.5, 1.0, 2.5, 5.0, 10.0, float("inf")),
)

# ============================================================================
# Configuration Cascade Metrics
# ============================================================================

config_layer_loads_total = Counter(
    "stagebot_config_layer_loads_total",
    "Cascade layer load attempts",
    labelnames=("layer", "outcome"),  # outcome: loaded/absent/failed
)

# ============================================================================
# Error Metrics
# ============================================================================

store_errors_total = Counter(
    "stagebot_store_errors_total",
    "Supabase store failures by operation",
    labelnames=("operation",),
)

# ============================================================================
# Hosted Standards Metrics
# ============================================================================

standards_updates_total = Counter(
    "stagebot_standards_updates_total",
    "Attempts to publish a new central standards version",
    labelnames=("outcome",),  # outcome: published/rejected
)

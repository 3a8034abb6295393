"""Prometheus metrics for projection health, entity churn and webhook performance"""

from prometheus_client import Counter, Histogram

# Projection metrics
projection_counter = Counter(
    "cashflow_projection_total",
    "Total cashflow projections computed",
    ["outcome"],  # projected | empty | invalid
)

projection_health_counter = Counter(
    "cashflow_projection_health",
    "Projections by health status",
    ["status"],  # good | warning | danger
)

projection_duration_histogram = Histogram(
    "cashflow_projection_duration_seconds",
    "Time spent computing a projection",
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5],
)

# Entity metrics
entity_change_counter = Counter(
    "cashflow_entity_changes_total",
    "Finance entity mutations",
    ["entity_type", "action"],
)

month_progression_counter = Counter(
    "cashflow_month_progression_total",
    "Future statements promoted or expired by month progression",
    ["kind"],  # promoted | expired
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "webhook_latency_seconds",
    "Change webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "webhook_failures_total",
    "Failed webhook deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_projection(has_data: bool, health_status: str, duration_seconds: float) -> None:
    """Record projection outcome for monitoring empty states and danger rates"""
    projection_counter.labels(outcome="projected" if has_data else "empty").inc()
    projection_duration_histogram.observe(duration_seconds)
    if has_data:
        projection_health_counter.labels(status=health_status).inc()


def record_entity_change(entity_type: str, action: str) -> None:
    entity_change_counter.labels(entity_type=entity_type, action=action).inc()

"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from fastapi import Response
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

# Waitlist membership metrics
waitlist_operations = Counter(
    'waitlist_operations_total',
    'Join/leave attempts against event waitlists',
    ['operation', 'result']  # join/leave, success/<error class>
)

# Lottery metrics
draw_runs = Counter(
    'draw_runs_total',
    'Lottery draw attempts',
    ['result']  # success, rejected, error
)

draw_latency = Histogram(
    'draw_latency_seconds',
    'Time to select and commit a draw',
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

draw_lock_contention = Counter(
    'draw_lock_contention_total',
    'Draw requests rejected because another draw held the event lock'
)

replacement_promotions = Counter(
    'replacement_promotions_total',
    'Replacement pool entrants promoted to winners'
)

# Notification metrics
notifications_dispatched = Counter(
    'notifications_dispatched_total',
    'Notification writes by category and outcome',
    ['category', 'result']  # winner/cancelled, sent/failed/skipped
)

invitation_responses = Counter(
    'invitation_responses_total',
    'Winner accept/decline responses',
    ['response', 'status']
)

# Store metrics
store_errors = Counter(
    'store_errors_total',
    'Persistence failures surfaced as StoreError',
    ['operation']
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_waitlist_operation(operation: str, result: str):
    """Record a join/leave outcome. Result: success or the error class name."""
    waitlist_operations.labels(operation=operation, result=result).inc()


def record_draw(result: str):
    draw_runs.labels(result=result).inc()


def record_notification(category: str, result: str, count: int = 1):
    if count:
        notifications_dispatched.labels(category=category, result=result).inc(count)


def record_store_error(operation: str):
    store_errors.labels(operation=operation).inc()

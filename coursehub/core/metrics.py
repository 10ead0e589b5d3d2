"""Prometheus metric inventory.

Every metric the service exports is declared here; owning modules import
the one they need and increment it at the point of action. Scraped via
GET /metrics.
"""

from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram

# ---------------------------------------------------------------------------
# HTTP metrics (populated by MetricsMiddleware)
# ---------------------------------------------------------------------------

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests by method, endpoint, and status code",
    ["method", "endpoint", "status_code"],
)

REQUEST_DURATION = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0],
)

ACTIVE_REQUESTS = Gauge(
    "http_active_requests",
    "Number of HTTP requests currently being processed",
)

# ---------------------------------------------------------------------------
# Domain metrics
# ---------------------------------------------------------------------------

COURSE_STATUS_TRANSITIONS = Counter(
    "course_status_transitions_total",
    "Course status changes by target status and acting role",
    ["to_status", "actor_role"],
)

ENROLLMENTS_CREATED = Counter(
    "enrollments_created_total",
    "Enrollments created",
)

MODULE_COMPLETIONS = Counter(
    "module_completions_total",
    "Module completion calls by outcome",
    ["result"],  # "new" or "repeat"
)

COURSES_COMPLETED = Counter(
    "courses_completed_total",
    "Enrollments that reached 100% progress for the first time",
)

REVIEWS_SUBMITTED = Counter(
    "reviews_submitted_total",
    "Review upserts by outcome",
    ["result"],  # "created" or "updated"
)

PAYOUTS_RECORDED = Counter(
    "payouts_recorded_total",
    "Payout ledger entries appended",
)

NOTIFICATION_FAILURES = Counter(
    "notification_failures_total",
    "Best-effort notifications that could not be stored",
    ["type"],
)

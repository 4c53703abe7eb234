"""Prometheus metrics for classification outcomes, duplicate suppression and webhook performance"""

from prometheus_client import Counter, Histogram

# Classification metrics
classification_counter = Counter(
    "sms_classification_total",
    "SMS messages classified by the engine",
    ["verdict"],
)

duplicate_counter = Counter(
    "sms_duplicate_suppressed_total",
    "Messages dropped as duplicates",
    ["layer"],  # receive_cache | persisted
)

recorded_counter = Counter(
    "sms_transactions_recorded_total",
    "Transactions written to storage",
    ["direction", "category", "status"],
)

# Webhook metrics
webhook_latency_histogram = Histogram(
    "review_webhook_latency_seconds",
    "Review webhook response time",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0],
)

webhook_failure_counter = Counter(
    "review_webhook_failures_total",
    "Failed review webhook deliveries",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_classification(verdict: str) -> None:
    classification_counter.labels(verdict=verdict).inc()
    if verdict == "rejected_duplicate":
        duplicate_counter.labels(layer="receive_cache").inc()


def record_persisted_duplicate() -> None:
    duplicate_counter.labels(layer="persisted").inc()


def record_transaction(direction: str, category: str, status: str) -> None:
    """Count stored transactions for monitoring spend mix and review backlog"""
    recorded_counter.labels(direction=direction, category=category, status=status).inc()

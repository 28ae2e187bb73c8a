"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_attempts = Counter(
    'booking_attempts_total',
    'Total booking attempts',
    ['status']  # success, rejected, error
)

booking_cancellations = Counter(
    'booking_cancellations_total',
    'Total cancellation attempts',
    ['result']  # success, not_found, error
)

# Package metrics
promo_packages_issued = Counter(
    'promo_packages_issued_total',
    'Free packages created from promo codes',
    ['variant']  # admin, public
)

# Post-commit steps that are allowed to fail
side_effect_failures = Counter(
    'side_effect_failures_total',
    'Best-effort steps that failed after a successful write',
    ['step']  # customer_upsert, notification
)

request_latency = Histogram(
    'request_latency_seconds',
    'HTTP request latency',
    ['path'],
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5]
)


def metrics_endpoint() -> Response:
    """Render the default registry in the Prometheus text format."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


# Convenience functions for instrumentation
def record_booking_attempt(status: str):
    """Record booking attempt. Status: success, rejected, error"""
    booking_attempts.labels(status=status).inc()

def record_cancellation(result: str):
    booking_cancellations.labels(result=result).inc()

def record_promo_package(variant: str):
    promo_packages_issued.labels(variant=variant).inc()

def record_side_effect_failure(step: str):
    side_effect_failures.labels(step=step).inc()

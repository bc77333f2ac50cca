"""
Metrics instrumentation for observability.
Exposes Prometheus-compatible metrics at /metrics endpoint.
"""

import time
from contextlib import contextmanager

from prometheus_client import Counter, Histogram, generate_latest, CONTENT_TYPE_LATEST
from fastapi import Response

# Booking metrics
booking_operations = Counter(
    'booking_operations_total',
    'Booking operations handled',
    ['operation', 'result']  # list/get/create/edit/delete/approve; success, not_found, invalid, error
)

booking_latency = Histogram(
    'booking_operation_latency_seconds',
    'Booking operation latency',
    ['operation'],
    buckets=[0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0]
)

# Database metrics
db_operations = Counter(
    'db_operations_total',
    'Total database operations',
    ['operation']  # read, write, error
)

# Notification metrics
confirmation_emails = Counter(
    'confirmation_emails_total',
    'Confirmation email delivery attempts',
    ['result']  # sent, failed
)


def metrics_endpoint() -> Response:
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST
    )


def record_booking_operation(operation: str, result: str):
    booking_operations.labels(operation=operation, result=result).inc()


def record_db_operation(operation: str):
    """Record database operation. Operation: read, write, error"""
    db_operations.labels(operation=operation).inc()


def record_confirmation_email(sent: bool):
    confirmation_emails.labels(result="sent" if sent else "failed").inc()


@contextmanager
def track_booking_operation(operation: str):
    """
    Time a booking operation and count its outcome.
    Errors carrying a `metric_result` attribute are counted under it.
    """
    start = time.perf_counter()
    try:
        yield
    except Exception as e:
        record_booking_operation(operation, getattr(e, "metric_result", "error"))
        raise
    else:
        record_booking_operation(operation, "success")
    finally:
        booking_latency.labels(operation=operation).observe(time.perf_counter() - start)

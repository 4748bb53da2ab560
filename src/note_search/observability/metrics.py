"""Prometheus metrics for the worker channel."""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import TYPE_CHECKING

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest


if TYPE_CHECKING:
    from collections.abc import Generator


REQUEST_LATENCY = Histogram(
    "note_search_request_latency_seconds",
    "Time spent handling one request on the worker thread",
    ["message"],
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 1.0),
)

REQUEST_COUNT = Counter(
    "note_search_requests_total",
    "Requests handled by the worker thread",
    ["message", "outcome"],
)

PENDING_REQUESTS = Gauge(
    "note_search_pending_requests",
    "Requests submitted but not yet resolved",
)

TRANSPORT_ERRORS = Counter(
    "note_search_transport_errors_total",
    "Failures of the worker boundary itself",
)


@contextmanager
def track_latency(histogram: Histogram, **labels: str) -> Generator[None, None, None]:
    """Context manager to track operation latency."""
    start = time.perf_counter()
    try:
        yield
    finally:
        histogram.labels(**labels).observe(time.perf_counter() - start)


def get_metrics() -> bytes:
    """Generate Prometheus metrics output."""
    return generate_latest()


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST

"""Observability helpers: structured logging, request context and metrics."""

from note_search.observability.context import bind_request_id, get_request_id, request_context
from note_search.observability.logging import JsonFormatter, configure_logging
from note_search.observability.metrics import (
    PENDING_REQUESTS,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    TRANSPORT_ERRORS,
    get_metrics,
    get_metrics_content_type,
    track_latency,
)


__all__ = [
    "PENDING_REQUESTS",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "TRANSPORT_ERRORS",
    "JsonFormatter",
    "bind_request_id",
    "configure_logging",
    "get_metrics",
    "get_metrics_content_type",
    "get_request_id",
    "request_context",
    "track_latency",
]

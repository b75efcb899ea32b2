"""Prometheus metrics instrumentation."""

from __future__ import annotations

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

SEARCH_REQUESTS = Counter(
    "sgw_search_requests_total",
    "Total search operations",
    labelnames=("mode", "status"),
    registry=REGISTRY,
)

SEARCH_LATENCY = Histogram(
    "sgw_search_latency_seconds",
    "Latency of search operations",
    labelnames=("mode",),
    registry=REGISTRY,
)

SEARCH_FAILURES = Counter(
    "sgw_search_failures_total",
    "Failed search operations by failure kind",
    labelnames=("mode", "kind"),
    registry=REGISTRY,
)

RESULTS_RETURNED = Histogram(
    "sgw_search_results",
    "Number of results returned per search",
    labelnames=("mode",),
    buckets=(0, 1, 2, 3, 5, 10, 20),
    registry=REGISTRY,
)


def metrics_response() -> Response:
    """Return Prometheus metrics as an HTTP response."""
    payload = generate_latest(REGISTRY)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "REGISTRY",
    "SEARCH_REQUESTS",
    "SEARCH_LATENCY",
    "SEARCH_FAILURES",
    "RESULTS_RETURNED",
    "metrics_response",
]

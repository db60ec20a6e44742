"""Prometheus metrics instrumentation."""

from __future__ import annotations

from fastapi import Response
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

REQUEST_COUNT = Counter(
    "govs_requests_total",
    "Total HTTP requests",
    labelnames=("endpoint", "method", "status"),
    registry=REGISTRY,
)

REQUEST_LATENCY = Histogram(
    "govs_request_latency_seconds",
    "Latency of HTTP requests",
    labelnames=("endpoint", "method"),
    registry=REGISTRY,
)

SEARCH_LATENCY = Histogram(
    "govs_search_latency_seconds",
    "Time spent in each retrieval strategy",
    labelnames=("strategy",),
    registry=REGISTRY,
)

PAGES_CRAWLED = Counter(
    "govs_pages_crawled_total",
    "Pages fetched and parsed by the crawler",
    labelnames=("source",),
    registry=REGISTRY,
)

CRAWL_ERRORS = Counter(
    "govs_crawl_errors_total",
    "Crawl or fetch branches abandoned after an error",
    labelnames=("source",),
    registry=REGISTRY,
)

INDEX_SIZE = Gauge(
    "govs_index_records",
    "Number of records in the published search index",
    labelnames=("category",),
    registry=REGISTRY,
)

REFRESH_DURATION = Histogram(
    "govs_refresh_duration_seconds",
    "Duration of full fetch-and-index runs",
    registry=REGISTRY,
)


def metrics_response() -> Response:
    """Return Prometheus metrics as an HTTP response."""
    payload = generate_latest(REGISTRY)
    return Response(content=payload, media_type=CONTENT_TYPE_LATEST)


__all__ = [
    "REGISTRY",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "SEARCH_LATENCY",
    "PAGES_CRAWLED",
    "CRAWL_ERRORS",
    "INDEX_SIZE",
    "REFRESH_DURATION",
    "metrics_response",
]

"""Prometheus metrics for monitoring datasource calls."""

from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Histogram

# Custom registry so tests and the /metrics endpoint see only connector metrics
REGISTRY = CollectorRegistry()

# Datasource calls range from fast GraphQL pages to slow REST detail lookups
DATASOURCE_LATENCY_BUCKETS = (
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
    30.0,
    60.0,
)

PAGE_SIZE_BUCKETS = (0, 1, 10, 50, 100, 250, 500, 1000)

page_fetch_total = Counter(
    "connector_page_fetch_total",
    "Total page fetches by entity kind and classified outcome",
    ["entity", "outcome"],
    registry=REGISTRY,
)

page_fetch_duration_seconds = Histogram(
    "connector_page_fetch_duration_seconds",
    "Page fetch duration in seconds, including every datasource call of the page",
    ["entity"],
    buckets=DATASOURCE_LATENCY_BUCKETS,
    registry=REGISTRY,
)

page_records_returned = Histogram(
    "connector_page_records_returned",
    "Number of records returned per page",
    ["entity"],
    buckets=PAGE_SIZE_BUCKETS,
    registry=REGISTRY,
)

datasource_requests_total = Counter(
    "connector_datasource_requests_total",
    "HTTP requests sent to the datasource by surface and response status",
    ["surface", "status"],
    registry=REGISTRY,
)

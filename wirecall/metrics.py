"""Prometheus metrics for dispatches."""
from __future__ import annotations

from prometheus_client import Counter, Histogram

DISPATCH_TOTAL = Counter(
    "wirecall_dispatch_total",
    "Completed dispatches by outcome (success or failure)",
    labelnames=("connector", "outcome"),
)

TRANSPORT_ERRORS = Counter(
    "wirecall_transport_errors_total",
    "Dispatches that received no response",
    labelnames=("connector",),
)

DISPATCH_LATENCY = Histogram(
    "wirecall_dispatch_latency_ms",
    "Transport round trip per dispatch (milliseconds)",
    labelnames=("connector",),
    buckets=(5, 10, 20, 50, 100, 200, 500, 1000, 2000, 5000, 10000),
)

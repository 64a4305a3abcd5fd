"""Prometheus metric definitions for remote BNDES calls."""

from prometheus_client import Counter, Histogram


bndes_requests_total = Counter(
    "bndes_requests_total",
    "Total BNDES API requests that received an HTTP response",
    ["operation", "status_code"],
)
bndes_request_duration_seconds = Histogram(
    "bndes_request_duration_seconds",
    "BNDES API round-trip duration seconds",
    ["operation"],
)
bndes_transport_errors_total = Counter(
    "bndes_transport_errors_total",
    "BNDES API requests that failed before an HTTP response",
    ["operation"],
)

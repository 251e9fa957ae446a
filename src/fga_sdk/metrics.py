"""Prometheus instrumentation for OpenFGA calls."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNTER = Counter(
    "fga_client_requests_total",
    "OpenFGA requests issued by the client",
    ["operation", "outcome"],
)
REQUEST_LATENCY = Histogram(
    "fga_client_request_duration_seconds",
    "OpenFGA request latency",
    ["operation"],
)


def observe_request(operation: str, outcome: str, seconds: float) -> None:
    REQUEST_COUNTER.labels(operation=operation, outcome=outcome).inc()
    REQUEST_LATENCY.labels(operation=operation).observe(seconds)


__all__ = ["REQUEST_COUNTER", "REQUEST_LATENCY", "observe_request"]

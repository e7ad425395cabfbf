"""
network_sdk.tier0_core.metrics
───────────────────────────────
Operation counters and request latency histograms with standard labels.
Exported through the default Prometheus registry.

Minimal stack: prometheus-client
Configure via: NETWORK_METRICS_ENABLED=true|false
"""
from __future__ import annotations

from prometheus_client import Counter, Histogram

from network_sdk.tier0_core.config import get_config

_operations_total = Counter(
    "network_operations_total",
    "Network operations by terminal outcome",
    ["outcome"],
)

_request_duration = Histogram(
    "network_request_duration_seconds",
    "Wall time of one transport round-trip",
    ["method"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 25.0, 30.0),
)


def record_outcome(outcome: str) -> None:
    """
    Count one finished operation.

    Usage:
        record_outcome("success")
        record_outcome(error.kind)
    """
    if get_config().metrics_enabled:
        _operations_total.labels(outcome=outcome).inc()


def observe_request(method: str, seconds: float) -> None:
    if get_config().metrics_enabled:
        _request_duration.labels(method=method).observe(seconds)


__all__ = ["record_outcome", "observe_request"]

"""Prometheus metrics for node traffic and the local response cache."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

__all__ = [
    "NODE_REQUESTS_TOTAL",
    "NODE_RETRIES_TOTAL",
    "NODE_REQUEST_LATENCY",
    "CACHE_REQUESTS_TOTAL",
    "record_node_request",
    "record_node_retry",
    "record_cache_observation",
]

NODE_REQUESTS_TOTAL = Counter(
    "wallet_node_requests_total",
    "Requests issued to the ledger node grouped by endpoint and outcome.",
    ("endpoint", "outcome"),
)

NODE_RETRIES_TOTAL = Counter(
    "wallet_node_retries_total",
    "Transport-level retries issued to the ledger node.",
    ("endpoint",),
)

NODE_REQUEST_LATENCY = Histogram(
    "wallet_node_request_seconds",
    "Latency of single ledger node requests.",
    ("endpoint",),
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
)

CACHE_REQUESTS_TOTAL = Counter(
    "wallet_cache_requests_total",
    "TTL cache lookups grouped by tier and result.",
    ("tier", "result"),
)


def record_node_request(endpoint: str, outcome: str, elapsed_s: float) -> None:
    NODE_REQUESTS_TOTAL.labels(endpoint=endpoint, outcome=outcome).inc()
    NODE_REQUEST_LATENCY.labels(endpoint=endpoint).observe(max(elapsed_s, 0.0))


def record_node_retry(endpoint: str) -> None:
    NODE_RETRIES_TOTAL.labels(endpoint=endpoint).inc()


def record_cache_observation(tier: str, hit: bool) -> None:
    CACHE_REQUESTS_TOTAL.labels(tier=tier, result="hit" if hit else "miss").inc()

"""Metric helpers exposed for reuse across the application."""

from .node import record_cache_observation, record_node_request, record_node_retry

__all__ = ["record_cache_observation", "record_node_request", "record_node_retry"]

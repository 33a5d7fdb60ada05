"""Shared utilities for the simulator."""

from sms_common.utils.graphite import (
    GraphiteReporter,
    MetricsPublisher,
    parse_graphite_endpoint,
    resolve_graphite_address,
)

__all__ = [
    "GraphiteReporter",
    "MetricsPublisher",
    "parse_graphite_endpoint",
    "resolve_graphite_address",
]

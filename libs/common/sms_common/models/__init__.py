"""Metric namespace models."""

from sms_common.models.metrics import (
    DURATION_UNITS,
    Meter,
    MetricsRegistry,
    PrefixedRegistry,
    Timer,
)

__all__ = [
    "DURATION_UNITS",
    "Meter",
    "Timer",
    "MetricsRegistry",
    "PrefixedRegistry",
]

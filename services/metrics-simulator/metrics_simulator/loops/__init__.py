"""Threaded periodic loops run by each cloud."""

from metrics_simulator.loops.base import PeriodicLoop
from metrics_simulator.loops.flusher import MetricFlusher
from metrics_simulator.loops.updater import MetricUpdater

__all__ = [
    "PeriodicLoop",
    "MetricUpdater",
    "MetricFlusher",
]

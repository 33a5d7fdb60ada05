"""Metric flush loop: publishes a cloud's registry to its backend."""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

from metrics_simulator.loops.base import PeriodicLoop

if TYPE_CHECKING:
    from metrics_simulator.cloud import Cloud

logger = logging.getLogger(__name__)


class MetricFlusher(PeriodicLoop):
    """Calls ``Cloud.flush_metrics`` once per flush interval.

    A failed flush is logged by the cloud and retried at the next tick.
    """

    def __init__(self, cloud: Cloud, interval_seconds: float, stop_event: threading.Event):
        super().__init__(
            interval_seconds=interval_seconds,
            stop_event=stop_event,
            name=f"MetricFlusher[{cloud.name}]",
        )
        self.cloud = cloud

    def tick(self) -> None:
        if not self.cloud.flush_metrics():
            logger.debug(f"{self.name} will retry at the next tick")

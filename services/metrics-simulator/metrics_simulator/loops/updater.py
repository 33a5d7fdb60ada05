"""Metric update loop: drives every microservice of a cloud."""

from __future__ import annotations

import threading
from typing import TYPE_CHECKING

from metrics_simulator.loops.base import PeriodicLoop

if TYPE_CHECKING:
    from metrics_simulator.cloud import Cloud


class MetricUpdater(PeriodicLoop):
    """Calls ``Cloud.update_metrics`` once per update interval."""

    def __init__(self, cloud: Cloud, interval_seconds: float, stop_event: threading.Event):
        super().__init__(
            interval_seconds=interval_seconds,
            stop_event=stop_event,
            name=f"MetricUpdater[{cloud.name}]",
        )
        self.cloud = cloud

    def tick(self) -> None:
        self.cloud.update_metrics()

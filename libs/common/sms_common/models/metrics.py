"""Metric namespace for simulated clouds, backed by prometheus_client.

Each cloud owns one MetricsRegistry wrapping its own CollectorRegistry.
Microservices write into it through a PrefixedRegistry view so every metric
name starts with ``<service>.``:

- Meter: a ``meter`` Counter child labelled with the metric name
- Timer: a ``timer`` Summary child (count and sum) plus a bounded window of
  recent durations from which percentiles, min and max are reported
"""

import threading
from collections import deque

import numpy as np
from prometheus_client import CollectorRegistry, Counter, Summary
from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector

from sms_common.config import DEFAULT_PERCENTILES

# Published duration units per second
DURATION_UNITS = {"ns": 1e9, "us": 1e6, "ms": 1e3, "s": 1.0}
DEFAULT_WINDOW_SIZE = 1028


class Meter:
    """Tracks how many events happened; rates are derived by the backend."""

    def __init__(self, name: str, counter: Counter, registry: CollectorRegistry):
        self.name = name
        self._child = counter.labels(name=name)
        self._registry = registry

    def mark(self, n: int = 1) -> None:
        """Record ``n`` events."""
        self._child.inc(n)

    @property
    def count(self) -> int:
        value = self._registry.get_sample_value("meter_total", {"name": self.name})
        return int(value or 0)


class Timer:
    """Tracks the distribution of event durations.

    Count and sum live in the Summary; the last ``window_size`` durations are
    kept for percentile reporting, so memory stays bounded.
    """

    def __init__(
        self,
        name: str,
        summary: Summary,
        registry: CollectorRegistry,
        duration_unit: str = "ns",
        window_size: int = DEFAULT_WINDOW_SIZE,
    ):
        self.name = name
        self._child = summary.labels(name=name)
        self._registry = registry
        self._unit = DURATION_UNITS[duration_unit]
        self._lock = threading.Lock()
        self._window: deque[float] = deque(maxlen=window_size)

    def update(self, seconds: float) -> None:
        """Record one event that took ``seconds`` to complete."""
        self._child.observe(seconds * self._unit)
        with self._lock:
            self._window.append(float(seconds))

    @property
    def count(self) -> int:
        value = self._registry.get_sample_value("timer_count", {"name": self.name})
        return int(value or 0)

    def values(self) -> list[float]:
        """Most recent durations, in seconds, oldest first."""
        with self._lock:
            return list(self._window)

    def percentiles(self, percentiles: list[float]) -> dict[float, float]:
        """Percentiles of the recent durations, in the published unit."""
        values = np.array(self.values(), dtype=float) * self._unit
        if values.size == 0:
            return {p: 0.0 for p in percentiles}
        return {p: float(q) for p, q in zip(percentiles, np.quantile(values, percentiles))}

    def bounds(self) -> tuple[int, int]:
        """Smallest and largest recent durations, truncated to whole units."""
        values = self.values()
        if not values:
            return 0, 0
        return int(min(values) * self._unit), int(max(values) * self._unit)


class TimerStatsCollector(Collector):
    """Exposes percentile, min and max gauges for every timer of a registry."""

    def __init__(self, registry: "MetricsRegistry"):
        self._registry = registry

    def collect(self):
        percentiles = self._registry.percentiles
        quantile = GaugeMetricFamily(
            "timer_quantile", "Recent duration percentiles", labels=["name", "quantile"]
        )
        minimum = GaugeMetricFamily("timer_min", "Smallest recent duration", labels=["name"])
        maximum = GaugeMetricFamily("timer_max", "Largest recent duration", labels=["name"])

        for name, metric in self._registry.items():
            if not isinstance(metric, Timer):
                continue
            for p, value in metric.percentiles(percentiles).items():
                quantile.add_metric([name, str(p)], value)
            low, high = metric.bounds()
            minimum.add_metric([name], low)
            maximum.add_metric([name], high)

        yield quantile
        yield minimum
        yield maximum


Metric = Meter | Timer


class MetricsRegistry:
    """Thread-safe mapping of metric name to Meter or Timer.

    Metrics are created lazily on first use and never removed. Every metric
    is a labelled child of one of two families in ``collector_registry``, so
    names keep their dots and cannot collide with each other.
    """

    def __init__(
        self,
        percentiles: list[float] | None = None,
        duration_unit: str = "ns",
        window_size: int = DEFAULT_WINDOW_SIZE,
    ):
        if duration_unit not in DURATION_UNITS:
            raise ValueError(f"unknown duration unit '{duration_unit}'")
        self.percentiles = list(DEFAULT_PERCENTILES if percentiles is None else percentiles)
        self.duration_unit = duration_unit
        self.window_size = window_size

        self.collector_registry = CollectorRegistry()
        self._meters = Counter(
            "meter", "Marked event magnitudes", ["name"], registry=self.collector_registry
        )
        self._timers = Summary(
            "timer", "Recorded durations", ["name"], registry=self.collector_registry
        )
        self.collector_registry.register(TimerStatsCollector(self))

        self._lock = threading.Lock()
        self._metrics: dict[str, Metric] = {}

    def _get_or_register(self, name: str, kind: type) -> Metric:
        with self._lock:
            metric = self._metrics.get(name)
            if metric is None:
                if kind is Meter:
                    metric = Meter(name, self._meters, self.collector_registry)
                else:
                    metric = Timer(
                        name,
                        self._timers,
                        self.collector_registry,
                        duration_unit=self.duration_unit,
                        window_size=self.window_size,
                    )
                self._metrics[name] = metric
            elif not isinstance(metric, kind):
                raise TypeError(
                    f"metric '{name}' is already registered as a {type(metric).__name__}"
                )
            return metric

    def get_or_register_meter(self, name: str) -> Meter:
        return self._get_or_register(name, Meter)

    def get_or_register_timer(self, name: str) -> Timer:
        return self._get_or_register(name, Timer)

    def get(self, name: str) -> Metric | None:
        with self._lock:
            return self._metrics.get(name)

    def items(self) -> list[tuple[str, Metric]]:
        """Copy of all (name, metric) pairs, sorted by name."""
        with self._lock:
            return sorted(self._metrics.items())

    def names(self) -> list[str]:
        return [name for name, _ in self.items()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._metrics


class PrefixedRegistry:
    """View of a parent registry in which every name is prefixed.

    Names passed to and returned from the view are relative to the prefix;
    the parent stores the fully qualified names.
    """

    def __init__(self, parent: MetricsRegistry, prefix: str):
        self.parent = parent
        self.prefix = prefix

    def qualify(self, name: str) -> str:
        return self.prefix + name

    def get_or_register_meter(self, name: str) -> Meter:
        return self.parent.get_or_register_meter(self.qualify(name))

    def get_or_register_timer(self, name: str) -> Timer:
        return self.parent.get_or_register_timer(self.qualify(name))

    def get(self, name: str) -> Metric | None:
        return self.parent.get(self.qualify(name))

    def names(self) -> list[str]:
        return [
            name[len(self.prefix) :]
            for name in self.parent.names()
            if name.startswith(self.prefix)
        ]

    def __len__(self) -> int:
        return len(self.names())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.qualify(name) in self.parent

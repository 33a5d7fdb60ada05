"""Pytest configuration and fixtures for metrics-simulator tests."""

import json
import threading
from pathlib import Path

import pytest
from sms_common.config import CloudConfig, MicroserviceConfig, SimulationSettings
from sms_common.models.metrics import MetricsRegistry
from sms_common.utils.graphite import MetricsPublisher


class RecordingPublisher(MetricsPublisher):
    """Publisher that records flushes instead of talking to Graphite."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.calls = 0
        self.snapshots: list[list[str]] = []
        self._lock = threading.Lock()

    def publish(self, registry: MetricsRegistry) -> int:
        with self._lock:
            self.calls += 1
        if self.fail:
            raise ConnectionRefusedError("graphite is down")
        names = registry.names()
        self.snapshots.append(names)
        return len(names)


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher()


@pytest.fixture
def failing_publisher() -> RecordingPublisher:
    return RecordingPublisher(fail=True)


@pytest.fixture
def prod_cloud_config() -> CloudConfig:
    return CloudConfig(name="prod", graphiteEndpoint="localhost:2003")


@pytest.fixture
def auth_service() -> MicroserviceConfig:
    """The 'auth' microservice with a single meter."""
    return MicroserviceConfig(
        name="auth",
        metrics={"meters": [{"name": "logins", "low": 1, "high": 10}], "timers": []},
    )


@pytest.fixture
def billing_service() -> MicroserviceConfig:
    """A second microservice reusing metric names from 'auth'."""
    return MicroserviceConfig(
        name="billing",
        metrics={
            "meters": [{"name": "logins", "low": 100, "high": 200}],
            "timers": [{"name": "charge", "low": 2, "high": 30}],
        },
    )


@pytest.fixture
def fast_settings() -> SimulationSettings:
    """Short intervals so loop tests finish quickly."""
    return SimulationSettings(updateIntervalSeconds=0.05, flushIntervalSeconds=10)


@pytest.fixture
def write_config(tmp_path):
    """Write a configuration dict to a JSON file and return its path."""

    def _write(data: dict, name: str = "config.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path

    return _write

"""Service Metrics Simulator common library - shared config, metrics and publishing."""

__version__ = "0.1.0"

from sms_common.config import (
    CloudConfig,
    MeterConfig,
    MetricConfig,
    MicroserviceConfig,
    SimulationSettings,
    SimulatorConfig,
    TimerConfig,
    load_config_from_env,
)
from sms_common.models import Meter, MetricsRegistry, PrefixedRegistry, Timer

__all__ = [
    "CloudConfig",
    "MeterConfig",
    "TimerConfig",
    "MetricConfig",
    "MicroserviceConfig",
    "SimulationSettings",
    "SimulatorConfig",
    "load_config_from_env",
    "Meter",
    "Timer",
    "MetricsRegistry",
    "PrefixedRegistry",
]

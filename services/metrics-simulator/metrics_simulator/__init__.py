"""Service Metrics Simulator - simulated clouds emitting mock microservice metrics."""

__version__ = "0.1.0"

from metrics_simulator.cloud import Cloud, CloudSetupError, CloudState
from metrics_simulator.generator import MetricGenerator
from metrics_simulator.microservice import Microservice

__all__ = [
    "Cloud",
    "CloudSetupError",
    "CloudState",
    "MetricGenerator",
    "Microservice",
]

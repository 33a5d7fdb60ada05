"""Configuration management for the service metrics simulator.

This module provides:
1. Static configuration for clouds and microservices (JSON or YAML, loaded once)
2. Simulation settings (loop intervals, publishing options, sampling seed)
3. Path resolution from the environment
"""

import json
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_CONFIG_PATH = "/app/config/example-config.json"
CONFIG_PATH_ENV_VAR = "SIMULATOR_CONFIG_PATH"

# Separator between a microservice name and its metric names
METRIC_NAME_SEPARATOR = "."

DEFAULT_PERCENTILES = [0.5, 0.75, 0.95, 0.99, 0.999]


class CloudConfig(BaseModel):
    """Static configuration for a single simulated cloud."""

    name: str = Field(..., description="Unique cloud name", min_length=1)
    graphite_endpoint: str = Field(
        ..., alias="graphiteEndpoint", description="Graphite address as host:port"
    )

    class Config:
        populate_by_name = True


class RandomMetricConfig(BaseModel):
    """A mock metric that takes a random value in [low, high) on every update."""

    name: str = Field(..., description="Metric name (without service prefix)", min_length=1)
    low: int = Field(..., description="Inclusive lower bound of generated values")
    high: int = Field(..., description="Exclusive upper bound of generated values")

    @model_validator(mode="after")
    def validate_range(self) -> "RandomMetricConfig":
        """Reject empty ranges so generation never has to fail."""
        if self.low >= self.high:
            raise ValueError(
                f"metric '{self.name}': low ({self.low}) must be less than high ({self.high})"
            )
        return self


class MeterConfig(RandomMetricConfig):
    """A meter that marks a random event magnitude on every update."""


class TimerConfig(RandomMetricConfig):
    """A timer that records a random duration (in seconds) on every update."""


def _duplicates(names: list[str]) -> list[str]:
    seen: set[str] = set()
    dupes: list[str] = []
    for name in names:
        if name in seen and name not in dupes:
            dupes.append(name)
        seen.add(name)
    return dupes


class MetricConfig(BaseModel):
    """The set of mock metrics a microservice emits."""

    meters: list[MeterConfig] = Field(default_factory=list)
    timers: list[TimerConfig] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_names(self) -> "MetricConfig":
        """Meter names and timer names must each be unique."""
        for kind, metrics in (("meter", self.meters), ("timer", self.timers)):
            dupes = _duplicates([m.name for m in metrics])
            if dupes:
                raise ValueError(f"duplicate {kind} names: {', '.join(dupes)}")
        return self


class MicroserviceConfig(BaseModel):
    """Static, cloud-agnostic configuration of a microservice.

    Every metric of the microservice is published under ``<name>.``, so the
    name must not itself contain the separator.
    """

    name: str = Field(..., description="Microservice name", min_length=1)
    metrics: MetricConfig = Field(default_factory=MetricConfig)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate the name can be used as a metric prefix."""
        if METRIC_NAME_SEPARATOR in v:
            raise ValueError(
                f"microservice name '{v}' must not contain '{METRIC_NAME_SEPARATOR}'"
            )
        return v

    @property
    def prefix(self) -> str:
        """Prefix applied to every metric of this microservice."""
        return self.name + METRIC_NAME_SEPARATOR


class SimulationSettings(BaseModel):
    """Tunables shared by every cloud."""

    update_interval_seconds: float = Field(
        default=1.0, alias="updateIntervalSeconds", description="Metric update interval", gt=0
    )
    flush_interval_seconds: float = Field(
        default=10.0, alias="flushIntervalSeconds", description="Graphite flush interval", gt=0
    )
    percentiles: list[float] = Field(
        default_factory=lambda: list(DEFAULT_PERCENTILES),
        description="Percentiles published for every timer",
    )
    duration_unit: Literal["ns", "us", "ms", "s"] = Field(
        default="ns", alias="durationUnit", description="Unit of published timer values"
    )
    prefix: str = Field(default="", description="Prefix for every Graphite key")
    seed: int | None = Field(default=None, description="Seed for deterministic sampling")
    publish_timeout_seconds: float = Field(
        default=10.0,
        alias="publishTimeoutSeconds",
        description="Socket timeout for a single Graphite flush",
        gt=0,
    )

    class Config:
        populate_by_name = True

    @field_validator("percentiles")
    @classmethod
    def validate_percentiles(cls, v: list[float]) -> list[float]:
        """Percentiles are fractions strictly between 0 and 1."""
        for p in v:
            if not 0 < p < 1:
                raise ValueError(f"percentile {p} must be between 0 and 1 (exclusive)")
        return v


class SimulatorConfig(BaseModel):
    """Main simulator configuration: every microservice is deployed to every cloud."""

    clouds: list[CloudConfig] = Field(default_factory=list)
    microservices: list[MicroserviceConfig] = Field(default_factory=list)
    settings: SimulationSettings = Field(default_factory=lambda: SimulationSettings())

    @model_validator(mode="after")
    def validate_unique_names(self) -> "SimulatorConfig":
        """Cloud and microservice names identify namespaces and must be unique."""
        dupes = _duplicates([c.name for c in self.clouds])
        if dupes:
            raise ValueError(f"duplicate cloud names: {', '.join(dupes)}")
        dupes = _duplicates([m.name for m in self.microservices])
        if dupes:
            raise ValueError(f"duplicate microservice names: {', '.join(dupes)}")
        return self

    @classmethod
    def load(cls, path: str | Path) -> "SimulatorConfig":
        """Load configuration from a JSON or YAML file.

        Args:
            path: Path to the configuration file

        Returns:
            Loaded SimulatorConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If the file is empty, cannot be decoded or fails validation
        """
        config_path = Path(path)

        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            try:
                if config_path.suffix.lower() in (".yaml", ".yml"):
                    data = yaml.safe_load(f)
                else:
                    data = json.load(f)
            except (json.JSONDecodeError, yaml.YAMLError) as e:
                raise ValueError(f"Invalid configuration in {config_path}: {e}") from e

        if not data:
            raise ValueError(f"Empty or invalid configuration in {config_path}")
        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be an object in {config_path}")

        return cls(**data)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary using the file's key names."""
        return self.model_dump(by_alias=True)


def get_config_path(env_var: str = CONFIG_PATH_ENV_VAR) -> Path:
    """Resolve the configuration path from the environment or the default."""
    return Path(os.getenv(env_var) or DEFAULT_CONFIG_PATH)


def load_config_from_env(env_var: str = CONFIG_PATH_ENV_VAR) -> SimulatorConfig:
    """Load configuration from the path given by an environment variable.

    Falls back to ``/app/config/example-config.json`` when the variable is unset.

    Args:
        env_var: Name of environment variable containing config path

    Returns:
        Loaded SimulatorConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the configuration is invalid
    """
    return SimulatorConfig.load(get_config_path(env_var))

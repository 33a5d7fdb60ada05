"""Simulated clouds that emit mock metrics to a Graphite instance.

A cloud represents an isolated deployment of the whole architecture. Each
cloud has its own metric registry and its own Graphite backend; Graphite
instances are then added as data sources to a shared Grafana.
"""

import logging
import threading
from enum import Enum

from sms_common.config import CloudConfig, MicroserviceConfig, SimulationSettings
from sms_common.models.metrics import MetricsRegistry, PrefixedRegistry
from sms_common.utils.graphite import GraphiteReporter, MetricsPublisher, resolve_graphite_address

from metrics_simulator.generator import MetricGenerator
from metrics_simulator.loops import MetricFlusher, MetricUpdater
from metrics_simulator.microservice import Microservice

logger = logging.getLogger(__name__)


class CloudState(str, Enum):
    """Lifecycle of a cloud; traversed once, in order."""

    CREATED = "created"
    DEPLOYING = "deploying"
    RUNNING = "running"
    STOPPING = "stopping"
    STOPPED = "stopped"


class CloudSetupError(ValueError):
    """Raised when a cloud cannot be constructed from its configuration."""

    def __init__(self, cloud_name: str, endpoint: str, reason: str):
        super().__init__(f"cloud '{cloud_name}': invalid graphite endpoint '{endpoint}': {reason}")
        self.cloud_name = cloud_name
        self.endpoint = endpoint


class Cloud:
    """One simulated cloud with its microservices, registry and update/flush loops."""

    def __init__(
        self,
        config: CloudConfig,
        settings: SimulationSettings | None = None,
        publisher: MetricsPublisher | None = None,
        generator: MetricGenerator | None = None,
    ):
        """Create a cloud from its static configuration.

        Args:
            config: Cloud name and Graphite endpoint
            settings: Loop intervals and publishing options (defaults if omitted)
            publisher: Backend for flushes; a GraphiteReporter is built if omitted
            generator: Random source shared by this cloud's microservices

        Raises:
            CloudSetupError: If the Graphite endpoint cannot be parsed or resolved
        """
        self.config = config
        self.settings = settings or SimulationSettings()

        try:
            self.graphite_address = resolve_graphite_address(config.graphite_endpoint)
        except ValueError as e:
            raise CloudSetupError(config.name, config.graphite_endpoint, str(e)) from e

        self.registry = MetricsRegistry(
            percentiles=self.settings.percentiles,
            duration_unit=self.settings.duration_unit,
        )
        self.publisher = publisher or GraphiteReporter(
            address=self.graphite_address,
            prefix=self.settings.prefix,
            timeout_seconds=self.settings.publish_timeout_seconds,
        )
        self.generator = generator or MetricGenerator(seed=self.settings.seed)
        # Microservices must be deployed using Cloud.deploy
        self.microservices: list[Microservice] = []

        self.update_count = 0
        self.flush_count = 0
        self._state = CloudState.CREATED
        self._state_lock = threading.Lock()

    @property
    def name(self) -> str:
        return self.config.name

    @property
    def state(self) -> CloudState:
        with self._state_lock:
            return self._state

    def _transition(self, allowed: tuple[CloudState, ...], target: CloudState) -> None:
        with self._state_lock:
            if self._state not in allowed:
                raise RuntimeError(
                    f"cloud '{self.name}' cannot move from {self._state.value} to {target.value}"
                )
            self._state = target

    def deploy(self, service_config: MicroserviceConfig) -> Microservice:
        """Add an instance of a microservice to this cloud (before ``run`` only)."""
        self._transition((CloudState.CREATED, CloudState.DEPLOYING), CloudState.DEPLOYING)

        instance = Microservice(
            config=service_config,
            # All metrics for this microservice will be prefixed with "<name>."
            registry=PrefixedRegistry(self.registry, service_config.prefix),
            generator=self.generator,
        )
        self.microservices.append(instance)
        logger.debug(f"[{self.name}] Deployed microservice {service_config.name}")
        return instance

    def update_metrics(self) -> None:
        """Update every deployed microservice once, in deployment order."""
        for microservice in self.microservices:
            microservice.update()
        self.update_count += 1

    def flush_metrics(self) -> bool:
        """Publish the registry to the backend.

        Failures are logged and reported through the return value only; the
        next scheduled flush acts as the retry.

        Returns:
            True if the flush succeeded
        """
        self.flush_count += 1
        try:
            points = self.publisher.publish(self.registry)
        except Exception as e:
            logger.error(
                f"[{self.name}] Failed to flush metrics to graphite "
                f"(graphite_endpoint={self.config.graphite_endpoint}): {e}"
            )
            return False

        logger.info(f"[{self.name}] Flushed {points} metrics")
        return True

    def run(self, stop_event: threading.Event) -> None:
        """Run the metric update and flush loops until ``stop_event`` is set.

        Blocks until both loops have stopped, then flushes one last time.
        """
        self._transition((CloudState.CREATED, CloudState.DEPLOYING), CloudState.RUNNING)
        logger.info(
            f"[{self.name}] Starting cloud with {len(self.microservices)} microservice(s), "
            f"graphite_endpoint={self.config.graphite_endpoint}"
        )

        updater = MetricUpdater(self, self.settings.update_interval_seconds, stop_event)
        flusher = MetricFlusher(self, self.settings.flush_interval_seconds, stop_event)

        try:
            updater.start()
            flusher.start()
            updater.join()
            flusher.join()
        finally:
            self._transition((CloudState.RUNNING,), CloudState.STOPPING)
            logger.info(f"[{self.name}] Loops stopped, performing final flush")
            self.flush_metrics()
            self._transition((CloudState.STOPPING,), CloudState.STOPPED)
            logger.info(f"[{self.name}] Cloud stopped")

"""Service Metrics Simulator - Main Entry Point.

This service:
1. Loads configuration from the path in SIMULATOR_CONFIG_PATH
2. Creates one Cloud per configured cloud, skipping clouds that fail setup
3. Deploys every configured microservice into every cloud
4. Runs all clouds concurrently until SIGINT/SIGTERM
5. Gracefully shuts down, flushing every cloud one last time
"""

import logging
import os
import signal
import sys
import threading
from pathlib import Path

from sms_common.config import SimulatorConfig, get_config_path

from metrics_simulator.cloud import Cloud, CloudSetupError
from metrics_simulator.generator import spawn_generators

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# How often the main thread wakes up while waiting for clouds to stop
JOIN_POLL_SECONDS = 0.5


class SimulatorOrchestrator:
    """Builds clouds from configuration and runs them until cancellation."""

    def __init__(self, stop_event: threading.Event | None = None):
        """Initialize the orchestrator.

        Args:
            stop_event: Shared cancellation signal (a new one is created if omitted)
        """
        self.stop_event = stop_event or threading.Event()
        self.clouds: list[Cloud] = []

    def setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""

        def signal_handler(signum, frame):
            logger.info(f"Received signal {signum}, initiating graceful shutdown...")
            self.stop_all()

        signal.signal(signal.SIGINT, signal_handler)
        signal.signal(signal.SIGTERM, signal_handler)

    def build_clouds(self, config: SimulatorConfig) -> list[Cloud]:
        """Create every cloud that can be set up and deploy all microservices to it.

        Clouds whose Graphite endpoint is invalid are logged and skipped.
        """
        generators = spawn_generators(len(config.clouds), seed=config.settings.seed)
        clouds: list[Cloud] = []

        for cloud_config, generator in zip(config.clouds, generators):
            try:
                cloud = Cloud(cloud_config, settings=config.settings, generator=generator)
            except CloudSetupError as e:
                logger.error(
                    f"Failed to set up cloud name={cloud_config.name} "
                    f"graphite_endpoint={cloud_config.graphite_endpoint}: {e}"
                )
                continue

            for service_config in config.microservices:
                cloud.deploy(service_config)

            clouds.append(cloud)

        return clouds

    def run_clouds(self, clouds: list[Cloud]) -> None:
        """Run each cloud in its own thread and wait for all of them to stop."""
        threads = [
            threading.Thread(
                target=cloud.run, args=(self.stop_event,), name=f"Cloud[{cloud.name}]"
            )
            for cloud in clouds
        ]
        for thread in threads:
            thread.start()

        for thread in threads:
            # Join with a timeout so signal handlers keep running on the main thread
            while thread.is_alive():
                thread.join(timeout=JOIN_POLL_SECONDS)

    def stop_all(self) -> None:
        """Signal every cloud to stop."""
        self.stop_event.set()

    def run(
        self, config_path: str | Path | None = None, install_signal_handlers: bool = True
    ) -> int:
        """Run the simulator.

        Args:
            config_path: Configuration file (defaults to SIMULATOR_CONFIG_PATH)
            install_signal_handlers: Stop on SIGINT/SIGTERM (main thread only)

        Returns:
            Exit code: 0 for success, 1 for error
        """
        if install_signal_handlers:
            self.setup_signal_handlers()

        path = Path(config_path) if config_path is not None else get_config_path()
        try:
            config = SimulatorConfig.load(path)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to load simulator config from {path}: {e}")
            return 1

        logger.info(
            f"Loaded simulator config: {len(config.microservices)} microservice(s), "
            f"{len(config.clouds)} cloud(s)"
        )

        self.clouds = self.build_clouds(config)
        if not self.clouds:
            logger.error("No valid cloud configurations; exiting simulator")
            return 1

        logger.info(f"Finished initializing clouds: {len(self.clouds)}")

        if self.stop_event.is_set():
            # Clouds still stop through Cloud.run: no updates, one final flush
            logger.info("Shutdown requested during startup")

        self.run_clouds(self.clouds)

        logger.info("Simulator stopped")
        return 0


def main() -> int:
    """Main entry point.

    Returns:
        Exit code: 0 for success, 1 for error
    """
    orchestrator = SimulatorOrchestrator()
    return orchestrator.run()


if __name__ == "__main__":
    sys.exit(main())

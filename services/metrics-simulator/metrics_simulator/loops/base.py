"""Base class for the threaded periodic loops that drive a cloud."""

import logging
import threading
import time
from abc import ABC, abstractmethod

logger = logging.getLogger(__name__)


class PeriodicLoop(ABC):
    """Runs ``tick()`` every ``interval_seconds`` in a background thread.

    Provides common functionality for all loops:
    - Thread lifecycle management
    - Deadline-based scheduling (tick duration does not shift later ticks)
    - Cancellation through a stop event shared with the rest of the process
    """

    def __init__(
        self,
        interval_seconds: float,
        stop_event: threading.Event,
        name: str | None = None,
    ):
        """Initialize the loop.

        Args:
            interval_seconds: Time between two ticks
            stop_event: Shared cancellation signal; the loop exits once it is set
            name: Optional loop name for logging and the thread name
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval must be positive, got {interval_seconds}")
        self.interval_seconds = interval_seconds
        self.name = name or self.__class__.__name__
        self.tick_count = 0
        self._stop_event = stop_event
        self._thread: threading.Thread | None = None

    @abstractmethod
    def tick(self) -> None:
        """Do one unit of periodic work."""

    def run(self) -> None:
        """Tick on schedule until the stop event is observed at a wait point."""
        logger.info(f"Starting {self.name} (interval {self.interval_seconds}s)")
        next_tick = time.monotonic() + self.interval_seconds

        while not self.should_stop():
            if self.wait_interruptible(max(0.0, next_tick - time.monotonic())):
                break
            try:
                self.tick()
            except Exception as e:
                logger.error(f"Error in {self.name} tick: {e}", exc_info=True)
            self.tick_count += 1

            next_tick += self.interval_seconds
            now = time.monotonic()
            if next_tick < now:
                # Skip missed ticks instead of bursting to catch up
                missed = int((now - next_tick) // self.interval_seconds) + 1
                next_tick += missed * self.interval_seconds
                logger.debug(f"{self.name} skipped {missed} tick(s)")

        logger.info(f"Stopping {self.name} after {self.tick_count} tick(s)")

    def start(self) -> None:
        """Start the loop in a background thread."""
        if self.is_running():
            logger.warning(f"{self.name} is already running")
            return

        self._thread = threading.Thread(target=self.run, daemon=True, name=self.name)
        self._thread.start()

    def join(self, timeout: float | None = None) -> None:
        """Wait for the loop thread to finish."""
        if self._thread is not None:
            self._thread.join(timeout=timeout)

    def is_running(self) -> bool:
        """Check if the loop thread is running."""
        return self._thread is not None and self._thread.is_alive()

    def should_stop(self) -> bool:
        """Check if stop has been requested."""
        return self._stop_event.is_set()

    def wait_interruptible(self, seconds: float) -> bool:
        """Wait for ``seconds`` unless the stop event fires first.

        Returns:
            True if interrupted (should stop), False if timed out normally
        """
        return self._stop_event.wait(timeout=seconds)

"""Tests for the periodic loop base class."""

import logging
import threading
import time

import pytest

from metrics_simulator.loops import PeriodicLoop


class RecordingLoop(PeriodicLoop):
    """Loop that records when each tick started."""

    def __init__(self, interval_seconds, stop_event, delay=0.0, error=None):
        super().__init__(interval_seconds, stop_event)
        self.delay = delay
        self.error = error
        self.started: list[float] = []

    def tick(self) -> None:
        self.started.append(time.monotonic())
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error


def run_for(loop: PeriodicLoop, stop_event: threading.Event, seconds: float) -> None:
    loop.start()
    time.sleep(seconds)
    stop_event.set()
    loop.join(timeout=5)


class TestPeriodicLoop:
    """Test scheduling, errors and cancellation."""

    def test_tick_error_is_logged_and_loop_continues(self, caplog):
        stop_event = threading.Event()
        loop = RecordingLoop(0.02, stop_event, error=RuntimeError("graphite hiccup"))

        with caplog.at_level(logging.ERROR):
            run_for(loop, stop_event, 0.2)

        assert loop.tick_count >= 3
        assert len(loop.started) == loop.tick_count
        assert "Error in RecordingLoop tick: graphite hiccup" in caplog.text

    def test_missed_ticks_are_skipped_not_replayed(self):
        stop_event = threading.Event()
        # Each tick overruns the interval, so the deadline after it is already missed
        loop = RecordingLoop(0.05, stop_event, delay=0.06)

        run_for(loop, stop_event, 0.5)

        gaps = [b - a for a, b in zip(loop.started, loop.started[1:])]
        assert len(gaps) >= 2
        # Replaying would start the next tick right after the slow one (0.06s);
        # skipping waits for the next deadline on the grid (0.10s)
        assert min(gaps) >= 0.08
        assert loop.tick_count <= 5

    def test_stop_before_first_tick(self):
        stop_event = threading.Event()
        stop_event.set()
        loop = RecordingLoop(0.01, stop_event)

        loop.run()

        assert loop.tick_count == 0
        assert loop.should_stop()

    def test_thread_lifecycle(self, caplog):
        stop_event = threading.Event()
        loop = RecordingLoop(0.01, stop_event)

        assert not loop.is_running()
        loop.start()
        assert loop.is_running()

        with caplog.at_level(logging.WARNING):
            loop.start()
        assert "RecordingLoop is already running" in caplog.text

        stop_event.set()
        loop.join(timeout=5)
        assert not loop.is_running()

    @pytest.mark.parametrize("interval", [0, -1.0])
    def test_interval_must_be_positive(self, interval):
        with pytest.raises(ValueError, match="interval must be positive"):
            RecordingLoop(interval, threading.Event())

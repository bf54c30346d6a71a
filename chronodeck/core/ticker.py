"""Stopwatch Ticker - Publish the stopwatch value on a fixed cadence.

Samples the stopwatch every interval in a background thread and hands
the value to a callback, so a UI can show a live display without
polling the API itself.
"""

import logging
import threading
from collections.abc import Callable

from chronodeck.core.durations import format_stopwatch
from chronodeck.core.stopwatch import ElapsedAccumulator

logger = logging.getLogger(__name__)


class StopwatchTicker:
    """Polls an ElapsedAccumulator and reports changes.

    Ticks while the stopwatch is running, plus one final tick after it
    stops or resets so the last value gets published.
    """

    def __init__(
        self,
        stopwatch: ElapsedAccumulator,
        on_tick: Callable[[float, str], None],
        interval: float = 0.1,
    ):
        """Initialize ticker.

        Args:
            stopwatch: Stopwatch to sample.
            on_tick: Called with (elapsed seconds, formatted display).
            interval: Seconds between samples.
        """
        self._stopwatch = stopwatch
        self._on_tick = on_tick
        self._interval = interval
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._last: tuple[bool, float] | None = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start the ticker thread. No-op if already started."""
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                return
            self._stop_event.clear()
            self._thread = threading.Thread(
                target=self._run,
                daemon=True,
                name="stopwatch-ticker",
            )
            self._thread.start()
        logger.debug("Stopwatch ticker started (%.3fs)", self._interval)

    def stop(self, timeout: float = 1.0) -> None:
        """Stop the ticker thread and wait for it to exit."""
        with self._lock:
            thread = self._thread
            self._thread = None
            self._stop_event.set()
        if thread is not None and thread is not threading.current_thread():
            thread.join(timeout)
        logger.debug("Stopwatch ticker stopped")

    def tick(self) -> bool:
        """Take one sample and publish it if needed.

        Returns:
            True if on_tick was called.
        """
        running, elapsed = self._stopwatch.snapshot()
        previous = self._last
        self._last = (running, elapsed)

        # Idle and unchanged since the last sample
        if not running and (previous is None or previous == self._last):
            return False

        try:
            self._on_tick(elapsed, format_stopwatch(elapsed))
        except Exception as e:
            logger.error("Stopwatch on_tick error: %s", e)
        return True

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            self.tick()

"""Stopwatch - Start/stop/reset elapsed time accumulator.

Elapsed time is computed on read from the clock, so a running stopwatch
needs no background tick. Owned by TimerStopwatchService; not a singleton.
"""

import logging
import threading
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class ElapsedAccumulator:
    """Thread-safe stopwatch.

    get_elapsed() is `accumulated` while stopped and
    `accumulated + (now - started_at)` while running. Every operation runs
    in a single critical section.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize a stopped stopwatch at zero.

        Args:
            clock: Returns the current time in seconds.
        """
        self._clock = clock
        self._lock = threading.Lock()
        self._running = False
        self._accumulated = 0.0
        self._started_at = 0.0

    def start(self) -> None:
        """Start counting. No-op if already running."""
        with self._lock:
            if self._running:
                return
            self._running = True
            self._started_at = self._clock()
        logger.info("Stopwatch started")

    def stop(self) -> None:
        """Stop counting and keep the elapsed time. No-op if stopped."""
        with self._lock:
            if not self._running:
                return
            self._accumulated += self._clock() - self._started_at
            self._running = False
            elapsed = self._accumulated
        logger.info("Stopwatch stopped at %.1fs", elapsed)

    def reset(self) -> None:
        """Zero the elapsed time.

        A running stopwatch keeps running from zero.
        """
        with self._lock:
            self._accumulated = 0.0
            if self._running:
                self._started_at = self._clock()
        logger.info("Stopwatch reset")

    def is_running(self) -> bool:
        with self._lock:
            return self._running

    def get_elapsed(self) -> float:
        """Get elapsed seconds, including the current run if running."""
        with self._lock:
            return self._elapsed_locked()

    def snapshot(self) -> tuple[bool, float]:
        """Get (running, elapsed) read together.

        Returns:
            Tuple of running flag and elapsed seconds.
        """
        with self._lock:
            return self._running, self._elapsed_locked()

    def _elapsed_locked(self) -> float:
        if not self._running:
            return self._accumulated
        # Clamp against clocks that step backwards
        return self._accumulated + max(0.0, self._clock() - self._started_at)

"""Countdown Scheduler - Single countdown timer with generation tracking.

At most one timer is pending. Every start and cancel bumps a generation
counter; the completion callback carries the generation it was scheduled
with and does nothing if that is no longer current. This keeps a timer
that was replaced or cancelled from notifying even when its callback is
already running when it gets disposed.
"""

import logging
import math
import threading
import time
from collections.abc import Callable
from typing import Any

from chronodeck.core.durations import MAX_DURATION, format_duration
from chronodeck.core.notifications import LogNotifier, Notifier
from chronodeck.core.scheduling import DelayedExecutor, ThreadTimerExecutor

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Timer finished"
DEFAULT_BODY = "Your {duration} timer is done."


class CountdownScheduler:
    """Owns the single pending countdown timer.

    Thread-safe. The completion callback may run on an executor thread;
    the notifier and completion callbacks are always called outside the lock.
    """

    def __init__(
        self,
        notifier: Notifier | None = None,
        executor: DelayedExecutor | None = None,
        clock: Callable[[], float] = time.monotonic,
        on_complete: Callable[[float], None] | None = None,
        title: str = DEFAULT_TITLE,
        body: str = DEFAULT_BODY,
    ) -> None:
        """Initialize an idle scheduler.

        Args:
            notifier: Receives the "timer finished" notification.
            executor: Delayed-execution facility (default: threading.Timer).
            clock: Returns the current time in seconds.
            on_complete: Completion callback, called with the original duration
                after the notification. More can be added with register_callback().
            title: Notification title.
            body: Notification body; "{duration}" is replaced with the formatted duration.
        """
        self._notifier = notifier if notifier is not None else LogNotifier()
        self._executor = executor if executor is not None else ThreadTimerExecutor()
        self._clock = clock
        self._callbacks: list[Callable[[float], None]] = [on_complete] if on_complete else []
        self._title = title
        self._body = body

        self._lock = threading.Lock()
        self._generation = 0
        self._handle: Any = None
        self._due_time: float | None = None
        self._duration = 0.0

    @property
    def generation(self) -> int:
        """Current generation (incremented on every start and cancel)."""
        with self._lock:
            return self._generation

    def start(self, seconds: float) -> bool:
        """Start a countdown, replacing any pending one.

        Args:
            seconds: Countdown length.

        Returns:
            True if started, False if the duration was rejected. A rejected
            start leaves any pending timer untouched.
        """
        try:
            seconds = float(seconds)
        except (TypeError, ValueError):
            logger.warning("Timer start declined: invalid duration %r", seconds)
            return False

        if not math.isfinite(seconds) or seconds <= 0 or seconds > MAX_DURATION:
            logger.warning("Timer start declined: duration %r out of range", seconds)
            return False

        with self._lock:
            self._dispose_locked()
            self._generation += 1
            generation = self._generation
            self._duration = seconds
            try:
                self._handle = self._executor.schedule(seconds, self._on_elapsed, generation)
            except Exception as e:
                logger.error("Failed to schedule timer: %s", e)
                self._due_time = None
                return False
            self._due_time = self._clock() + seconds

        logger.info("Timer started: %s (generation %d)", format_duration(seconds), generation)
        return True

    def cancel(self) -> bool:
        """Cancel the pending countdown, if any.

        Returns:
            Always True; cancelling an idle scheduler is not an error.
        """
        self.cancel_pending()
        return True

    def cancel_pending(self) -> bool:
        """Cancel the pending countdown, if any.

        Returns:
            True if a pending timer was superseded, False if idle (including
            a timer that completed just before the cancel).
        """
        with self._lock:
            was_pending = self._due_time is not None
            self._dispose_locked()
            self._generation += 1
            self._due_time = None

        if was_pending:
            logger.info("Timer cancelled")
        return was_pending

    def remaining(self) -> float | None:
        """Get seconds until the pending timer fires.

        Returns:
            Remaining seconds (never negative), or None when idle.
        """
        with self._lock:
            if self._due_time is None:
                return None
            return max(0.0, self._due_time - self._clock())

    def is_pending(self) -> bool:
        with self._lock:
            return self._due_time is not None

    def status(self) -> dict:
        """Get timer status for the API.

        Returns:
            Dict with pending, duration, remaining and generation.
        """
        with self._lock:
            pending = self._due_time is not None
            remaining = max(0.0, self._due_time - self._clock()) if pending else None
            return {
                "pending": pending,
                "duration": self._duration if pending else None,
                "remaining": remaining,
                "generation": self._generation,
            }

    def register_callback(self, callback: Callable[[float], None]) -> None:
        """Register a completion callback.

        Args:
            callback: Called with the original duration when a timer completes.
        """
        self._callbacks.append(callback)

    def unregister_callback(self, callback: Callable[[float], None]) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _dispose_locked(self) -> None:
        """Dispose the pending handle. Caller holds the lock."""
        if self._handle is None:
            return
        try:
            self._executor.dispose(self._handle)
        except Exception as e:
            # The generation bump still suppresses the old callback
            logger.warning("Failed to dispose timer handle: %s", e)
        self._handle = None

    def _on_elapsed(self, generation: int) -> None:
        """Completion callback, run by the executor."""
        with self._lock:
            if generation != self._generation or self._due_time is None:
                logger.debug(
                    "Ignoring stale timer callback (generation %d, current %d)",
                    generation,
                    self._generation,
                )
                return
            duration = self._duration
            self._handle = None
            self._due_time = None

        logger.info("Timer completed: %s", format_duration(duration))

        body = self._body.replace("{duration}", format_duration(duration))
        try:
            self._notifier.notify(self._title, body)
        except Exception as e:
            logger.error("Timer notification error: %s", e)

        for callback in list(self._callbacks):
            try:
                callback(duration)
            except Exception as e:
                logger.error("Timer on_complete error: %s", e)

"""Timer/Stopwatch Service - Search and command dispatch.

Owns one CountdownScheduler and one ElapsedAccumulator for its lifetime
and is the only thing the web layer talks to. State changes are reported
to registered callbacks as (event_name, data) pairs.
"""

import logging
from collections.abc import Callable, Iterable

from chronodeck.core.commands import (
    STOPWATCH_TAG,
    TIMER_TAG,
    Command,
    CommandAction,
    HandleResult,
    Suggestion,
    build_stopwatch_suggestions,
    build_timer_suggestions,
    rank,
)
from chronodeck.core.countdown import CountdownScheduler
from chronodeck.core.durations import format_duration, format_stopwatch
from chronodeck.core.notifications import Notifier, create_notifier
from chronodeck.core.settings import Settings
from chronodeck.core.stopwatch import ElapsedAccumulator

logger = logging.getLogger(__name__)

StateCallback = Callable[[str, dict], None]


class TimerStopwatchService:
    """Timer and stopwatch behind one command surface."""

    def __init__(
        self,
        scheduler: CountdownScheduler | None = None,
        stopwatch: ElapsedAccumulator | None = None,
        notifier: Notifier | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize the service.

        Args:
            scheduler: Countdown scheduler. Built from settings if omitted.
            stopwatch: Stopwatch. A fresh one is created if omitted.
            notifier: Notifier for a scheduler built here (default: from settings).
            settings: Settings used when building defaults.
        """
        self._settings = settings or Settings()
        self._callbacks: list[StateCallback] = []

        if scheduler is None:
            if notifier is None:
                notifier = create_notifier(self._settings.notifiers, self._settings.app_name)
            scheduler = CountdownScheduler(
                notifier=notifier,
                title=self._settings.notification_title,
                body=self._settings.notification_body,
            )
        self._scheduler = scheduler
        self._scheduler.register_callback(self._on_timer_complete)
        self._stopwatch = stopwatch if stopwatch is not None else ElapsedAccumulator()

        self._handlers: dict[CommandAction, Callable[[Command], HandleResult]] = {
            CommandAction.START_TIMER: lambda cmd: HandleResult(self.start_timer(cmd.duration), False),
            CommandAction.CANCEL_TIMER: lambda cmd: HandleResult(self.cancel_timer(), False),
            CommandAction.START_STOPWATCH: lambda cmd: HandleResult(self.start_stopwatch(), True),
            CommandAction.STOP_STOPWATCH: lambda cmd: HandleResult(self.stop_stopwatch(), True),
            CommandAction.RESET_STOPWATCH: lambda cmd: HandleResult(self.reset_stopwatch(), True),
        }

    @property
    def scheduler(self) -> CountdownScheduler:
        return self._scheduler

    @property
    def stopwatch(self) -> ElapsedAccumulator:
        return self._stopwatch

    @property
    def settings(self) -> Settings:
        return self._settings

    # -------------------------------------------------------------------------
    # Search
    # -------------------------------------------------------------------------

    def search(self, text: str, tags: Iterable[str] | None) -> list[Suggestion]:
        """Suggest commands for search text.

        The stopwatch tag takes priority over the timer tag. With neither
        tag there are no results.

        Args:
            text: Search text.
            tags: Active search tags (case-insensitive).

        Returns:
            Suggestions ranked by descending score.
        """
        active = {tag.lower() for tag in (tags or [])}

        if STOPWATCH_TAG in active:
            running, elapsed = self._stopwatch.snapshot()
            return rank(build_stopwatch_suggestions(text, elapsed, running))

        if TIMER_TAG in active:
            return rank(build_timer_suggestions(text, self._scheduler.remaining()))

        return []

    def handle(self, command: Command) -> HandleResult:
        """Execute a command.

        Returns:
            HandleResult; handled is False for a declined timer start.
        """
        handler = self._handlers.get(command.action)
        if handler is None:
            logger.warning("Unknown command action: %s", command.action)
            return HandleResult(False, False)
        return handler(command)

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    def start_timer(self, seconds: float) -> bool:
        if not self._scheduler.start(seconds):
            return False
        self._notify("timer_started", {"duration": seconds, "display": format_duration(seconds)})
        return True

    def cancel_timer(self) -> bool:
        """Cancel the pending timer. Succeeds when idle too."""
        self.cancel_pending_timer()
        return True

    def cancel_pending_timer(self) -> bool:
        """Cancel the pending timer.

        Returns:
            True if a pending timer was cancelled; timer_cancelled is only
            emitted in that case.
        """
        if not self._scheduler.cancel_pending():
            return False
        self._notify("timer_cancelled", {})
        return True

    def start_stopwatch(self) -> bool:
        self._stopwatch.start()
        self._notify_stopwatch()
        return True

    def stop_stopwatch(self) -> bool:
        self._stopwatch.stop()
        self._notify_stopwatch()
        return True

    def reset_stopwatch(self) -> bool:
        self._stopwatch.reset()
        self._notify_stopwatch()
        return True

    def timer_status(self) -> dict:
        status = self._scheduler.status()
        remaining = status["remaining"]
        status["display"] = format_duration(remaining) if remaining is not None else None
        return status

    def stopwatch_status(self) -> dict:
        running, elapsed = self._stopwatch.snapshot()
        return {"running": running, "elapsed": elapsed, "display": format_stopwatch(elapsed)}

    def status(self) -> dict:
        """Get status of both the timer and the stopwatch."""
        return {"timer": self.timer_status(), "stopwatch": self.stopwatch_status()}

    def shutdown(self) -> None:
        """Cancel any pending timer (call on app shutdown)."""
        self._scheduler.cancel()
        logger.info("Timer/stopwatch service stopped")

    # -------------------------------------------------------------------------
    # Callbacks
    # -------------------------------------------------------------------------

    def register_callback(self, callback: StateCallback) -> None:
        """Register callback for state changes.

        Args:
            callback: Called with (event_name, data).
        """
        self._callbacks.append(callback)

    def unregister_callback(self, callback: StateCallback) -> None:
        if callback in self._callbacks:
            self._callbacks.remove(callback)

    def _on_timer_complete(self, duration: float) -> None:
        self._notify("timer_finished", {"duration": duration, "display": format_duration(duration)})

    def _notify_stopwatch(self) -> None:
        self._notify("stopwatch_changed", self.stopwatch_status())

    def _notify(self, event: str, data: dict) -> None:
        for callback in list(self._callbacks):
            try:
                callback(event, data)
            except Exception as e:
                logger.error("State callback error (%s): %s", event, e)

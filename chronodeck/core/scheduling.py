"""Delayed execution - Fire-once, cancelable callbacks.

The countdown scheduler never sleeps itself. It hands a callback and a
token to a DelayedExecutor and keeps the returned handle so it can be
disposed later. Callbacks may run on any thread.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from threading import Timer
from typing import Any

logger = logging.getLogger(__name__)


class DelayedExecutor(ABC):
    """Abstract fire-once scheduler."""

    @abstractmethod
    def schedule(self, delay: float, callback: Callable[[int], Any], token: int) -> Any:
        """Run callback(token) once after delay seconds.

        Must not invoke the callback synchronously from inside schedule().

        Args:
            delay: Seconds to wait before firing.
            callback: Function to call with the token.
            token: Value passed back to the callback.

        Returns:
            Opaque handle accepted by dispose().
        """
        ...

    @abstractmethod
    def dispose(self, handle: Any) -> None:
        """Cancel a scheduled callback.

        Must be safe to call on a handle that already fired or was
        already disposed.
        """
        ...


class ThreadTimerExecutor(DelayedExecutor):
    """DelayedExecutor backed by threading.Timer (one daemon thread per timer)."""

    def __init__(self, thread_name: str = "countdown"):
        """Initialize executor.

        Args:
            thread_name: Prefix for timer thread names.
        """
        self._thread_name = thread_name

    def schedule(self, delay: float, callback: Callable[[int], Any], token: int) -> Timer:
        timer = Timer(delay, callback, args=[token])
        timer.daemon = True
        timer.name = f"{self._thread_name}-{token}"
        timer.start()
        logger.debug("Scheduled %s in %.3fs", timer.name, delay)
        return timer

    def dispose(self, handle: Timer) -> None:
        # Timer.cancel() is a no-op once the timer has fired
        handle.cancel()

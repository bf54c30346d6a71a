"""Deterministic clock and executor doubles for scheduler tests."""

from dataclasses import dataclass
from typing import Any, Callable

from chronodeck.core.scheduling import DelayedExecutor


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class ScheduledCall:
    delay: float
    callback: Callable[[int], Any]
    token: int
    disposed: bool = False
    fired: bool = False


class ManualExecutor(DelayedExecutor):
    """Records scheduled callbacks; tests fire them explicitly."""

    def __init__(self):
        self.calls: list[ScheduledCall] = []

    def schedule(self, delay, callback, token):
        call = ScheduledCall(delay, callback, token)
        self.calls.append(call)
        return call

    def dispose(self, handle: ScheduledCall) -> None:
        handle.disposed = True

    @property
    def pending(self) -> list[ScheduledCall]:
        return [c for c in self.calls if not c.disposed and not c.fired]

    def fire(self, call: ScheduledCall) -> None:
        """Run a callback even if disposed (simulates a late firing)."""
        call.fired = True
        call.callback(call.token)

    def fire_pending(self) -> None:
        for call in self.pending:
            self.fire(call)

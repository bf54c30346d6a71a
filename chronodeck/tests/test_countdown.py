"""Tests for chronodeck.core.countdown: Countdown Scheduler."""

import threading
import time
from unittest.mock import MagicMock

import pytest

from chronodeck.core.countdown import CountdownScheduler
from chronodeck.tests.fakes import FakeClock, ManualExecutor


class TestCountdownScheduler:
    def setup_method(self):
        self.clock = FakeClock()
        self.executor = ManualExecutor()
        self.notifier = MagicMock()
        self.on_complete = MagicMock()
        self.scheduler = CountdownScheduler(
            notifier=self.notifier,
            executor=self.executor,
            clock=self.clock,
            on_complete=self.on_complete,
        )

    def test_idle_by_default(self):
        """New scheduler has no pending timer."""
        assert self.scheduler.remaining() is None
        assert self.scheduler.is_pending() is False
        assert self.scheduler.generation == 0

    def test_start_schedules_callback(self):
        """Start schedules exactly one callback for the full duration."""
        assert self.scheduler.start(90) is True
        assert len(self.executor.calls) == 1
        assert self.executor.calls[0].delay == 90
        assert self.executor.calls[0].token == self.scheduler.generation

    def test_remaining_right_after_start(self):
        """Remaining equals the duration before the clock moves."""
        self.scheduler.start(90)
        assert self.scheduler.remaining() == pytest.approx(90)

    def test_remaining_decreases_with_clock(self):
        """Remaining follows the clock."""
        self.scheduler.start(90)
        self.clock.advance(30)
        assert self.scheduler.remaining() == pytest.approx(60)

    def test_remaining_never_negative(self):
        """Remaining is clamped at zero past the due time."""
        self.scheduler.start(10)
        self.clock.advance(25)
        assert self.scheduler.remaining() == 0.0

    @pytest.mark.parametrize("seconds", [0, -5, float("nan"), float("inf"), "abc", None])
    def test_start_rejects_invalid_duration(self, seconds):
        """Non-positive, non-finite and non-numeric durations are declined."""
        assert self.scheduler.start(seconds) is False
        assert self.executor.calls == []
        assert self.scheduler.generation == 0

    def test_rejected_start_keeps_pending_timer(self):
        """A declined start does not touch the pending timer."""
        self.scheduler.start(60)
        generation = self.scheduler.generation

        assert self.scheduler.start(0) is False
        assert self.scheduler.generation == generation
        assert self.scheduler.remaining() == pytest.approx(60)
        assert self.executor.calls[0].disposed is False

    def test_start_rejects_duration_beyond_timeout_max(self):
        """Durations the executor cannot wait for are declined."""
        assert self.scheduler.start(threading.TIMEOUT_MAX * 2) is False

    def test_completion_notifies_with_duration(self):
        """Firing the current timer sends one notification."""
        self.scheduler.start(90)
        self.executor.fire_pending()

        self.notifier.notify.assert_called_once_with(
            "Timer finished", "Your 1:30 timer is done."
        )
        self.on_complete.assert_called_once_with(90.0)
        assert self.scheduler.remaining() is None

    def test_restart_supersedes_previous_timer(self):
        """Starting again disposes the old handle and bumps the generation."""
        self.scheduler.start(60)
        first = self.executor.calls[0]
        self.scheduler.start(30)

        assert first.disposed is True
        assert self.scheduler.generation == 2
        assert self.scheduler.remaining() == pytest.approx(30)

    def test_superseded_callback_is_ignored(self):
        """Old timer firing after replacement produces no notification."""
        self.scheduler.start(60)
        first = self.executor.calls[0]
        self.scheduler.start(30)

        self.executor.fire(first)

        self.notifier.notify.assert_not_called()
        self.on_complete.assert_not_called()
        assert self.scheduler.remaining() == pytest.approx(30)

    def test_only_latest_timer_notifies(self):
        """After two starts exactly one notification is sent."""
        self.scheduler.start(60)
        self.scheduler.start(30)
        for call in list(self.executor.calls):
            self.executor.fire(call)

        assert self.notifier.notify.call_count == 1
        self.on_complete.assert_called_once_with(30.0)

    def test_cancel_clears_pending_timer(self):
        """Cancel disposes the handle and clears the due time."""
        self.scheduler.start(60)
        assert self.scheduler.cancel() is True

        assert self.executor.calls[0].disposed is True
        assert self.scheduler.remaining() is None
        assert self.scheduler.generation == 2

    def test_cancelled_callback_is_ignored(self):
        """A callback racing a cancel is suppressed by generation."""
        self.scheduler.start(60)
        self.scheduler.cancel()
        self.executor.fire(self.executor.calls[0])

        self.notifier.notify.assert_not_called()

    def test_cancel_when_idle(self):
        """Cancel with nothing pending succeeds and does not raise."""
        assert self.scheduler.cancel() is True
        assert self.scheduler.remaining() is None
        assert self.scheduler.generation == 1

    def test_cancel_pending_reports_superseded_timer(self):
        self.scheduler.start(60)
        assert self.scheduler.cancel_pending() is True
        assert self.scheduler.cancel_pending() is False
        assert self.scheduler.generation == 3

    def test_cancel_pending_after_completion(self):
        """A timer that already fired is not reported as cancelled."""
        self.scheduler.start(5)
        self.executor.fire_pending()
        assert self.scheduler.cancel_pending() is False
        assert self.scheduler.cancel() is True

    def test_callback_fires_at_most_once(self):
        """Firing the same callback twice notifies once."""
        self.scheduler.start(5)
        call = self.executor.calls[0]
        self.executor.fire(call)
        self.executor.fire(call)

        assert self.notifier.notify.call_count == 1

    def test_notifier_error_does_not_propagate(self):
        """Notification failure is swallowed; on_complete still runs."""
        self.notifier.notify.side_effect = RuntimeError("boom")
        self.scheduler.start(5)
        self.executor.fire_pending()

        self.on_complete.assert_called_once_with(5.0)
        # Still usable afterwards
        assert self.scheduler.start(10) is True

    def test_on_complete_error_does_not_propagate(self):
        """on_complete failure is swallowed."""
        self.on_complete.side_effect = RuntimeError("boom")
        self.scheduler.start(5)
        self.executor.fire_pending()
        assert self.scheduler.remaining() is None

    def test_registered_callbacks_run_in_order(self):
        order = []
        self.on_complete.side_effect = lambda d: order.append("ctor")
        self.scheduler.register_callback(lambda d: order.append("registered"))
        self.scheduler.start(5)
        self.executor.fire_pending()
        assert order == ["ctor", "registered"]

    def test_unregister_callback(self):
        extra = MagicMock()
        self.scheduler.register_callback(extra)
        self.scheduler.unregister_callback(extra)
        self.scheduler.unregister_callback(extra)
        self.scheduler.start(5)
        self.executor.fire_pending()
        extra.assert_not_called()

    def test_dispose_error_is_tolerated(self):
        """A failing dispose does not stop a restart."""
        self.executor.dispose = MagicMock(side_effect=RuntimeError("gone"))
        self.scheduler.start(60)
        assert self.scheduler.start(30) is True
        assert self.scheduler.remaining() == pytest.approx(30)

    def test_schedule_error_declines_start(self):
        """If the executor cannot schedule, start reports failure and stays idle."""
        self.executor.schedule = MagicMock(side_effect=RuntimeError("no threads"))
        assert self.scheduler.start(60) is False
        assert self.scheduler.remaining() is None

    def test_custom_title_and_body(self):
        """Notification text is configurable."""
        scheduler = CountdownScheduler(
            notifier=self.notifier,
            executor=self.executor,
            clock=self.clock,
            title="Done",
            body="{duration} elapsed",
        )
        scheduler.start(45)
        self.executor.fire_pending()
        self.notifier.notify.assert_called_once_with("Done", "45s elapsed")

    def test_status(self):
        """status() reports pending timer details."""
        self.scheduler.start(120)
        self.clock.advance(20)
        status = self.scheduler.status()

        assert status["pending"] is True
        assert status["duration"] == 120
        assert status["remaining"] == pytest.approx(100)
        assert status["generation"] == 1

    def test_status_idle(self):
        status = self.scheduler.status()
        assert status == {"pending": False, "duration": None, "remaining": None, "generation": 0}

    def test_concurrent_start_cancel_keeps_state_consistent(self):
        """Interleaved start/cancel from many threads leaves one consistent state."""
        errors = []
        starts = 0
        cancels = 0
        counter_lock = threading.Lock()

        def worker(n):
            nonlocal starts, cancels
            try:
                for i in range(50):
                    if (n + i) % 3 == 0:
                        self.scheduler.cancel()
                        with counter_lock:
                            cancels += 1
                    else:
                        assert self.scheduler.start(10 + i)
                        with counter_lock:
                            starts += 1
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert self.scheduler.generation == starts + cancels
        # At most one handle left undisposed
        assert len(self.executor.pending) <= 1
        if self.scheduler.is_pending():
            assert len(self.executor.pending) == 1
            assert self.executor.pending[0].token == self.scheduler.generation


class TestCountdownSchedulerRealTimer:
    """Uses the default threading.Timer executor."""

    def setup_method(self):
        self.scheduler = None

    def teardown_method(self):
        if self.scheduler is not None:
            self.scheduler.cancel()

    def test_fires_on_background_thread(self):
        """Completion runs after the delay on another thread."""
        done = threading.Event()
        threads = []

        def on_complete(duration):
            threads.append(threading.current_thread())
            done.set()

        self.scheduler = CountdownScheduler(notifier=MagicMock(), on_complete=on_complete)
        self.scheduler.start(0.05)

        assert done.wait(timeout=5)
        assert threads[0] is not threading.main_thread()
        assert self.scheduler.remaining() is None

    def test_cancel_prevents_completion(self):
        """A cancelled real timer never notifies."""
        notifier = MagicMock()
        self.scheduler = CountdownScheduler(notifier=notifier)
        self.scheduler.start(0.1)
        self.scheduler.cancel()
        time.sleep(0.3)
        notifier.notify.assert_not_called()

    def test_replacement_notifies_once(self):
        """Replacing a short timer yields only the replacement's notification."""
        notifier = MagicMock()
        completed = []
        done = threading.Event()

        def on_complete(duration):
            completed.append(duration)
            done.set()

        self.scheduler = CountdownScheduler(notifier=notifier, on_complete=on_complete)
        self.scheduler.start(0.05)
        self.scheduler.start(0.15)

        assert done.wait(timeout=5)
        time.sleep(0.1)
        notifier.notify.assert_called_once()
        assert completed == [0.15]

"""Tests for chronodeck.core.notifications."""

from unittest.mock import MagicMock, patch

from chronodeck.core.notifications import (
    DesktopNotifier,
    LogNotifier,
    MultiNotifier,
    create_notifier,
)


class TestMultiNotifier:
    def test_fans_out(self):
        a, b = MagicMock(), MagicMock()
        MultiNotifier([a, b]).notify("T", "B")
        a.notify.assert_called_once_with("T", "B")
        b.notify.assert_called_once_with("T", "B")

    def test_failure_does_not_stop_others(self):
        """One failing notifier does not block the rest or raise."""
        bad = MagicMock()
        bad.notify.side_effect = RuntimeError("boom")
        good = MagicMock()
        MultiNotifier([bad, good]).notify("T", "B")
        good.notify.assert_called_once_with("T", "B")

    def test_empty(self):
        MultiNotifier([]).notify("T", "B")


class TestDesktopNotifier:
    @patch("chronodeck.core.notifications.HAS_PLYER", True)
    @patch("chronodeck.core.notifications.plyer_notification")
    def test_calls_plyer(self, mock_plyer):
        DesktopNotifier(app_name="Test", timeout=3).notify("Timer finished", "Done")
        mock_plyer.notify.assert_called_once_with(
            title="Timer finished", message="Done", app_name="Test", timeout=3
        )

    @patch("chronodeck.core.notifications.HAS_PLYER", False)
    def test_without_plyer_is_noop(self):
        DesktopNotifier().notify("T", "B")


class TestLogNotifier:
    def test_logs(self, caplog):
        with caplog.at_level("INFO", logger="chronodeck.core.notifications"):
            LogNotifier().notify("Timer finished", "Your 5s timer is done.")
        assert "Your 5s timer is done." in caplog.text


class TestCreateNotifier:
    def test_known_names(self):
        notifier = create_notifier(["log", "desktop"])
        kinds = [type(n) for n in notifier.notifiers]
        assert kinds == [LogNotifier, DesktopNotifier]

    def test_unknown_name_skipped(self):
        notifier = create_notifier(["log", "pager"])
        assert [type(n) for n in notifier.notifiers] == [LogNotifier]

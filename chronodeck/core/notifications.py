"""Notifications - Where "timer finished" messages go.

A Notifier takes a title and a body. Callers treat every notifier as
unreliable: failures are logged and never reach the timer.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable

logger = logging.getLogger(__name__)

# Optional dependency - desktop notifications via plyer
try:
    from plyer import notification as plyer_notification

    HAS_PLYER = True
except ImportError:
    plyer_notification = None
    HAS_PLYER = False


class Notifier(ABC):
    """Abstract notification sink."""

    @abstractmethod
    def notify(self, title: str, body: str) -> None:
        """Deliver a notification. May raise; callers catch."""
        ...

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class LogNotifier(Notifier):
    """Writes notifications to the log."""

    def notify(self, title: str, body: str) -> None:
        logger.info("%s: %s", title, body)


class DesktopNotifier(Notifier):
    """Shows an OS desktop notification through plyer.

    Config example:
    {
        "notifiers": ["desktop"],
        "app_name": "Chrono Deck"
    }
    """

    def __init__(self, app_name: str = "Chrono Deck", timeout: int = 10):
        """Initialize desktop notifier.

        Args:
            app_name: Application name shown by the OS.
            timeout: Seconds the notification stays visible (ignored on some platforms).
        """
        self._app_name = app_name
        self._timeout = timeout

    def notify(self, title: str, body: str) -> None:
        if not HAS_PLYER:
            logger.warning("plyer not installed - desktop notification skipped")
            return
        plyer_notification.notify(
            title=title,
            message=body,
            app_name=self._app_name,
            timeout=self._timeout,
        )


class MultiNotifier(Notifier):
    """Fans a notification out to several notifiers.

    One failing notifier does not stop the others.
    """

    def __init__(self, notifiers: Iterable[Notifier]):
        self._notifiers = list(notifiers)

    @property
    def notifiers(self) -> list[Notifier]:
        return list(self._notifiers)

    def notify(self, title: str, body: str) -> None:
        for notifier in self._notifiers:
            try:
                notifier.notify(title, body)
            except Exception as e:
                logger.error("Notifier %r failed: %s", notifier, e)

    def __repr__(self) -> str:
        return f"MultiNotifier({self._notifiers!r})"


def create_notifier(names: Iterable[str], app_name: str = "Chrono Deck") -> Notifier:
    """Build a notifier from config names.

    Args:
        names: Notifier names, e.g. ["log", "desktop"].
        app_name: Application name for desktop notifications.

    Returns:
        MultiNotifier over every recognised name (possibly empty).
    """
    notifiers: list[Notifier] = []
    for name in names:
        if name == "log":
            notifiers.append(LogNotifier())
        elif name == "desktop":
            notifiers.append(DesktopNotifier(app_name=app_name))
        else:
            logger.warning("Unknown notifier: %s", name)
    return MultiNotifier(notifiers)

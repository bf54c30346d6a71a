"""Commands - Turn search text into ranked command suggestions.

The builders here are pure: they take the text plus the current timer or
stopwatch readings and return suggestions. TimerStopwatchService supplies
the readings and executes whichever command is picked.
"""

from dataclasses import dataclass
from enum import Enum

from chronodeck.core.durations import format_duration, format_stopwatch, parse_duration

TIMER_TAG = "timer"
STOPWATCH_TAG = "stopwatch"

# Relevance scores (higher ranks first)
SCORE_EXPLICIT = 10.0
SCORE_CANCEL_EXPLICIT = 8.0
SCORE_PRIMARY = 8.0
SCORE_SECONDARY = 7.0
SCORE_CANCEL_IMPLICIT = 6.0


class CommandAction(str, Enum):
    """Actions a suggestion can carry."""

    START_TIMER = "start_timer"
    CANCEL_TIMER = "cancel_timer"
    START_STOPWATCH = "start_stopwatch"
    STOP_STOPWATCH = "stop_stopwatch"
    RESET_STOPWATCH = "reset_stopwatch"


@dataclass(frozen=True)
class Command:
    """An action plus its duration (seconds, only used by START_TIMER)."""

    action: CommandAction
    duration: float = 0.0

    @property
    def object_id(self) -> str:
        """Stable identifier for de-duplicating results."""
        return f"{self.action.value}:{self.duration:g}"


@dataclass(frozen=True)
class Suggestion:
    """A ranked search result."""

    label: str
    detail: str
    command: Command
    score: float
    tag: str = TIMER_TAG

    def to_dict(self) -> dict:
        return {
            "label": self.label,
            "detail": self.detail,
            "action": self.command.action.value,
            "duration": self.command.duration,
            "score": self.score,
            "tag": self.tag,
            "id": self.command.object_id,
        }


@dataclass(frozen=True)
class HandleResult:
    """Outcome of executing a command.

    Attributes:
        handled: True if the command ran.
        keep_open: True if a launcher UI should stay open (stopwatch
            commands, so the live value stays visible).
    """

    handled: bool
    keep_open: bool = False


def rank(suggestions: list[Suggestion]) -> list[Suggestion]:
    """Sort by descending score. Ties keep insertion order (sorted() is stable)."""
    return sorted(suggestions, key=lambda s: -s.score)


def _starts_with(text: str, *prefixes: str) -> bool:
    lowered = text.lower()
    return any(lowered.startswith(prefix) for prefix in prefixes)


def build_timer_suggestions(text: str, remaining: float | None) -> list[Suggestion]:
    """Build timer suggestions for search text.

    Args:
        text: Search text (without the tag).
        remaining: Seconds left on the pending timer, or None when idle.

    Returns:
        Suggestions in insertion order (unranked).
    """
    normalized = (text or "").strip()
    suggestions: list[Suggestion] = []

    if _starts_with(normalized, "cancel", "stop"):
        if remaining is not None:
            suggestions.append(
                Suggestion(
                    label="Cancel running timer",
                    detail=f"Remaining: {format_duration(remaining)}",
                    command=Command(CommandAction.CANCEL_TIMER),
                    score=SCORE_CANCEL_EXPLICIT,
                )
            )
        return suggestions

    duration = parse_duration(normalized)
    if duration is not None:
        suggestions.append(
            Suggestion(
                label=f"Start timer for {format_duration(duration)}",
                detail="Press Enter to start countdown",
                command=Command(CommandAction.START_TIMER, duration),
                score=SCORE_EXPLICIT,
            )
        )

    if remaining is not None:
        suggestions.append(
            Suggestion(
                label=f"Cancel timer ({format_duration(remaining)} left)",
                detail="Stop the currently running timer",
                command=Command(CommandAction.CANCEL_TIMER),
                score=SCORE_CANCEL_IMPLICIT,
            )
        )

    return suggestions


def _stopwatch(label: str, detail: str, action: CommandAction, score: float) -> Suggestion:
    return Suggestion(
        label=label,
        detail=detail,
        command=Command(action),
        score=score,
        tag=STOPWATCH_TAG,
    )


def build_stopwatch_suggestions(text: str, elapsed: float, running: bool) -> list[Suggestion]:
    """Build stopwatch suggestions for search text.

    Args:
        text: Search text (without the tag).
        elapsed: Current elapsed seconds.
        running: Whether the stopwatch is running.

    Returns:
        Suggestions in insertion order (unranked).
    """
    normalized = (text or "").strip()
    shown = format_stopwatch(elapsed)

    if _starts_with(normalized, "start"):
        return [
            _stopwatch("Start stopwatch", f"Current elapsed: {shown}",
                       CommandAction.START_STOPWATCH, SCORE_EXPLICIT)
        ]

    if _starts_with(normalized, "stop", "pause"):
        return [
            _stopwatch("Stop stopwatch", f"Current elapsed: {shown}",
                       CommandAction.STOP_STOPWATCH, SCORE_EXPLICIT)
        ]

    if _starts_with(normalized, "reset", "clear"):
        return [
            _stopwatch("Reset stopwatch", f"Current elapsed: {shown}",
                       CommandAction.RESET_STOPWATCH, SCORE_EXPLICIT)
        ]

    if running:
        return [
            _stopwatch("Stop stopwatch", f"Running: {shown}",
                       CommandAction.STOP_STOPWATCH, SCORE_PRIMARY),
            _stopwatch("Reset stopwatch", f"Running: {shown}",
                       CommandAction.RESET_STOPWATCH, SCORE_SECONDARY),
        ]

    suggestions = [
        _stopwatch("Start stopwatch", f"Elapsed: {shown}",
                   CommandAction.START_STOPWATCH, SCORE_PRIMARY)
    ]
    if elapsed > 0:
        suggestions.append(
            _stopwatch("Reset stopwatch", f"Elapsed: {shown}",
                       CommandAction.RESET_STOPWATCH, SCORE_SECONDARY)
        )
    return suggestions

"""Duration parsing and display formatting.

Parses what people type into a search box ("1:30", "2h 5m", "90") into
seconds, and formats seconds back for result labels and the stopwatch.
"""

import math
import re
import threading

# <integer><unit> tokens. Longer unit spellings come first so "hours" is not
# read as "h" followed by leftover text; the lookahead keeps "5min" from
# matching as "5m" + "in".
_UNIT_TOKEN = re.compile(
    r"(?P<value>\d+)\s*"
    r"(?P<unit>hours|hour|hrs|hr|h|minutes|minute|mins|min|m|seconds|second|secs|sec|s)"
    r"(?![a-z])",
    re.IGNORECASE,
)

_BARE_NUMBER = re.compile(r"[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:e[+-]?\d+)?", re.IGNORECASE)

# Longest countdown a timer thread can wait for
MAX_DURATION = threading.TIMEOUT_MAX

_UNIT_SECONDS = {"h": 3600, "m": 60, "s": 1}


def parse_clock_format(text: str) -> float | None:
    """Parse "H:MM:SS" or "MM:SS" into seconds.

    Args:
        text: Input text. Parts are trimmed and empty parts dropped.

    Returns:
        Seconds (may be zero, negative or infinite), or None if text is not
        clock-shaped.
    """
    parts = [part.strip() for part in text.split(":")]
    parts = [part for part in parts if part]
    if len(parts) < 2 or len(parts) > 3:
        return None

    try:
        values = [int(part) for part in parts]
    except ValueError:
        return None

    if len(values) == 2:
        minutes, seconds = values
        total = minutes * 60 + seconds
    else:
        hours, minutes, seconds = values
        total = hours * 3600 + minutes * 60 + seconds

    try:
        return float(total)
    except OverflowError:
        return math.inf if total > 0 else -math.inf


def parse_duration(text: str | None) -> float | None:
    """Parse a free-text countdown duration.

    Accepted forms, tried in order:
        "1:30", "1:05:00"    clock format (authoritative when clock-shaped)
        "2h 5m", "90 secs"   unit tokens, summed, must consume all input
        "90", "2.5", "1e1"   bare number of minutes

    Args:
        text: User input.

    Returns:
        Duration in seconds, or None if unparsable, not positive or longer
        than MAX_DURATION.

    Examples:
        >>> parse_duration("1:30")
        90.0
        >>> parse_duration("2h 5m")
        7500.0
        >>> parse_duration("2h 5m extra") is None
        True
    """
    if not text or not text.strip():
        return None

    text = text.strip().lower()

    clock = parse_clock_format(text)
    if clock is not None:
        return clock if 0 < clock <= MAX_DURATION else None

    matches = list(_UNIT_TOKEN.finditer(text))
    if matches:
        leftovers = _UNIT_TOKEN.sub("", text).strip()
        if leftovers:
            return None

        try:
            total = float(
                sum(
                    int(match.group("value")) * _UNIT_SECONDS[match.group("unit")[0]]
                    for match in matches
                )
            )
        except (OverflowError, ValueError):
            return None
        return total if 0 < total <= MAX_DURATION else None

    if _BARE_NUMBER.fullmatch(text):
        seconds = float(text) * 60
        if math.isfinite(seconds) and 0 < seconds <= MAX_DURATION:
            return seconds

    return None


def format_duration(seconds: float) -> str:
    """Format a countdown duration for labels.

    "1:02:05" at an hour or more, "2:05" at a minute or more, otherwise
    whole seconds rounded up with a floor of one ("45s", "1s").
    """
    if seconds >= 3600:
        hours, rest = divmod(int(seconds), 3600)
        minutes, secs = divmod(rest, 60)
        return f"{hours}:{minutes:02d}:{secs:02d}"
    if seconds >= 60:
        minutes, secs = divmod(int(seconds), 60)
        return f"{minutes}:{secs:02d}"
    return f"{max(1, math.ceil(seconds))}s"


def format_stopwatch(seconds: float) -> str:
    """Format stopwatch elapsed time with tenths ("0:07.3", "1:02:05.4")."""
    tenths_total = int(max(0.0, seconds) * 10)
    whole, tenths = divmod(tenths_total, 10)
    if whole >= 3600:
        hours, rest = divmod(whole, 3600)
        minutes, secs = divmod(rest, 60)
        return f"{hours}:{minutes:02d}:{secs:02d}.{tenths}"
    minutes, secs = divmod(whole, 60)
    return f"{minutes}:{secs:02d}.{tenths}"

"""Settings - Load and validate the JSON config file."""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = Path(__file__).parent.parent / "config" / "default.json"

KNOWN_NOTIFIERS = ("log", "desktop")


class ConfigValidationError(Exception):
    """Raised when config validation fails."""

    pass


@dataclass
class Settings:
    """Service settings."""

    host: str = "127.0.0.1"
    port: int = 8421
    tick_interval: float = 0.1
    notifiers: list[str] = field(default_factory=lambda: ["log", "desktop"])
    notification_title: str = "Timer finished"
    notification_body: str = "Your {duration} timer is done."
    app_name: str = "Chrono Deck"


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Load and validate settings from a JSON file.

    Keys missing from the file keep their defaults.

    Args:
        config_path: Path to JSON config file (default: bundled default.json).

    Returns:
        Validated Settings.

    Raises:
        ConfigValidationError: If config is invalid.
        FileNotFoundError: If config file doesn't exist.
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        try:
            raw = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigValidationError(f"Invalid JSON: {e}")

    settings = settings_from_dict(raw)
    logger.info(
        "Loaded config: %s (port %d, notifiers: %s)",
        path,
        settings.port,
        ", ".join(settings.notifiers) or "none",
    )
    return settings


def settings_from_dict(raw: dict) -> Settings:
    """Validate a config dict and build Settings.

    Raises:
        ConfigValidationError: If a value has the wrong type or range.
    """
    if not isinstance(raw, dict):
        raise ConfigValidationError("Config must be a JSON object")

    settings = Settings()

    if "host" in raw:
        if not isinstance(raw["host"], str) or not raw["host"]:
            raise ConfigValidationError(f"host must be a non-empty string, got: {raw['host']!r}")
        settings.host = raw["host"]

    if "port" in raw:
        port = raw["port"]
        if isinstance(port, bool) or not isinstance(port, int) or not 1 <= port <= 65535:
            raise ConfigValidationError(f"port must be int 1-65535, got: {port!r}")
        settings.port = port

    if "tick_interval" in raw:
        interval = raw["tick_interval"]
        if isinstance(interval, bool) or not isinstance(interval, (int, float)) or interval <= 0:
            raise ConfigValidationError(f"tick_interval must be a positive number, got: {interval!r}")
        settings.tick_interval = float(interval)

    if "notifiers" in raw:
        notifiers = raw["notifiers"]
        if not isinstance(notifiers, list) or not all(isinstance(n, str) for n in notifiers):
            raise ConfigValidationError("notifiers must be a list of strings")
        for name in notifiers:
            if name not in KNOWN_NOTIFIERS:
                logger.warning("Unknown notifier '%s', will skip", name)
        settings.notifiers = [n for n in notifiers if n in KNOWN_NOTIFIERS]

    for key in ("notification_title", "notification_body", "app_name"):
        if key in raw:
            if not isinstance(raw[key], str):
                raise ConfigValidationError(f"{key} must be a string")
            setattr(settings, key, raw[key])

    return settings

"""Chrono Deck - Countdown timer and stopwatch service.

Entry point: loads config, sets up logging and runs the API server.
"""

import argparse
import logging
import sys
from pathlib import Path

from chronodeck.core.settings import DEFAULT_CONFIG, ConfigValidationError, load_settings

logger = logging.getLogger("chronodeck")


def setup_logging(debug: bool = False) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if debug else logging.INFO
    format_str = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"
    logging.basicConfig(
        level=level,
        format=format_str,
        datefmt="%H:%M:%S",
    )
    # Reduce noise from libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("plyer").setLevel(logging.WARNING)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Chrono Deck - countdown timer and stopwatch service"
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        default=DEFAULT_CONFIG,
        help="Path to config JSON file",
    )
    parser.add_argument(
        "--host",
        help="Host to bind to (overrides config)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        help="Port to listen on (overrides config)",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success).
    """
    args = build_parser().parse_args(argv)

    setup_logging(args.debug)

    try:
        settings = load_settings(args.config)
    except (FileNotFoundError, ConfigValidationError) as e:
        logger.error("Failed to load config: %s", e)
        return 1

    if args.host:
        settings.host = args.host
    if args.port:
        settings.port = args.port

    from chronodeck.web.server import run_server

    run_server(settings)
    return 0


if __name__ == "__main__":
    sys.exit(main())

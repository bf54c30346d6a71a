"""Chrono Deck - countdown timer and stopwatch service."""

__version__ = "0.1.0"

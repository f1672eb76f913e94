"""Logging configuration helpers for the game."""

from __future__ import annotations

import logging
import os
from logging import Logger

DEBUG_ENV = "URINAL_GAME_DEBUG"


def debug_enabled() -> bool:
    return os.environ.get(DEBUG_ENV, "0").strip() == "1"


def configure_logging(*, debug: bool = False) -> Logger:
    """Configure basic logging for the application and return the package logger."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("urinal_game")

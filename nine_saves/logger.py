"""Loguru-based logging setup."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

LOG_FILE_NAME = "nine-saves.log"

_CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level:<7}</level> | {message}"
_FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level:<7} | {name}:{line} | {message}"


def setup_logger(log_dir: Path | None = None, debug: bool = False) -> Path | None:
    """Replace loguru's default sink with ours.

    The console shows INFO and up (DEBUG with *debug*). When *log_dir* is
    given, everything from DEBUG up also goes to a rotating file there,
    whose path is returned.
    """
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if debug else "INFO",
        format=_CONSOLE_FORMAT,
        colorize=True,
    )
    if log_dir is None:
        return None

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / LOG_FILE_NAME
    logger.add(
        str(log_file),
        level="DEBUG",
        format=_FILE_FORMAT,
        rotation="5 MB",
        retention="7 days",
        encoding="utf-8",
    )
    logger.debug(f"Logging to {log_file}")
    return log_file

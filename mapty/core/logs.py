"""Logging setup."""

from __future__ import annotations

import sys

from loguru import logger

LOG_FORMAT = "{time:HH:mm:ss} | {level: <7} | {name}:{line} - {message}"


def configure_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(sys.stderr, level=level.upper(), format=LOG_FORMAT)

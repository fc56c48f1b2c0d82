"""Logging helpers."""

from __future__ import annotations

import logging

DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
ROOT_LOGGER = "synthchar"


def configure_logging(level: int | str = logging.WARNING) -> logging.Logger:
    """Attach a single stream handler to the package logger."""
    logger = logging.getLogger(ROOT_LOGGER)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
        logger.addHandler(handler)
    if isinstance(level, str):
        level = level.upper()
    logger.setLevel(level)
    return logger


__all__ = ["configure_logging", "DEFAULT_FORMAT"]

"""Logging setup for the publisher service."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pmtiles_publisher.core import config

LOGGER_NAME = "pmtiles_publisher"
LOG_FORMAT = "[%(levelname)s] %(asctime)s | %(name)s | %(message)s"


def configure_logging(settings: config.Settings) -> logging.Logger:
    """Attach a single stream handler to the package logger.

    Calling this more than once (e.g. one app per test) keeps the
    existing handler and only updates the level.

    Args:
        settings: Application settings providing log_level.

    Returns:
        The configured package logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(settings.log_level.upper())
    if logger.handlers:
        return logger

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)

    return logger

"""Tests for the package logger setup."""

from __future__ import annotations

import logging

from pmtiles_publisher.core import config
from pmtiles_publisher.core import logging as app_logging


def test_configure_logging_is_idempotent() -> None:
    settings = config.Settings(log_level="debug")

    first = app_logging.configure_logging(settings)
    second = app_logging.configure_logging(settings)

    assert first is second
    assert first.name == "pmtiles_publisher"
    assert len(first.handlers) == 1
    assert first.level == logging.DEBUG
    formatter = first.handlers[0].formatter
    assert formatter is not None
    assert formatter._fmt == app_logging.LOG_FORMAT

    app_logging.configure_logging(config.Settings(log_level="INFO"))

"""Logging setup for the API process."""

from __future__ import annotations

import logging
from logging import Logger

import config


def configure_logging() -> Logger:
    """Configure root logging once and return the application logger."""
    logging.basicConfig(
        level=getattr(logging, config.LOG_LEVEL, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    return logging.getLogger("askpulse")

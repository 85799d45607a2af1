"""Logging setup for the API process and the CLI."""

import logging
import sys

from tradescout.config import settings

_NOISY_LOGGERS = ("httpx", "apscheduler", "yfinance", "peewee", "telegram")


def setup_logging(level: str | None = None):
    """Configure the root logger with a single stdout handler."""
    level_name = (level or settings.log_level).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level_name, logging.INFO))

    for handler in root.handlers[:]:
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    ))
    root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

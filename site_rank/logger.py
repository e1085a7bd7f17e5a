# === FILE: site_rank/logger.py ===
"""Logging setup for SiteRank: one named logger, stderr plus an optional rotating file."""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, Union

LOGGER_NAME: Final[str] = "SiteRank"
_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


def _formatted(handler: logging.Handler, fmt: str) -> logging.Handler:
    handler.setFormatter(logging.Formatter(fmt))
    return handler


def init_logging(
    level: Union[int, str] = "INFO",
    log_file: str | Path | None = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Replace the handlers of the project logger; stdout stays free for ranking output."""
    lg = logging.getLogger(LOGGER_NAME)
    lg.setLevel(level)
    lg.handlers.clear()
    lg.addHandler(_formatted(logging.StreamHandler(sys.stderr), log_format))
    if log_file is not None:
        file_handler = RotatingFileHandler(
            filename=str(log_file), maxBytes=5 * 1024 * 1024, backupCount=3, encoding="utf-8"
        )
        lg.addHandler(_formatted(file_handler, log_format))
    lg.propagate = False
    return lg


logger: logging.Logger = logging.getLogger(LOGGER_NAME)

__all__ = ["logger", "init_logging", "LOGGER_NAME"]

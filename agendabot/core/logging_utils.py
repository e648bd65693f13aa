# agendabot/core/logging_utils.py
from __future__ import annotations

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Any

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s — %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(cfg: Any) -> logging.Logger:
    """
    Configure the 'agendabot' logger tree.

    Console gets cfg.LOG_LEVEL (INFO by default). When cfg.LOG_FILE is set, a
    rotating file keeps the DEBUG trail too (every dispatch attempt, gather
    counts, skipped ticks).
    """
    root = logging.getLogger("agendabot")
    root.setLevel(logging.DEBUG)
    root.handlers.clear()

    fmt = logging.Formatter(LOG_FORMAT, DATE_FORMAT)

    console = logging.StreamHandler()
    console.setFormatter(fmt)
    console.setLevel(getattr(cfg, "LOG_LEVEL", "INFO"))
    root.addHandler(console)

    log_file = getattr(cfg, "LOG_FILE", None)
    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
        fh = RotatingFileHandler(
            log_file, maxBytes=1_000_000, backupCount=10, encoding="utf-8"
        )
        fh.setFormatter(fmt)
        fh.setLevel(logging.DEBUG)
        root.addHandler(fh)

    # aiogram/apscheduler are chatty at INFO (every job run, every poll)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("aiogram.event").setLevel(logging.WARNING)

    return root


def kv(**kwargs: Any) -> str:
    """Key=value compact formatting (values repr()'d for clarity)."""
    return " ".join(f"{k}={v!r}" for k, v in kwargs.items())

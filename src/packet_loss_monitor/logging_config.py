"""Logging setup: one handler on the root logger, level from the environment."""

from __future__ import annotations

import logging
import os
from typing import Optional

from . import config


def resolve_level(name: Optional[str]) -> int:
    """Map a level name such as "debug" to its number; unknown names give INFO."""
    level = logging.getLevelName((name or "").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging(log_file: Optional[str] = config.LOG_FILE) -> logging.Handler:
    """Route all records to ``log_file`` (stderr when ``None``).

    The terminal belongs to the live statistics table, hence the file by
    default. Calling again replaces the handler installed last time.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, "_packet_loss_monitor", False):
            root.removeHandler(handler)
            handler.close()

    if log_file:
        handler = logging.FileHandler(log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(config.LOG_FORMAT, datefmt=config.LOG_TIME_FORMAT))
    handler._packet_loss_monitor = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(resolve_level(os.environ.get(config.LOG_LEVEL_ENV)))

    logging.getLogger(__name__).info(
        "Logging to %s at %s", log_file or "stderr", logging.getLevelName(root.level)
    )
    return handler

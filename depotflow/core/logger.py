from __future__ import annotations

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .settings import LOG_LEVEL_ENV, _work_dir


LOGGER_NAME = "depotflow"
LOG_FILE_NAME = "depotflow.log"

_LOGGER: logging.Logger | None = None


def _level_from_name(name: str | None) -> int | None:
    if not name:
        return None
    value = getattr(logging, name.strip().upper(), None)
    return value if isinstance(value, int) else None


def get_logger(log_dir: Path | None = None) -> logging.Logger:
    """Return the process-wide logger writing to <work dir>/logs/depotflow.log.

    Build machines keep the rotating file next to the project; the console
    handler mirrors every record to stdout so CI logs show steamcmd output.
    The level defaults to INFO and honours DEPOTFLOW_LOG_LEVEL.
    """
    global _LOGGER
    if _LOGGER is not None:
        return _LOGGER

    base = Path(log_dir) if log_dir is not None else _work_dir() / "logs"
    base.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(_level_from_name(os.getenv(LOG_LEVEL_ENV)) or logging.INFO)
    logger.propagate = False

    fmt = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    file_handler = RotatingFileHandler(
        base / LOG_FILE_NAME,
        maxBytes=2 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    file_handler.setFormatter(fmt)
    logger.addHandler(file_handler)

    console = logging.StreamHandler(sys.stdout)
    console.setFormatter(fmt)
    logger.addHandler(console)

    _LOGGER = logger
    return logger


def set_log_level(name: str) -> bool:
    """Apply a level name such as ``DEBUG`` to the application logger.

    Returns False and leaves the level untouched for unknown names.
    """
    level = _level_from_name(name)
    if level is None:
        return False
    get_logger().setLevel(level)
    return True

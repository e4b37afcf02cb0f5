"""Application-wide logger writing to platformdirs user_log_dir."""

from __future__ import annotations

import logging
import logging.handlers
import os
from pathlib import Path

from platformdirs import user_log_dir

_APP_NAME = "tasktree"
_LOG_FILE = "tasktree.log"
_MAX_BYTES = 5 * 1024 * 1024  # 5 MB
_BACKUP_COUNT = 3

_logger: logging.Logger | None = None


def _app_logger() -> logging.Logger:
    global _logger
    if _logger is not None:
        return _logger

    log_dir = Path(user_log_dir(_APP_NAME))
    log_dir.mkdir(parents=True, exist_ok=True)
    log_path = log_dir / _LOG_FILE

    logger = logging.getLogger(_APP_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    if not _has_file_handler(logger, log_path):
        logger.addHandler(_file_handler(log_path))

    _logger = logger
    return _logger


def _has_file_handler(logger: logging.Logger, log_path: Path) -> bool:
    # Other handlers (pytest capture, host apps) do not count
    target = os.path.abspath(log_path)
    return any(
        isinstance(h, logging.handlers.RotatingFileHandler) and h.baseFilename == target
        for h in logger.handlers
    )


def _file_handler(log_path: Path) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=_MAX_BYTES,
        backupCount=_BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)-8s [%(name)s] %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
    )
    return handler


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the application logger, or a child of it for ``name``.

    Only the bare call attaches the rotating file handler; the command
    wrapper makes it once per run. Module loggers such as
    ``tasktree.services.task_service`` propagate to it.
    """
    if not name or name == _APP_NAME:
        return _app_logger()
    if not name.startswith(_APP_NAME + "."):
        name = f"{_APP_NAME}.{name}"
    return logging.getLogger(name)

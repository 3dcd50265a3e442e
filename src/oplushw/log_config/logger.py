"""Logging configuration for the service.

``setup_logging`` is called once from :func:`oplushw.main.main`.  Library
modules only ever call ``logging.getLogger(__name__)``; the per-source
pipeline workers wrap theirs in :class:`ContextualLogger` so slider and
gesture lines can be told apart when both workers are busy.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, MutableMapping

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(threadName)s %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "oplushw.log"

_MAX_BYTES = 5 * 1024 * 1024
_BACKUPS = 3


def setup_logging(
    log_level: str = "INFO",
    log_dir: str | Path | None = "logs",
    max_bytes: int = _MAX_BYTES,
    backup_count: int = _BACKUPS,
) -> logging.Logger:
    """Install console and rotating-file handlers on the root logger.

    Handlers from an earlier call are closed and replaced, so calling this
    twice does not duplicate output.  An unknown *log_level* means INFO.

    Args:
        log_level: Level name, case-insensitive.
        log_dir: Directory for ``oplushw.log``; ``None`` disables the file.
        max_bytes: Rotation threshold of the log file.
        backup_count: Rotated files kept.

    Returns:
        The configured root logger.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    root = logging.getLogger()
    for old in list(root.handlers):
        root.removeHandler(old)
        old.close()
    root.setLevel(level)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if log_dir is not None:
        directory = Path(log_dir)
        directory.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                directory / LOG_FILE_NAME,
                maxBytes=max_bytes,
                backupCount=backup_count,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class ContextualLogger(logging.LoggerAdapter):
    """Prefixes every message with ``[key=value]`` pairs.

    Usage::

        log = ContextualLogger(get_logger(__name__), source="alert_slider")
        log.info("Worker started")  # "[source=alert_slider] Worker started"
    """

    def __init__(self, logger: logging.Logger, **context: Any) -> None:
        super().__init__(logger, context)
        self._prefix = " ".join(f"[{key}={value}]" for key, value in context.items())

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> tuple[Any, MutableMapping[str, Any]]:
        if self._prefix:
            msg = f"{self._prefix} {msg}"
        return msg, kwargs

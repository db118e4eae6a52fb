"""Logging setup for the ``stillpoint`` logger tree.

Modules log through ``logging.getLogger(__name__)``; this only decides
where the records go.  Handlers are named so repeated calls never attach
duplicates.
"""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .settings import APP_DATA_DIR

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s:%(lineno)d] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    level: int | str = logging.INFO,
    log_dir: Path | None = None,
    to_file: bool = True,
    console: bool = False,
    max_bytes: int = 1024 * 1024,
    backup_count: int = 3,
    name: str = "stillpoint",
) -> logging.Logger:
    logger = logging.getLogger(name)
    logger.setLevel(level)
    fmt = logging.Formatter(LOG_FORMAT, LOG_DATE_FORMAT)

    file_handler_name = f"{name}:file"
    if to_file and not any(h.get_name() == file_handler_name for h in logger.handlers):
        log_dir = log_dir or APP_DATA_DIR / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            filename=log_dir / f"{name}.log",
            maxBytes=max_bytes,
            backupCount=backup_count,
            encoding="utf-8",
        )
        handler.setFormatter(fmt)
        handler.set_name(file_handler_name)
        logger.addHandler(handler)

    console_handler_name = f"{name}:console"
    if console and not any(h.get_name() == console_handler_name for h in logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(fmt)
        handler.set_name(console_handler_name)
        logger.addHandler(handler)

    return logger

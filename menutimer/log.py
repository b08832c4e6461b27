"""Logging setup for MenuTimer.

Modules log through ``logging.getLogger(__name__)``; this configures the
shared ``menutimer`` parent logger once at startup.
"""

from __future__ import annotations

import logging
from pathlib import Path

from .settings import APP_SUPPORT_DIR


LOG_DIR = APP_SUPPORT_DIR / "logs"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
ROOT_LOGGER = "menutimer"


def setup_logging(
    level: int | str = logging.INFO,
    log_file: Path | None = None,
    *,
    console: bool = True,
) -> logging.Logger:
    """Configure and return the package logger.

    Handlers are only attached on the first call; later calls just
    update the level.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(level)

    if not logger.handlers:
        formatter = logging.Formatter(LOG_FORMAT)

        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        if console:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

    for handler in logger.handlers:
        handler.setLevel(level)

    return logger

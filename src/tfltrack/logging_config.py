"""Logging setup for applications embedding tfltrack."""

import logging
import logging.handlers
from typing import Optional

from .config import Settings


def setup_logging(settings: Optional[Settings] = None) -> None:
    """
    Configure the root logger from settings.

    Does nothing if the root logger already has handlers, so it is safe to
    call more than once.
    """
    settings = settings or Settings()
    root = logging.getLogger()
    if root.handlers:
        return

    level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
    root.setLevel(level)
    formatter = logging.Formatter(settings.LOG_FORMAT)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    if settings.LOG_FILE:
        file_handler = logging.handlers.RotatingFileHandler(
            settings.LOG_FILE, maxBytes=10 * 1024 * 1024, backupCount=5, encoding="utf-8"
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    # requests logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)

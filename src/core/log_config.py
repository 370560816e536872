"""Logging setup shared by the CLI and library users."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str | int = logging.WARNING) -> logging.Logger:
    """Install a basic console handler once and set the package log level.

    Library modules only call `logging.getLogger(__name__)`; the CLI entry
    point is the one caller of this function.
    """

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING

    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=LOG_FORMAT)

    for name in ("adapters", "cli", "core"):
        logging.getLogger(name).setLevel(level)
    return logging.getLogger("adapters")

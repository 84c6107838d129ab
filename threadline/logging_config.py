"""Root logger setup applied once at application start."""
from __future__ import annotations

import logging

from .constants import LOG_FORMAT


def configure_logging(level: str = "INFO") -> None:
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        resolved = logging.INFO
    logging.basicConfig(level=resolved, format=LOG_FORMAT)


__all__ = ["configure_logging"]

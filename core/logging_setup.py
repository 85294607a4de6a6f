"""Logging configuration for the ``core`` package.

Library modules only call ``logging.getLogger(__name__)``. Entrypoints (the
API module and the Streamlit app) call :func:`configure_logging` once.
"""

from __future__ import annotations

import logging
import sys
from typing import IO

_PKG_LOGGER_NAME = "core"
_CONFIGURED = False

logging.getLogger(_PKG_LOGGER_NAME).addHandler(logging.NullHandler())


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        level = level.strip().upper()
        if level.isdigit():
            return int(level)
        numeric = getattr(logging, level, None)
        if isinstance(numeric, int):
            return numeric
    return logging.INFO


def configure_logging(level: int | str | None = None, *, fmt: str | None = None, stream: IO[str] = sys.stderr) -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return

    handler = logging.StreamHandler(stream)
    handler.setFormatter(logging.Formatter(fmt or "%(asctime)s %(name)s %(levelname)s %(message)s"))
    for name in (_PKG_LOGGER_NAME, "api"):
        logger = logging.getLogger(name)
        for h in list(logger.handlers):
            if isinstance(h, logging.NullHandler):
                logger.removeHandler(h)
        logger.setLevel(_parse_level(level))
        logger.addHandler(handler)
        logger.propagate = False

    _CONFIGURED = True

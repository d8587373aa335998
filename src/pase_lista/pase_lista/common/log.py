"""Package-wide logging helpers.

A NullHandler sits on the package logger so importing the package never
prints anything until the application configures logging.
"""

from __future__ import annotations

import logging
import sys

__all__ = ["PACKAGE_LOGGER_NAME", "get_logger", "configure_logging"]

PACKAGE_LOGGER_NAME = "pase_lista"

logging.getLogger(PACKAGE_LOGGER_NAME).addHandler(logging.NullHandler())

_DEFAULT_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a logger under the ``pase_lista`` namespace.

    Module names like ``src.pase_lista.pase_lista.students.service`` are
    re-rooted so every record ends up below the package logger.
    """
    if not name:
        return logging.getLogger(PACKAGE_LOGGER_NAME)
    marker = PACKAGE_LOGGER_NAME + "."
    idx = name.rfind(marker)
    if idx > 0:
        name = name[idx:]
    return logging.getLogger(name)


def configure_logging(
    *,
    level: int | str = logging.INFO,
    stream=None,
    fmt: str | None = None,
) -> logging.Logger:
    """Attach a single stream handler to the package logger."""
    logger = get_logger()
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logger.setLevel(level)
    logger.propagate = True

    for handler in list(logger.handlers):
        if getattr(handler, "_pase_lista_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))
    handler._pase_lista_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
    return logger

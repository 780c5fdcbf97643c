"""
MovieRAG - Logging
====================
Named loggers for the console assistant.

The chat itself owns ``stdout`` (``User>`` / ``Bot>`` lines and the
results block), so diagnostics always go to ``stderr``.  Redirecting
either stream leaves the other one intact:

    movierag-chat 2> movierag.log

Verbosity follows ``settings.ENV``:
  • ``"dev"``  → DEBUG   (timings, every upsert and search)
  • ``"prod"`` → WARNING (only failed model calls and fatal errors)

Usage:
    from movierag.src.utils.logger import get_logger
    logger = get_logger(__name__)
"""

import logging
import sys

from movierag.config.settings import settings

_LEVEL_BY_ENV = {"dev": logging.DEBUG, "prod": logging.WARNING}
_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"
_DATE_FORMAT = "%H:%M:%S"


def default_level() -> int:
    """Level implied by the configured environment mode."""
    return _LEVEL_BY_ENV.get(settings.ENV, logging.WARNING)


def _stderr_handler(level: int) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt=_DATE_FORMAT))
    return handler


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """
    Return the logger *name*, attaching a ``stderr`` handler on first use.

    Args:
        name:  Typically ``__name__`` of the calling module.
        level: Explicit level; *None* uses :func:`default_level`.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    resolved = default_level() if level is None else level
    logger.setLevel(resolved)
    logger.addHandler(_stderr_handler(resolved))
    # Keep records off the root logger, which may print to stdout
    logger.propagate = False
    return logger

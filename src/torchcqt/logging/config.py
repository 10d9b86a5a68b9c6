"""Switch torchcqt log output on and off.

The library never configures the root logger. These helpers only touch the
``torchcqt`` logger and the one stream handler they install on it.
"""

from __future__ import annotations

import logging
import sys
from typing import Literal, TextIO

#: Default format for torchcqt log messages
DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

#: Default date format for timestamps
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

_ROOT = "torchcqt"


class _TorchCQTHandler(logging.StreamHandler):
    """Stream handler installed by :func:`enable_logging`."""


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the ``torchcqt`` logger, or its child ``torchcqt.<name>``.

    >>> get_logger().name
    'torchcqt'
    >>> get_logger("filterbank").name
    'torchcqt.filterbank'

    """
    return logging.getLogger(_ROOT if name is None else f"{_ROOT}.{name}")


def enable_logging(
    level: LogLevel = "INFO",
    format_string: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
    stream: TextIO | None = None,
) -> None:
    """Send torchcqt log records at ``level`` and above to ``stream``.

    Parameters
    ----------
    level : {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}, optional
        Threshold of the ``torchcqt`` logger. Default is "INFO".
    format_string : str, optional
        Record format of the installed handler.
    date_format : str, optional
        Timestamp format of the installed handler.
    stream : TextIO | None, optional
        Destination, ``sys.stderr`` by default.

    Notes
    -----
    Repeated calls change the level but keep a single handler; the format
    and stream of the first call stay in effect until
    :func:`disable_logging`.

    """
    numeric_level = getattr(logging, level)
    logger = logging.getLogger(_ROOT)
    logger.setLevel(numeric_level)

    for handler in list(logger.handlers):
        if isinstance(handler, logging.NullHandler):
            logger.removeHandler(handler)

    installed = [h for h in logger.handlers if isinstance(h, _TorchCQTHandler)]
    if installed:
        for handler in installed:
            handler.setLevel(numeric_level)
        return

    handler = _TorchCQTHandler(stream or sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(logging.Formatter(format_string, datefmt=date_format))
    logger.addHandler(handler)


def enable_debug_logging(
    format_string: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> None:
    """Shorthand for ``enable_logging("DEBUG", ...)``: shows cache misses and build timings."""
    enable_logging(level="DEBUG", format_string=format_string, date_format=date_format)


def disable_logging() -> None:
    """Remove every handler from the ``torchcqt`` logger and restore the silent default."""
    logger = logging.getLogger(_ROOT)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.NOTSET)

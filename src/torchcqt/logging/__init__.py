"""Logging for torchcqt.

The ``torchcqt`` logger carries a NullHandler, so the library prints
nothing until the application configures logging, either through the
helpers below or through the standard :mod:`logging` API.

What gets logged
----------------
* ``torchcqt.cache``: first computation of each derived quantity (DEBUG).
* ``torchcqt.filterbank``: filterbank size and build time (DEBUG).
* ``torchcqt.transform``: frames, bins and duration of each ``process`` call (DEBUG).
* ``torchcqt.performance``: user timings from :func:`log_performance` and
  :class:`LogPerformance` (INFO by default).

Examples
--------
>>> import torchcqt
>>> torchcqt.logging.enable_debug_logging()
>>> cqt = torchcqt.create_transform(params)
# Logs: "Built filterbank: 85 bins x 4096 samples (norm=l1)"

>>> import logging
>>> logging.getLogger("torchcqt.cache").setLevel(logging.WARNING)

"""

import logging

from torchcqt.logging.config import (
    DEFAULT_DATE_FORMAT,
    DEFAULT_FORMAT,
    disable_logging,
    enable_debug_logging,
    enable_logging,
    get_logger,
)
from torchcqt.logging.performance import (
    LogPerformance,
    log_performance,
)

logging.getLogger("torchcqt").addHandler(logging.NullHandler())

__all__ = [
    "enable_debug_logging",
    "enable_logging",
    "disable_logging",
    "get_logger",
    "log_performance",
    "LogPerformance",
    "DEFAULT_FORMAT",
    "DEFAULT_DATE_FORMAT",
]

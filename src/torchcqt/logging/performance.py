"""Wall-clock timing of filterbank builds, transform calls and user code.

Timings go to the ``torchcqt.performance`` logger unless another logger is
given. The library itself times its internal steps at DEBUG.
"""

from __future__ import annotations

import functools
import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

F = TypeVar("F", bound=Callable[..., Any])

_perf_logger = logging.getLogger("torchcqt.performance")


@contextmanager
def log_performance(
    operation_name: str,
    level: int = logging.INFO,
    logger: logging.Logger | None = None,
) -> Iterator[dict[str, Any]]:
    """Time the enclosed block and log ``"<operation_name> completed in <t>s"``.

    Parameters
    ----------
    operation_name : str
        Label used in the log record.
    level : int, optional
        Level of the record. Default is INFO.
    logger : logging.Logger | None, optional
        Destination logger, ``torchcqt.performance`` by default.

    Yields
    ------
    dict
        ``{"operation_name": ...}``; ``"elapsed_seconds"`` is added when the
        block exits, also when it raises.

    Examples
    --------
    >>> with log_performance("cqt_batch") as timing:
    ...     features = [cqt.process(x) for x in signals]
    >>> timing["elapsed_seconds"]  # doctest: +SKIP
    0.042

    """
    target = logger or _perf_logger
    timing: dict[str, Any] = {"operation_name": operation_name}
    start = time.perf_counter()
    try:
        yield timing
    finally:
        timing["elapsed_seconds"] = time.perf_counter() - start
        target.log(level, "%s completed in %.3fs", operation_name, timing["elapsed_seconds"])


class LogPerformance:
    """Decorator form of :func:`log_performance`.

    Parameters
    ----------
    operation_name : str | None, optional
        Label of the record; the function name when None.
    level : int, optional
        Level of the record. Default is INFO.
    logger : logging.Logger | None, optional
        Destination logger, ``torchcqt.performance`` by default.

    Examples
    --------
    >>> @LogPerformance("peak_bins", level=logging.DEBUG)
    ... def peak_bins(cqt, x):
    ...     return cqt.process(x).argmax(dim=-1)

    """

    def __init__(
        self,
        operation_name: str | None = None,
        level: int = logging.INFO,
        logger: logging.Logger | None = None,
    ) -> None:
        self.operation_name = operation_name
        self.level = level
        self.logger = logger

    def __call__(self, func: F) -> F:
        name = self.operation_name or func.__name__

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with log_performance(name, level=self.level, logger=self.logger):
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

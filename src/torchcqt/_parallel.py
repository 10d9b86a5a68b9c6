"""Index-ordered parallel map used by the filterbank builder and the transform."""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import TypeVar

R = TypeVar("R")

#: Upper bound for the default worker count
MAX_DEFAULT_WORKERS = 8


def default_num_workers() -> int:
    return max(1, min(MAX_DEFAULT_WORKERS, os.cpu_count() or 1))


def chunk_ranges(total: int, chunk_size: int) -> list[range]:
    """Split ``range(total)`` into consecutive ranges of at most ``chunk_size`` items.

    The partition depends only on ``total`` and ``chunk_size``.

    >>> chunk_ranges(5, 2)
    [range(0, 2), range(2, 4), range(4, 5)]

    """
    return [range(start, min(start + chunk_size, total)) for start in range(0, total, chunk_size)]


def ordered_map(
    fn: Callable[[int], R],
    count: int,
    num_workers: int | None = None,
) -> list[R]:
    """Apply ``fn`` to ``0 .. count - 1`` and return the results in index order.

    Work is spread over a thread pool; results are collected as they
    complete, tagged with their index and reassembled by index, so the
    output order never depends on scheduling. The first exception raised
    by any call propagates once all submitted work has finished, and no
    partial result list is returned.

    """
    workers = default_num_workers() if num_workers is None else num_workers
    if workers <= 1 or count <= 1:
        return [fn(i) for i in range(count)]

    results: list[R | None] = [None] * count
    with ThreadPoolExecutor(max_workers=min(workers, count)) as executor:
        future_to_idx = {executor.submit(fn, i): i for i in range(count)}
        for future in as_completed(future_to_idx):
            results[future_to_idx[future]] = future.result()
    return results  # type: ignore[return-value]


def ordered_chunk_map(
    fn: Callable[[range], R],
    chunks: Sequence[range],
    num_workers: int | None = None,
) -> list[R]:
    """:func:`ordered_map` over a precomputed list of index ranges."""
    return ordered_map(lambda i: fn(chunks[i]), len(chunks), num_workers)

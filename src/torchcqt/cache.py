"""Process-wide memoization of derived constant-Q quantities.

Building a filterbank needs the same handful of derivations over and over:
the geometric frequency ratio, the Q factor, the phase factors of the global
window, Hann windows of every bin length and their normalization factors.
They depend on a few parameters only, so :class:`DerivedCache` stores each
one under ``(name, key)`` where ``key`` is the minimal tuple of parameters
that determines it.

Entries are append-only: there is no eviction and no invalidation. The key
space is bounded by the distinct parameter sets a process actually uses.

Concurrency
-----------
Lookups of an existing entry take no lock. The first computation of a key
is serialized per key: concurrent callers asking for the same key wait for
the first one to store its value and then read it, while callers asking
for different keys compute in parallel.

Examples
--------
>>> cache = DerivedCache()
>>> cache.get_or_compute("square", (3,), lambda: 3 * 3)
9
>>> ("square", (3,)) in cache
True

"""

from __future__ import annotations

import threading
from collections.abc import Callable, Hashable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from torchcqt.logging import get_logger

V = TypeVar("V")

_logger = get_logger("cache")

CacheKey = tuple[str, Hashable]


@dataclass
class CacheStats:
    """Hit and miss counters of a :class:`DerivedCache`."""

    hits: int = 0
    misses: int = 0


class DerivedCache:
    """Write-once memoization table with per-key first-write locking."""

    def __init__(self) -> None:
        self._entries: dict[CacheKey, Any] = {}
        self._key_locks: dict[CacheKey, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._stats = CacheStats()

    def _lock_for(self, full_key: CacheKey) -> threading.Lock:
        with self._registry_lock:
            lock = self._key_locks.get(full_key)
            if lock is None:
                lock = threading.Lock()
                self._key_locks[full_key] = lock
            return lock

    def get_or_compute(self, name: str, key: Hashable, compute: Callable[[], V]) -> V:
        """Return the value stored for ``(name, key)``, computing it on first use.

        Parameters
        ----------
        name : str
            Name of the derived quantity, e.g. ``"phase_factors"``.
        key : Hashable
            Minimal parameter tuple that determines the value.
        compute : Callable[[], V]
            Pure function producing the value. Only called on a miss. If it
            raises, nothing is stored and the exception propagates.

        Returns
        -------
        V
            The stored value. Every call with the same ``(name, key)`` returns
            the same object.

        """
        full_key = (name, key)
        try:
            value = self._entries[full_key]
        except KeyError:
            pass
        else:
            self._stats.hits += 1
            return value

        with self._lock_for(full_key):
            # Another thread may have stored the value while we waited.
            if full_key in self._entries:
                self._stats.hits += 1
                return self._entries[full_key]

            _logger.debug("Cache miss for %s%r; computing", name, key)
            value = compute()
            self._entries[full_key] = value
            self._stats.misses += 1
            return value

    def __contains__(self, full_key: object) -> bool:
        return full_key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def keys(self) -> list[CacheKey]:
        """Return a snapshot of the stored ``(name, key)`` pairs."""
        return list(self._entries)

    @property
    def stats(self) -> CacheStats:
        """Hit and miss counters.

        Counters are updated without a lock, so under heavy concurrency they
        are approximate. Stored values are never affected.

        """
        return self._stats

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(entries={len(self)}, "
            f"hits={self._stats.hits}, misses={self._stats.misses})"
        )


_default_cache: DerivedCache | None = None
_default_cache_lock = threading.Lock()


def get_default_cache() -> DerivedCache:
    """Return the process-wide cache, creating it on first use.

    The instance lives until the interpreter exits.

    """
    global _default_cache
    if _default_cache is None:
        with _default_cache_lock:
            if _default_cache is None:
                _default_cache = DerivedCache()
    return _default_cache


def resolve_cache(cache: DerivedCache | None) -> DerivedCache:
    """Return ``cache`` or the process-wide default when it is None."""
    return cache if cache is not None else get_default_cache()


#: Window lengths precomputed by :func:`warm_cache`
PRECOMPUTED_WINDOW_LENGTHS = (256, 512, 1024, 2048, 4096)

#: Sample rates precomputed by :func:`warm_cache`
PRECOMPUTED_SAMPLE_RATES = (16000, 22050, 44100, 48000)

#: Bins-per-octave values precomputed by :func:`warm_cache`
PRECOMPUTED_BINS_PER_OCTAVE = tuple(range(1, 13))


def warm_cache(
    cache: DerivedCache | None = None,
    *,
    window_lengths: Iterable[int] = PRECOMPUTED_WINDOW_LENGTHS,
    sampling_rates: Iterable[float] = PRECOMPUTED_SAMPLE_RATES,
    bins_per_octave: Iterable[int] = PRECOMPUTED_BINS_PER_OCTAVE,
) -> DerivedCache:
    """Precompute the derivations for common parameter combinations.

    Fills ratio and Q factor for every ``bins_per_octave``; phase factors for
    every ``(window_length, sampling_rate)`` pair; Hann windows and both
    normalization factors for every ``window_length``.

    Returns
    -------
    DerivedCache
        The cache that was filled.

    """
    from torchcqt import calculations

    cache = resolve_cache(cache)
    sampling_rates = tuple(sampling_rates)

    for bins in bins_per_octave:
        calculations.get_base_freq_ratio(bins, cache=cache)
        calculations.get_q_factor(bins, cache=cache)

    for length in window_lengths:
        calculations.get_hann_window(length, cache=cache)
        for norm in calculations.NORM_TYPES:
            calculations.get_norm_factor(length, norm, cache=cache)
        for rate in sampling_rates:
            calculations.get_phase_factors(length, rate, cache=cache)

    _logger.debug("Warmed cache: %d entries", len(cache))
    return cache

"""Tests for the derived-quantity cache."""

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from torchcqt import calculations
from torchcqt.cache import (
    PRECOMPUTED_BINS_PER_OCTAVE,
    PRECOMPUTED_SAMPLE_RATES,
    PRECOMPUTED_WINDOW_LENGTHS,
    DerivedCache,
    get_default_cache,
    resolve_cache,
    warm_cache,
)
from torchcqt.filterbank import build_filterbank


class TestGetOrCompute:
    """Test the single-threaded contract of get_or_compute."""

    def test_computes_once(self, cache):
        calls = []

        def compute():
            calls.append(1)
            return object()

        first = cache.get_or_compute("thing", (1,), compute)
        second = cache.get_or_compute("thing", (1,), compute)

        assert first is second
        assert len(calls) == 1
        assert cache.stats.misses == 1
        assert cache.stats.hits == 1

    def test_name_is_part_of_the_key(self, cache):
        assert cache.get_or_compute("a", (1,), lambda: "a") == "a"
        assert cache.get_or_compute("b", (1,), lambda: "b") == "b"
        assert len(cache) == 2
        assert set(cache.keys()) == {("a", (1,)), ("b", (1,))}

    def test_failed_compute_is_not_stored(self, cache):
        def boom():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            cache.get_or_compute("flaky", (1,), boom)

        assert ("flaky", (1,)) not in cache
        assert cache.get_or_compute("flaky", (1,), lambda: 42) == 42

    def test_repr(self, cache):
        cache.get_or_compute("x", (), lambda: 1)
        assert repr(cache) == "DerivedCache(entries=1, hits=0, misses=1)"


class TestConcurrency:
    """Test first-write serialization across threads."""

    def test_concurrent_first_use_computes_once(self, cache):
        n_threads = 16
        barrier = threading.Barrier(n_threads)
        calls = []
        calls_lock = threading.Lock()

        def compute():
            with calls_lock:
                calls.append(1)
            time.sleep(0.05)
            return object()

        def worker(_):
            barrier.wait()
            return cache.get_or_compute("slow", (7,), compute)

        with ThreadPoolExecutor(max_workers=n_threads) as executor:
            results = list(executor.map(worker, range(n_threads)))

        assert len(calls) == 1
        assert all(r is results[0] for r in results)

    def test_distinct_keys_do_not_block_each_other(self, cache):
        started = threading.Event()
        release = threading.Event()

        def slow():
            started.set()
            release.wait(timeout=5)
            return "slow"

        with ThreadPoolExecutor(max_workers=1) as executor:
            future = executor.submit(cache.get_or_compute, "slow", (1,), slow)
            assert started.wait(timeout=5)
            # A different key computes while "slow" is still in progress.
            assert cache.get_or_compute("fast", (1,), lambda: "fast") == "fast"
            release.set()
            assert future.result(timeout=5) == "slow"

    def test_concurrent_filterbank_builds_agree(self, small_params, cache):
        with ThreadPoolExecutor(max_workers=4) as executor:
            banks = list(
                executor.map(
                    lambda _: build_filterbank(small_params, cache=cache, num_workers=2),
                    range(4),
                )
            )

        for bank in banks[1:]:
            assert bank.kernel.equal(banks[0].kernel)
        assert len([k for k in cache.keys() if k[0] == "phase_factors"]) == 1


class TestDefaultCache:
    """Test the process-wide cache."""

    def test_default_cache_is_a_singleton(self):
        assert get_default_cache() is get_default_cache()

    def test_resolve_cache(self, cache):
        assert resolve_cache(None) is get_default_cache()
        assert resolve_cache(cache) is cache


class TestWarmCache:
    """Test precomputation of common parameter combinations."""

    def test_default_tables(self, cache):
        warm_cache(cache)

        n_bins = len(PRECOMPUTED_BINS_PER_OCTAVE)
        n_lengths = len(PRECOMPUTED_WINDOW_LENGTHS)
        n_rates = len(PRECOMPUTED_SAMPLE_RATES)
        # ratio + Q per bin count; window + two norms + phases per length
        assert len(cache) == 2 * n_bins + n_lengths * (1 + 2 + n_rates)
        assert ("phase_factors", (4096, 44100.0)) in cache
        assert ("q_factor", (12,)) in cache

    def test_custom_tables(self, cache):
        returned = warm_cache(
            cache, window_lengths=(256,), sampling_rates=(16000,), bins_per_octave=(12,)
        )
        assert returned is cache
        assert len(cache) == 6

    def test_warmed_phase_factors_are_reused(self, small_params, cache, monkeypatch):
        warm_cache(cache, window_lengths=(1024,), sampling_rates=(16000,), bins_per_octave=(12,))

        def fail(*args, **kwargs):
            raise AssertionError("phase factors recomputed")

        monkeypatch.setattr(calculations, "calculate_phase_factors", fail)
        bank = build_filterbank(small_params, cache=cache, num_workers=1)
        assert bank.n_bins == small_params.n_bins

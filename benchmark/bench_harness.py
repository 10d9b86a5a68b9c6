"""Timing harness for torchcqt benchmarks.

Runs a callable with warmup, collects per-iteration wall times and writes
JSON reports that can be diffed against a stored baseline.
"""

from __future__ import annotations

import json
import statistics
import time
from collections.abc import Callable
from dataclasses import asdict, dataclass, field

import torch


@dataclass
class BenchmarkResult:
    """Timings of one benchmark case, in milliseconds."""

    name: str
    mean_ms: float
    std_ms: float = 0.0
    samples: list[float] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)


class BenchmarkSuite:
    """Collects named benchmark cases and reports them.

    Parameters
    ----------
    warmup_iters : int
        Untimed calls before measuring. The first call of a transform
        usually fills the derived-quantity cache.
    measure_iters : int
        Timed calls per case.
    """

    def __init__(self, warmup_iters: int = 3, measure_iters: int = 20) -> None:
        self.warmup_iters = warmup_iters
        self.measure_iters = measure_iters
        self.results: list[BenchmarkResult] = []

    @staticmethod
    def _sync() -> None:
        if torch.cuda.is_available():
            torch.cuda.synchronize()

    def time_fn(self, fn: Callable, *args, **kwargs) -> BenchmarkResult:
        """Time ``fn(*args, **kwargs)`` and return unnamed statistics."""
        for _ in range(self.warmup_iters):
            fn(*args, **kwargs)

        samples = []
        for _ in range(self.measure_iters):
            self._sync()
            start = time.perf_counter()
            fn(*args, **kwargs)
            self._sync()
            samples.append((time.perf_counter() - start) * 1000)

        return BenchmarkResult(
            name="",
            mean_ms=statistics.fmean(samples),
            std_ms=statistics.pstdev(samples),
            samples=samples,
        )

    def bench(
        self,
        name: str,
        fn: Callable,
        *args,
        metadata: dict | None = None,
        **kwargs,
    ) -> BenchmarkResult:
        """Run a named case and keep its result."""
        result = self.time_fn(fn, *args, **kwargs)
        result.name = name
        result.metadata = metadata or {}
        self.results.append(result)
        return result

    def print_results(self) -> None:
        print(f"\n{'Name':<50} {'Mean (ms)':>12} {'Std (ms)':>12}")
        print("-" * 76)
        for r in self.results:
            print(f"{r.name:<50} {r.mean_ms:>12.3f} {r.std_ms:>12.3f}")
        print()

    def save_json(self, path: str) -> None:
        data = {
            "warmup_iters": self.warmup_iters,
            "measure_iters": self.measure_iters,
            "results": [asdict(r) for r in self.results],
        }
        with open(path, "w") as f:
            json.dump(data, f, indent=2)

    def compare(self, baseline_path: str, threshold: float = 10.0) -> None:
        """Print the change against ``baseline_path``, flagging slowdowns above ``threshold`` percent."""
        with open(baseline_path) as f:
            baseline = json.load(f)

        baseline_map = {r["name"]: r["mean_ms"] for r in baseline["results"]}

        print(f"\n{'Name':<50} {'Current':>10} {'Baseline':>10} {'Change':>10}")
        print("-" * 82)
        for r in self.results:
            base = baseline_map.get(r.name)
            if base is None:
                continue
            change = (r.mean_ms - base) / base * 100
            flag = " REGRESSION" if change > threshold else ""
            print(f"{r.name:<50} {r.mean_ms:>10.3f} {base:>10.3f} {change:>+9.1f}%{flag}")
        print()

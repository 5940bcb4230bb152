"""Timing instrumentation for the recognition pipeline.

Each stage (simplify, normalize, extract, score) is wrapped in a timing
context. Besides latency, the per-stage call counts show which stages
actually ran for a given stroke.
"""

from __future__ import annotations

import time
from collections import deque
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator


@dataclass
class StageStats:
    """Timing statistics for a single pipeline stage."""
    name: str
    avg_ms: float
    min_ms: float
    max_ms: float
    p95_ms: float
    call_count: int

    def to_dict(self) -> dict:
        return {
            "avg_ms": round(self.avg_ms, 3),
            "min_ms": round(self.min_ms, 3),
            "max_ms": round(self.max_ms, 3),
            "p95_ms": round(self.p95_ms, 3),
            "calls": self.call_count,
        }


class PipelineProfiler:
    """Rolling per-stage timings.

    Usage:
        profiler = PipelineProfiler()
        with profiler.stage("simplify"):
            reduced = simplify(points, 5.0)
        profiler.call_count("score")  # 0 if scoring never ran
    """

    STAGES = ("simplify", "normalize", "extract", "score", "total")

    def __init__(self, window_size: int = 120):
        self._window_size = window_size
        self._timings: dict[str, deque[float]] = {s: deque(maxlen=window_size) for s in self.STAGES}
        self._counts: dict[str, int] = dict.fromkeys(self.STAGES, 0)
        self.enabled = True

    @contextmanager
    def stage(self, name: str) -> Iterator[None]:
        if not self.enabled:
            yield
            return

        if name not in self._timings:
            self._timings[name] = deque(maxlen=self._window_size)
            self._counts[name] = 0

        t0 = time.perf_counter()
        try:
            yield
        finally:
            self._timings[name].append((time.perf_counter() - t0) * 1000.0)
            self._counts[name] += 1

    def call_count(self, name: str) -> int:
        return self._counts.get(name, 0)

    def get_stage_stats(self, name: str) -> StageStats | None:
        timings = self._timings.get(name)
        if not timings:
            return None

        ordered = sorted(timings)
        n = len(ordered)
        return StageStats(
            name=name,
            avg_ms=sum(ordered) / n,
            min_ms=ordered[0],
            max_ms=ordered[-1],
            p95_ms=ordered[min(n - 1, int(n * 0.95))],
            call_count=self._counts[name],
        )

    def summary(self) -> dict[str, dict]:
        """Stats for every stage that has run at least once."""
        result = {}
        for name in self._timings:
            stats = self.get_stage_stats(name)
            if stats is not None:
                result[name] = stats.to_dict()
        return result

    def reset(self):
        for timings in self._timings.values():
            timings.clear()
        for name in self._counts:
            self._counts[name] = 0

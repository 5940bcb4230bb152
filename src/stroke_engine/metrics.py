"""Prometheus-style counters for recognition outcomes.

Renders the text exposition format directly; the host decides whether and
where to serve it.

Tracked metrics:
- stroke_engine_strokes_total (counter)
- stroke_engine_recognitions_total (counter, by template)
- stroke_engine_failures_total (counter, by reason)
- stroke_engine_recognition_latency_seconds (histogram)
- stroke_engine_templates (gauge)
"""

from __future__ import annotations

import threading
import time
from collections import Counter

LATENCY_BUCKETS = (0.0005, 0.001, 0.0025, 0.005, 0.010, 0.025, 0.050, 0.100)


class _Histogram:
    """Latency histogram; buckets are made cumulative when rendered."""

    def __init__(self, buckets: tuple[float, ...]):
        self.buckets = sorted(buckets)
        self.bucket_counts = [0] * len(self.buckets)
        self.count = 0
        self.sum = 0.0
        self._lock = threading.Lock()

    def observe(self, value: float):
        with self._lock:
            self.count += 1
            self.sum += value
            for i, bound in enumerate(self.buckets):
                if value <= bound:
                    self.bucket_counts[i] += 1
                    break

    def render(self, name: str, help_text: str) -> list[str]:
        lines = [f"# HELP {name} {help_text}", f"# TYPE {name} histogram"]
        with self._lock:
            cumulative = 0
            for bound, count in zip(self.buckets, self.bucket_counts):
                cumulative += count
                lines.append(f'{name}_bucket{{le="{bound}"}} {cumulative}')
            lines.append(f'{name}_bucket{{le="+Inf"}} {self.count}')
            lines.append(f"{name}_sum {self.sum:.6f}")
            lines.append(f"{name}_count {self.count}")
        return lines


class MetricsCollector:
    """Counts strokes, recognitions and failures for one or more sessions."""

    def __init__(self):
        self._recognitions: Counter = Counter()
        self._failures: Counter = Counter()
        self._strokes_total = 0
        self._templates = 0
        self._latency = _Histogram(LATENCY_BUCKETS)
        self._lock = threading.Lock()
        self._start_time = time.time()

    def record_stroke(self, latency_seconds: float):
        with self._lock:
            self._strokes_total += 1
        self._latency.observe(latency_seconds)

    def record_recognition(self, template: str):
        with self._lock:
            self._recognitions[template] += 1

    def record_failure(self, reason: str):
        with self._lock:
            self._failures[reason] += 1

    def set_template_count(self, count: int):
        self._templates = count

    @property
    def strokes_total(self) -> int:
        return self._strokes_total

    @property
    def recognition_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._recognitions)

    @property
    def failure_counts(self) -> dict[str, int]:
        with self._lock:
            return dict(self._failures)

    def render(self) -> str:
        """All metrics in Prometheus text exposition format."""
        lines = [
            "# HELP stroke_engine_uptime_seconds Time since collector creation",
            "# TYPE stroke_engine_uptime_seconds gauge",
            f"stroke_engine_uptime_seconds {time.time() - self._start_time:.1f}",
            "",
            "# HELP stroke_engine_strokes_total Strokes run through recognition",
            "# TYPE stroke_engine_strokes_total counter",
            f"stroke_engine_strokes_total {self._strokes_total}",
            "",
            "# HELP stroke_engine_recognitions_total Successful recognitions by template",
            "# TYPE stroke_engine_recognitions_total counter",
        ]
        with self._lock:
            for name, count in sorted(self._recognitions.items()):
                lines.append(f'stroke_engine_recognitions_total{{template="{name}"}} {count}')
            lines += [
                "",
                "# HELP stroke_engine_failures_total Failed recognitions by reason",
                "# TYPE stroke_engine_failures_total counter",
            ]
            for reason, count in sorted(self._failures.items()):
                lines.append(f'stroke_engine_failures_total{{reason="{reason}"}} {count}')
        lines.append("")

        lines += self._latency.render(
            "stroke_engine_recognition_latency_seconds",
            "Time from stop to result",
        )
        lines += [
            "",
            "# HELP stroke_engine_templates Registered templates",
            "# TYPE stroke_engine_templates gauge",
            f"stroke_engine_templates {self._templates}",
        ]
        return "\n".join(lines) + "\n"

"""Recognition session: records a stroke and matches it on stop.

State machine: IDLE → RECORDING (start_recording) → IDLE (stop_recording or
timeout). Stopping runs simplify → normalize → extract → score against every
registered template and returns a Recognized or Failed result. Failures are
ordinary results; nothing in the steady-state path raises.

Usage:
    session = RecognitionSession()

    @session.events.on("recognized")
    def on_match(result):
        print(result.template.name, result.confidence)

    # From the host's pointer events:
    session.start_recording((10, 50))
    session.add_point((60, 50))
    result = session.stop_recording()
"""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Protocol, Union

from stroke_engine import events as ev
from stroke_engine.config import EngineConfig
from stroke_engine.errors import SessionStateViolation
from stroke_engine.features import FeatureVector, extract
from stroke_engine.geometry import Point2D, path_length, to_point, to_points
from stroke_engine.metrics import MetricsCollector
from stroke_engine.paths import normalize, simplify
from stroke_engine.profiler import PipelineProfiler
from stroke_engine.recorder import RawStroke, StrokeRecorder
from stroke_engine.scoring import score
from stroke_engine.templates import GestureTemplate, TemplateRegistry, TemplateSummary

logger = logging.getLogger("stroke_engine.session")

TIE_EPSILON = 1e-9
LOW_SCORE_CUTOFF = 0.5


class SessionState(Enum):
    IDLE = "idle"
    RECORDING = "recording"


class FailureReason(Enum):
    NOT_RECORDING = "not_recording"
    TOO_FEW_POINTS = "too_few_points"
    TOO_SHORT = "too_short"
    NO_TEMPLATES = "no_templates"
    LOW_SCORE = "low_score"  # best candidate scored below 0.5
    BELOW_THRESHOLD = "below_threshold"
    INTERNAL_ERROR = "internal_error"


@dataclass
class Recognized:
    """A stroke matched a template at or above the threshold."""
    template: GestureTemplate
    confidence: float
    input_points: list[Point2D] = field(default_factory=list)
    features: FeatureVector = field(default_factory=FeatureVector.empty)

    @property
    def succeeded(self) -> bool:
        return True


@dataclass
class Failed:
    """No template matched; carries the best candidate for diagnostics."""
    reason: FailureReason
    best_candidate: Optional[GestureTemplate] = None
    best_score: float = 0.0
    input_points: list[Point2D] = field(default_factory=list)
    features: Optional[FeatureVector] = None
    detail: str = ""

    @property
    def succeeded(self) -> bool:
        return False


RecognitionResult = Union[Recognized, Failed]

Scorer = Callable[[FeatureVector, FeatureVector], float]


class Cancellable(Protocol):
    def cancel(self) -> None: ...


Scheduler = Callable[[float, Callable[[], None]], Cancellable]


def thread_timer_scheduler(delay: float, callback: Callable[[], None]) -> Cancellable:
    """Run ``callback`` after ``delay`` seconds on a daemon timer thread."""
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    timer.start()
    return timer


class RecognitionSession:
    """Stateful stroke recorder driving the recognition pipeline.

    Args:
        registry: Templates to match against (default: built-in set).
        config: Engine knobs; see :class:`EngineConfig`.
        scorer: Feature-vector similarity function.
        scheduler: ``(delay, callback) -> handle with cancel()``; arms the
            max-gesture-time timeout. Defaults to ``threading.Timer``.
        clock: Monotonic time source, seconds.
        profiler: Stage timings; a fresh one is created if omitted.
        metrics: Optional outcome counters.
        archive: Optional stroke archive; created from
            ``config.archive_size`` if omitted and the size is nonzero.
    """

    def __init__(
        self,
        registry: Optional[TemplateRegistry] = None,
        config: Optional[EngineConfig] = None,
        scorer: Scorer = score,
        scheduler: Optional[Scheduler] = None,
        clock: Callable[[], float] = time.monotonic,
        profiler: Optional[PipelineProfiler] = None,
        metrics: Optional[MetricsCollector] = None,
        archive: Optional[StrokeRecorder] = None,
    ):
        self.config = config or EngineConfig()
        if registry is None:
            registry = TemplateRegistry.with_defaults(self.config.simplification_tolerance)
        self.registry = registry
        self.scorer = scorer
        self.events = ev.EventBus()
        self.profiler = profiler or PipelineProfiler()
        self.metrics = metrics
        if archive is None and self.config.archive_size:
            archive = StrokeRecorder(self.config.archive_size)
        self.archive = archive

        self._scheduler = scheduler or thread_timer_scheduler
        self._clock = clock
        self._lock = threading.RLock()
        self._state = SessionState.IDLE
        self._stroke: Optional[RawStroke] = None
        self._timer: Optional[Cancellable] = None
        self._generation = 0
        self._last_result: Optional[RecognitionResult] = None

        if self.metrics:
            self.metrics.set_template_count(len(self.registry))

    # --- state ---

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state is SessionState.RECORDING

    @property
    def point_count(self) -> int:
        with self._lock:
            return len(self._stroke.points) if self._stroke else 0

    @property
    def last_result(self) -> Optional[RecognitionResult]:
        return self._last_result

    # --- recording ---

    def start_recording(self, point) -> bool:
        """Begin a stroke at ``point`` and arm the timeout.

        Returns False (or raises in strict mode) if already recording.
        """
        point = to_point(point)
        with self._lock:
            if self._state is SessionState.RECORDING:
                self._violation("start_recording called while already recording")
                return False

            now = self._clock()
            self._state = SessionState.RECORDING
            self._stroke = RawStroke(points=[point], start_time=now, last_update_time=now)
            self._generation += 1
            generation = self._generation
            self._timer = self._scheduler(
                self.config.timeout_seconds, lambda: self._on_timeout(generation)
            )

        logger.debug("Recording started at (%.1f, %.1f)", point.x, point.y)
        self.events.emit(ev.RECORDING_STARTED, ev.RecordingStarted(point=point, timestamp=now))
        return True

    def add_point(self, point) -> bool:
        """Append a point to the current stroke. No-op while idle."""
        point = to_point(point)
        with self._lock:
            if self._state is not SessionState.RECORDING:
                self._violation("add_point called while idle")
                return False
            now = self._clock()
            self._stroke.points.append(point)
            self._stroke.last_update_time = now
            count = len(self._stroke.points)

        self.events.emit(ev.POINT_ADDED, ev.PointAdded(point=point, point_count=count, timestamp=now))
        return True

    def stop_recording(self) -> RecognitionResult:
        """Finish the stroke and run recognition.

        Called while idle, returns ``Failed(NOT_RECORDING)`` without touching
        the registry or emitting events.
        """
        with self._lock:
            if self._state is not SessionState.RECORDING:
                self._violation("stop_recording called while idle")
                return Failed(reason=FailureReason.NOT_RECORDING, detail="session is idle")
            stroke = self._finish()
        return self._complete(stroke, timed_out=False)

    def _on_timeout(self, generation: int):
        with self._lock:
            if self._state is not SessionState.RECORDING or generation != self._generation:
                return  # stopped already, or a newer stroke started
            logger.info("Gesture exceeded %d ms, stopping", self.config.max_gesture_time_ms)
            stroke = self._finish()
        self._complete(stroke, timed_out=True)

    def _finish(self) -> RawStroke:
        """Transition to IDLE and detach the stroke. Caller holds the lock."""
        self._state = SessionState.IDLE
        self._generation += 1
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        stroke, self._stroke = self._stroke, None
        return stroke

    def _complete(self, stroke: RawStroke, timed_out: bool) -> RecognitionResult:
        points = list(stroke.points)
        self.events.emit(ev.RECORDING_STOPPED, ev.RecordingStopped(
            start_point=points[0],
            end_point=points[-1],
            points=points,
            duration=self._clock() - stroke.start_time,
            timed_out=timed_out,
        ))

        t0 = time.perf_counter()
        result = self.recognize(points)
        if self.metrics:
            self.metrics.record_stroke(time.perf_counter() - t0)

        if isinstance(result, Recognized):
            stroke.outcome, stroke.confidence = result.template.name, result.confidence
        else:
            stroke.outcome, stroke.confidence = result.reason.value, result.best_score
        if self.archive is not None:
            self.archive.add(stroke)

        self._last_result = result
        if isinstance(result, Recognized):
            logger.info("Recognized %s (%.2f)", result.template.name, result.confidence)
            if self.metrics:
                self.metrics.record_recognition(result.template.name)
            self.events.emit(ev.RECOGNIZED, result)
        else:
            logger.debug("Recognition failed: %s (best=%.2f)", result.reason.value, result.best_score)
            if self.metrics:
                self.metrics.record_failure(result.reason.value)
            self.events.emit(ev.RECOGNITION_FAILED, result)
        return result

    def _violation(self, message: str):
        if self.config.strict_state:
            raise SessionStateViolation(message)
        logger.warning("Ignored: %s", message)

    # --- matching ---

    def recognize(self, points: Iterable) -> RecognitionResult:
        """Run the matching pipeline on a complete stroke.

        Does not touch session state; usable for replaying archived strokes.
        """
        pts = to_points(points)
        if len(pts) < 2:
            return Failed(
                reason=FailureReason.TOO_FEW_POINTS,
                input_points=pts,
                detail=f"need at least 2 points, got {len(pts)}",
            )

        try:
            with self.profiler.stage("total"):
                return self._match(pts)
        except Exception as e:
            logger.error("Recognition error: %s", e)
            return Failed(reason=FailureReason.INTERNAL_ERROR, input_points=pts, detail=str(e))

    def _match(self, pts: list[Point2D]) -> RecognitionResult:
        cfg = self.config
        length = path_length(pts)
        if length < cfg.min_gesture_length:
            return Failed(
                reason=FailureReason.TOO_SHORT,
                input_points=pts,
                detail=f"path length {length:.1f} < {cfg.min_gesture_length:g}",
            )

        templates = self.registry.list_all()
        if not templates:
            return Failed(reason=FailureReason.NO_TEMPLATES, input_points=pts)

        with self.profiler.stage("simplify"):
            reduced = simplify(pts, cfg.simplification_tolerance)
        with self.profiler.stage("normalize"):
            normalized = normalize(reduced)
        with self.profiler.stage("extract"):
            features = extract(normalized, cfg.simplification_tolerance)

        with self.profiler.stage("score"):
            scored = [(template, self.scorer(features, template.features)) for template in templates]

        best, best_score = _pick_best(scored, features)

        if best_score >= cfg.recognition_threshold:
            return Recognized(template=best, confidence=best_score, input_points=pts, features=features)

        reason = FailureReason.LOW_SCORE if best_score < LOW_SCORE_CUTOFF else FailureReason.BELOW_THRESHOLD
        return Failed(
            reason=reason,
            best_candidate=best,
            best_score=best_score,
            input_points=pts,
            features=features,
            detail=f"best {best.name} scored {best_score:.3f} < {cfg.recognition_threshold:g}",
        )

    def test_match(self, points: Iterable, name: str) -> float:
        """Similarity of a stroke to one named template (0.0 if unknown)."""
        pts = to_points(points)
        template = self.registry.get(name) if name else None
        if len(pts) < 2 or template is None:
            return 0.0
        tol = self.config.simplification_tolerance
        return self.scorer(extract(normalize(simplify(pts, tol)), tol), template.features)

    # --- host-facing template/config API ---

    def register_template(self, template: GestureTemplate):
        """Raises DuplicateTemplateName if the name is taken."""
        self.registry.add(template)
        if self.metrics:
            self.metrics.set_template_count(len(self.registry))

    def unregister_template(self, name: str) -> bool:
        removed = self.registry.remove(name)
        if removed and self.metrics:
            self.metrics.set_template_count(len(self.registry))
        return removed

    def list_templates(self) -> list[TemplateSummary]:
        return [t.summary() for t in self.registry.list_all()]

    def configure(self, **changes: Any) -> EngineConfig:
        """Update config knobs (clamped). Applies from the next stroke on."""
        with self._lock:
            self.config = self.config.replace(**changes)
            return self.config

    # --- lifecycle ---

    def close(self):
        """Cancel any pending timeout and drop the in-progress stroke."""
        with self._lock:
            if self._state is SessionState.RECORDING:
                self._finish()

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()


def _pick_best(
    scored: list[tuple[GestureTemplate, float]], features: FeatureVector
) -> tuple[GestureTemplate, float]:
    """Highest score wins; near-ties prefer a matching primary direction,
    then registration order."""
    top = max(s for _, s in scored)
    tied = [(t, s) for t, s in scored if top - s <= TIE_EPSILON]
    for template, s in tied:
        if template.features.primary_direction is features.primary_direction:
            return template, s
    return tied[0]

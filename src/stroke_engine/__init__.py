"""StrokeEngine - Pointer stroke gesture recognition."""

__version__ = "0.1.0"

from stroke_engine.geometry import Point2D, Rect
from stroke_engine.paths import simplify, normalize
from stroke_engine.features import Direction, FeatureVector, extract
from stroke_engine.scoring import score, FEATURE_WEIGHTS
from stroke_engine.templates import GestureTemplate, ShapeClass, TemplateRegistry, TemplateSummary
from stroke_engine.config import EngineConfig
from stroke_engine.errors import (
    StrokeEngineError,
    DuplicateTemplateName,
    InvalidTemplate,
    InvalidConfigurationValue,
    SessionStateViolation,
)
from stroke_engine.events import EventBus
from stroke_engine.session import (
    RecognitionSession,
    RecognitionResult,
    Recognized,
    Failed,
    FailureReason,
    SessionState,
)
from stroke_engine.recorder import RawStroke, StrokeRecorder
from stroke_engine.profiler import PipelineProfiler
from stroke_engine.metrics import MetricsCollector

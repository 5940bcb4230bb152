"""Edge case tests for StrokeEngine."""

import math

import numpy as np
import pytest

from stroke_engine.config import EngineConfig
from stroke_engine.features import extract
from stroke_engine.geometry import Point2D
from stroke_engine.paths import normalize, simplify
from stroke_engine.session import Failed, FailureReason, Recognized, RecognitionSession


@pytest.fixture
def session():
    return RecognitionSession(config=EngineConfig(archive_size=0))


class TestDegenerateStrokes:
    def test_empty(self, session):
        assert session.recognize([]).reason is FailureReason.TOO_FEW_POINTS

    def test_repeated_point(self, session):
        result = session.recognize([(5, 5)] * 30)
        assert result.reason is FailureReason.TOO_SHORT

    def test_two_identical_points(self, session):
        assert session.recognize([(1, 1), (1, 1)]).reason is FailureReason.TOO_SHORT

    def test_just_long_enough(self, session):
        result = session.recognize([(0, 0), (30, 0)])
        assert isinstance(result, Recognized)
        assert result.template.name == "SwipeRight"

    def test_just_too_short(self, session):
        assert session.recognize([(0, 0), (29.9, 0)]).reason is FailureReason.TOO_SHORT

    def test_back_and_forth(self, session):
        result = session.recognize([(0, 0), (100, 0), (0, 0), (100, 0)])
        assert isinstance(result, (Recognized, Failed))


class TestExtremeCoordinates:
    def test_very_large(self, session):
        pts = [(1e9 + x * 1e6, 5e8) for x in range(10)]
        result = session.recognize(pts)
        assert isinstance(result, Recognized)
        assert result.template.name == "SwipeRight"

    def test_negative(self, session):
        pts = [(-500 + x * 10, -200) for x in range(11)]
        assert session.recognize(pts).template.name == "SwipeRight"

    def test_tiny_stroke_normalizes(self):
        pts = [Point2D(0, 0), Point2D(1e-6, 0), Point2D(1e-6, 1e-6)]
        out = normalize(pts)
        assert max(p.x for p in out) == pytest.approx(100.0)

    def test_non_finite_input_does_not_raise(self, session):
        pts = [(0, 0), (float("nan"), 10), (50, 50), (100, 0)]
        result = session.recognize(pts)
        assert isinstance(result, (Recognized, Failed))

    def test_numpy_input(self, session):
        pts = np.column_stack([np.linspace(0, 100, 12), np.full(12, 40.0)])
        assert session.recognize(pts).template.name == "SwipeRight"


class TestFeatureEdges:
    def test_features_never_nan(self):
        shapes = [
            [Point2D(0, 0), Point2D(0, 0), Point2D(10, 0)],
            [Point2D(0, 0), Point2D(10, 0), Point2D(10, 0), Point2D(10, 0)],
            [Point2D(3, 3)] * 10,
        ]
        for pts in shapes:
            f = extract(pts)
            for value in (f.total_length, f.avg_segment_length, f.aspect_ratio, f.avg_curvature, f.max_curvature):
                assert not math.isnan(value)

    def test_huge_tolerance_keeps_endpoints(self):
        pts = [Point2D(x, (x % 20) * 3.0) for x in range(0, 200, 5)]
        assert simplify(pts, 1e9) == [pts[0], pts[-1]]


class TestConfigEdges:
    def test_min_length_clamped_floor_still_rejects_jitter(self):
        session = RecognitionSession(config=EngineConfig(min_gesture_length=0, archive_size=0))
        assert session.config.min_gesture_length == 10.0
        assert session.recognize([(0, 0), (5, 0)]).reason is FailureReason.TOO_SHORT

    def test_threshold_one_needs_perfect_match(self):
        session = RecognitionSession(config=EngineConfig(recognition_threshold=1.0, archive_size=0))
        result = session.recognize([(0, 50), (100, 50)])
        assert result.reason is FailureReason.BELOW_THRESHOLD

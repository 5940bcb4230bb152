"""Tests for the geometry helpers."""

import math

import numpy as np
import pytest

from stroke_engine.geometry import (
    EMPTY_RECT,
    Point2D,
    Rect,
    angle_between,
    as_array,
    bounding_box,
    centroid,
    distance_point_to_segment,
    path_length,
    to_points,
)


class TestDistancePointToSegment:
    def test_perpendicular(self):
        d = distance_point_to_segment(Point2D(5, 3), Point2D(0, 0), Point2D(10, 0))
        assert d == pytest.approx(3.0)

    def test_clamped_before_start(self):
        d = distance_point_to_segment(Point2D(-3, 4), Point2D(0, 0), Point2D(10, 0))
        assert d == pytest.approx(5.0)

    def test_clamped_after_end(self):
        d = distance_point_to_segment(Point2D(13, 4), Point2D(0, 0), Point2D(10, 0))
        assert d == pytest.approx(5.0)

    def test_degenerate_segment(self):
        d = distance_point_to_segment(Point2D(3, 4), Point2D(0, 0), Point2D(0, 0))
        assert d == pytest.approx(5.0)

    def test_point_on_segment(self):
        assert distance_point_to_segment(Point2D(5, 5), Point2D(0, 0), Point2D(10, 10)) == pytest.approx(0.0)


class TestPathLength:
    def test_empty_and_single(self):
        assert path_length([]) == 0.0
        assert path_length([Point2D(1, 1)]) == 0.0

    def test_polyline(self):
        pts = [Point2D(0, 0), Point2D(3, 4), Point2D(3, 10)]
        assert path_length(pts) == pytest.approx(11.0)


class TestCentroid:
    def test_empty_returns_origin(self):
        assert centroid([]) == Point2D(0.0, 0.0)

    def test_mean(self):
        c = centroid([Point2D(0, 0), Point2D(4, 0), Point2D(2, 6)])
        assert c.x == pytest.approx(2.0)
        assert c.y == pytest.approx(2.0)


class TestAngleBetween:
    def test_same_direction(self):
        assert angle_between((1, 0), (5, 0)) == pytest.approx(0.0)

    def test_opposite(self):
        assert angle_between((1, 0), (-2, 0)) == pytest.approx(math.pi)

    def test_right_angle(self):
        assert angle_between((0, 3), (2, 0)) == pytest.approx(math.pi / 2)

    def test_zero_vector(self):
        assert angle_between((0, 0), (1, 0)) == 0.0

    def test_no_nan_from_rounding(self):
        # cos slightly > 1 from floating error must not produce NaN
        a = angle_between((0.1, 0.2), (0.1 * 3, 0.2 * 3))
        assert not math.isnan(a)
        assert a == pytest.approx(0.0, abs=1e-6)


class TestBoundingBox:
    def test_empty(self):
        assert bounding_box([]) == EMPTY_RECT

    def test_box(self):
        box = bounding_box([Point2D(2, 5), Point2D(-1, 3), Point2D(4, 9)])
        assert box == Rect(-1, 3, 5, 6)
        assert box.right == 4
        assert box.bottom == 9


class TestConversion:
    def test_to_points_accepts_pairs(self):
        pts = to_points([(1, 2), [3, 4], np.array([5.0, 6.0])])
        assert pts == [Point2D(1, 2), Point2D(3, 4), Point2D(5, 6)]
        assert all(isinstance(p.x, float) for p in pts)

    def test_as_array_shape(self):
        assert as_array([Point2D(1, 2), Point2D(3, 4)]).shape == (2, 2)
        assert as_array([]).shape == (0, 2)

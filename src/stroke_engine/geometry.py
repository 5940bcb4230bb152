"""Pure 2D geometry helpers shared by every pipeline stage.

All functions are total: they return a defined value for empty or
degenerate input and never produce NaN/inf for finite coordinates.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, NamedTuple, Sequence

import numpy as np


class Point2D(NamedTuple):
    """Immutable 2D point in pixels or device-independent units."""
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle."""
    x: float
    y: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.x + self.width

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def diagonal(self) -> float:
        return math.hypot(self.width, self.height)

    def to_dict(self) -> dict:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}


EMPTY_RECT = Rect(0.0, 0.0, 0.0, 0.0)
ORIGIN = Point2D(0.0, 0.0)


def to_point(value) -> Point2D:
    """Coerce an ``(x, y)`` pair (tuple, list, array, Point2D) to Point2D."""
    if isinstance(value, Point2D):
        return value
    x, y = value
    return Point2D(float(x), float(y))


def to_points(values: Iterable) -> list[Point2D]:
    return [to_point(v) for v in values]


def as_array(points: Sequence[Point2D]) -> np.ndarray:
    """Points as a float64 array of shape (N, 2)."""
    if len(points) == 0:
        return np.zeros((0, 2), dtype=np.float64)
    return np.asarray(points, dtype=np.float64).reshape(-1, 2)


def distance(a: Point2D, b: Point2D) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def distance_point_to_segment(p: Point2D, a: Point2D, b: Point2D) -> float:
    """Distance from ``p`` to segment ``ab``.

    The projection parameter is clamped to [0, 1], so points beyond either
    end measure to the nearest endpoint. A zero-length segment degrades to
    point-to-point distance.
    """
    cx, cy = b[0] - a[0], b[1] - a[1]
    len_sq = cx * cx + cy * cy
    if len_sq == 0:
        return distance(p, a)

    t = ((p[0] - a[0]) * cx + (p[1] - a[1]) * cy) / len_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(p[0] - (a[0] + t * cx), p[1] - (a[1] + t * cy))


def path_length(points: Sequence[Point2D]) -> float:
    """Sum of consecutive Euclidean distances (0 for fewer than 2 points)."""
    if len(points) < 2:
        return 0.0
    pts = as_array(points)
    return float(np.sum(np.linalg.norm(np.diff(pts, axis=0), axis=1)))


def centroid(points: Sequence[Point2D]) -> Point2D:
    """Arithmetic mean of all points. Returns the origin for empty input."""
    if len(points) == 0:
        return ORIGIN
    mean = as_array(points).mean(axis=0)
    return Point2D(float(mean[0]), float(mean[1]))


def bounding_box(points: Sequence[Point2D]) -> Rect:
    if len(points) == 0:
        return EMPTY_RECT
    pts = as_array(points)
    lo = pts.min(axis=0)
    hi = pts.max(axis=0)
    return Rect(float(lo[0]), float(lo[1]), float(hi[0] - lo[0]), float(hi[1] - lo[1]))


def angle_between(v1: Sequence[float], v2: Sequence[float]) -> float:
    """Unsigned angle between two vectors, in [0, pi].

    Zero-length vectors have no direction; the angle is reported as 0.
    """
    len1 = math.hypot(v1[0], v1[1])
    len2 = math.hypot(v2[0], v2[1])
    if len1 == 0 or len2 == 0:
        return 0.0
    cos_angle = (v1[0] * v2[0] + v1[1] * v2[1]) / (len1 * len2)
    return math.acos(max(-1.0, min(1.0, cos_angle)))

"""Shape descriptors for a (normalized) stroke.

The feature vector summarizes a stroke with a handful of scalars and three
boolean shape classes (closed / linear / circular). The scorer compares
these vectors, never the raw points.

Usage:
    features = extract(normalize(simplify(points, 5.0)), tolerance=5.0)
    if features.is_circular:
        ...
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Sequence

import numpy as np

from stroke_engine.geometry import (
    EMPTY_RECT,
    ORIGIN,
    Point2D,
    Rect,
    angle_between,
    as_array,
    bounding_box,
    centroid,
    distance,
    distance_point_to_segment,
    path_length,
)

DEFAULT_TOLERANCE = 5.0

DIRECTION_TIE_TOLERANCE = 1e-9  # relative |dx| vs |dy| band treated as a tie
CLOSED_GAP_RATIO = 0.10  # first→last gap, as a fraction of path length
CIRCULAR_SPREAD_RATIO = 0.20  # std / mean of centroid distances
MIN_CIRCULAR_POINTS = 5


class Direction(Enum):
    """Cardinal direction in screen coordinates (+y points down)."""
    NONE = "none"
    UP = "up"
    DOWN = "down"
    LEFT = "left"
    RIGHT = "right"


def classify_direction(dx: float, dy: float) -> Direction:
    """Cardinal direction of a vector. Ties go to the horizontal axis.

    |dx| and |dy| equal up to rounding noise count as a tie.
    """
    if dx == 0 and dy == 0:
        return Direction.NONE
    ax, ay = abs(dx), abs(dy)
    if ax >= ay or math.isclose(ax, ay, rel_tol=DIRECTION_TIE_TOLERANCE):
        return Direction.RIGHT if dx > 0 else Direction.LEFT
    return Direction.DOWN if dy > 0 else Direction.UP


@dataclass(frozen=True)
class FeatureVector:
    """Fixed set of descriptors for one stroke or template."""
    point_count: int = 0
    total_length: float = 0.0
    avg_segment_length: float = 0.0
    direction_change_count: int = 0
    primary_direction: Direction = Direction.NONE
    bounding_box: Rect = field(default=EMPTY_RECT)
    aspect_ratio: float = 0.0
    center_of_mass: Point2D = field(default=ORIGIN)
    avg_curvature: float = 0.0  # radians
    max_curvature: float = 0.0
    is_closed: bool = False
    is_linear: bool = False
    is_circular: bool = False

    @classmethod
    def empty(cls) -> FeatureVector:
        return cls()

    def to_dict(self) -> dict:
        return {
            "point_count": self.point_count,
            "total_length": self.total_length,
            "avg_segment_length": self.avg_segment_length,
            "direction_change_count": self.direction_change_count,
            "primary_direction": self.primary_direction.value,
            "bounding_box": self.bounding_box.to_dict(),
            "aspect_ratio": self.aspect_ratio,
            "center_of_mass": [self.center_of_mass.x, self.center_of_mass.y],
            "avg_curvature": self.avg_curvature,
            "max_curvature": self.max_curvature,
            "is_closed": self.is_closed,
            "is_linear": self.is_linear,
            "is_circular": self.is_circular,
        }


def extract(points: Sequence[Point2D], tolerance: float = DEFAULT_TOLERANCE) -> FeatureVector:
    """Compute the feature vector of a stroke.

    Args:
        points: Stroke points, normally already simplified and normalized.
        tolerance: Simplification tolerance; also the deviation bound
            under which a stroke counts as linear.

    Returns:
        FeatureVector. Strokes with fewer than 2 points get the empty vector.
    """
    if len(points) < 2:
        return FeatureVector.empty()

    total = path_length(points)
    box = bounding_box(points)
    curvature = _curvatures(points)

    return FeatureVector(
        point_count=len(points),
        total_length=total,
        avg_segment_length=total / (len(points) - 1),
        direction_change_count=_count_direction_changes(points),
        primary_direction=classify_direction(
            points[-1][0] - points[0][0], points[-1][1] - points[0][1]
        ),
        bounding_box=box,
        aspect_ratio=box.width / max(1.0, box.height),
        center_of_mass=centroid(points),
        avg_curvature=float(np.mean(curvature)) if curvature else 0.0,
        max_curvature=max(curvature) if curvature else 0.0,
        is_closed=_is_closed(points, total),
        is_linear=_is_linear(points, tolerance),
        is_circular=_is_circular(points),
    )


def _count_direction_changes(points: Sequence[Point2D]) -> int:
    changes = 0
    previous = Direction.NONE
    for a, b in zip(points, points[1:]):
        current = classify_direction(b[0] - a[0], b[1] - a[1])
        if current is Direction.NONE:
            continue  # repeated point
        if previous is not Direction.NONE and current is not previous:
            changes += 1
        previous = current
    return changes


def _curvatures(points: Sequence[Point2D]) -> list[float]:
    """Turning angle at each interior point with two non-degenerate neighbours."""
    angles = []
    for prev, cur, nxt in zip(points, points[1:], points[2:]):
        v1 = (prev[0] - cur[0], prev[1] - cur[1])
        v2 = (nxt[0] - cur[0], nxt[1] - cur[1])
        if (v1[0] == 0 and v1[1] == 0) or (v2[0] == 0 and v2[1] == 0):
            continue
        angles.append(angle_between(v1, v2))
    return angles


def _is_closed(points: Sequence[Point2D], total_length: float) -> bool:
    if len(points) < 3:
        return False
    return distance(points[0], points[-1]) <= total_length * CLOSED_GAP_RATIO


def _is_linear(points: Sequence[Point2D], tolerance: float) -> bool:
    interior = points[1:-1]
    if not interior:
        return True
    first, last = points[0], points[-1]
    deviation = sum(distance_point_to_segment(p, first, last) for p in interior)
    return deviation / len(interior) < tolerance


def _is_circular(points: Sequence[Point2D]) -> bool:
    if len(points) < MIN_CIRCULAR_POINTS:
        return False
    pts = as_array(points)
    radii = np.linalg.norm(pts - pts.mean(axis=0), axis=1)
    mean = float(radii.mean())
    return float(radii.std()) < mean * CIRCULAR_SPREAD_RATIO


def curvature_in_degrees(features: FeatureVector) -> tuple[float, float]:
    """(avg, max) curvature in degrees, for display."""
    return math.degrees(features.avg_curvature), math.degrees(features.max_curvature)

"""Stroke reduction and normalization.

``simplify`` drops points that don't change the shape of a stroke;
``normalize`` maps a stroke into the canonical frame, where the longer
bounding-box axis spans 0..100 and the aspect ratio is preserved.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from stroke_engine.geometry import Point2D, as_array, distance_point_to_segment

CANONICAL_SIZE = 100.0


def simplify(points: Sequence[Point2D], tolerance: float) -> list[Point2D]:
    """Reduce a stroke with a single-pass deviation filter.

    An interior point survives only if it lies more than ``tolerance`` away
    from the segment joining the last kept point and the next raw point.
    First and last points are always kept. O(n).
    """
    if len(points) <= 2:
        return list(points)

    kept = [points[0]]
    for i in range(1, len(points) - 1):
        if distance_point_to_segment(points[i], kept[-1], points[i + 1]) > tolerance:
            kept.append(points[i])
    kept.append(points[-1])
    return kept


def normalize(points: Sequence[Point2D]) -> list[Point2D]:
    """Translate to the origin and scale the longer axis to 100 units.

    A stroke with zero extent (one point, possibly repeated) is returned
    unchanged.
    """
    if len(points) == 0:
        return []

    pts = as_array(points)
    lo = pts.min(axis=0)
    scale = float(np.max(pts.max(axis=0) - lo))
    if scale == 0:
        return list(points)

    mapped = (pts - lo) * CANONICAL_SIZE / scale
    return [Point2D(float(x), float(y)) for x, y in mapped]

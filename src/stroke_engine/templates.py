"""Gesture templates and the registry they are matched from.

Templates are defined by a handful of anchor points that are interpolated
into a dense polyline, normalized, and reduced to a feature vector once at
construction time. Built-in set: four swipes, a circle, an L, a V and a Z.

Usage:
    registry = TemplateRegistry.with_defaults()
    registry.add(registry.create_template("Check", [(0, 50), (30, 80), (100, 0)]))
    for template in registry:
        print(template.name, template.features.is_closed)
"""

from __future__ import annotations

import logging
import math
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator, Optional, Sequence

from stroke_engine.errors import DuplicateTemplateName, InvalidTemplate
from stroke_engine.features import DEFAULT_TOLERANCE, FeatureVector, extract
from stroke_engine.geometry import Point2D, to_points
from stroke_engine.paths import normalize

logger = logging.getLogger("stroke_engine.templates")


class ShapeClass(Enum):
    """Coarse family a template belongs to. Informational only."""
    SWIPE = "swipe"
    CIRCLE = "circle"
    L_SHAPE = "l_shape"
    V_SHAPE = "v_shape"
    Z_SHAPE = "z_shape"
    CUSTOM = "custom"


@dataclass(frozen=True)
class GestureTemplate:
    """A named reference gesture with precomputed features.

    ``action`` is an opaque tag for the host (a command id, a callable,
    anything). The engine hands it back on a match and never calls it.
    """
    name: str
    template_points: tuple[Point2D, ...]
    features: FeatureVector
    description: str = ""
    shape: ShapeClass = ShapeClass.CUSTOM
    action: Any = field(default=None, compare=False)

    @classmethod
    def from_points(
        cls,
        name: str,
        points: Iterable,
        description: str = "",
        shape: ShapeClass = ShapeClass.CUSTOM,
        action: Any = None,
        tolerance: float = DEFAULT_TOLERANCE,
    ) -> GestureTemplate:
        """Build a template, normalizing the points and extracting features.

        Raises:
            InvalidTemplate: Empty name or fewer than 2 points.
        """
        if not name:
            raise InvalidTemplate("Template name cannot be empty")
        pts = to_points(points)
        if len(pts) < 2:
            raise InvalidTemplate(f"Template '{name}' needs at least 2 points, got {len(pts)}")

        normalized = normalize(pts)
        return cls(
            name=name,
            template_points=tuple(normalized),
            features=extract(normalized, tolerance),
            description=description,
            shape=shape,
            action=action,
        )

    def summary(self) -> TemplateSummary:
        return TemplateSummary(
            name=self.name,
            description=self.description,
            shape=self.shape,
            point_count=len(self.template_points),
        )


@dataclass(frozen=True)
class TemplateSummary:
    """Lightweight view of a template for listing."""
    name: str
    description: str
    shape: ShapeClass
    point_count: int

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "description": self.description,
            "shape": self.shape.value,
            "point_count": self.point_count,
        }


# --- point generators ---


def interpolate_polyline(anchors: Sequence, segments_per_side: int) -> list[Point2D]:
    """Dense polyline through ``anchors``.

    Each side contributes ``segments_per_side`` evenly spaced points after
    the first anchor, so the result has ``1 + sides * segments_per_side``
    points and passes exactly through every anchor.
    """
    pts = to_points(anchors)
    if len(pts) < 2 or segments_per_side < 1:
        return pts

    out = [pts[0]]
    for start, end in zip(pts, pts[1:]):
        step_x = (end.x - start.x) / segments_per_side
        step_y = (end.y - start.y) / segments_per_side
        for i in range(1, segments_per_side):
            out.append(Point2D(start.x + i * step_x, start.y + i * step_y))
        out.append(end)
    return out


def generate_line(start, end, point_count: int) -> list[Point2D]:
    """``point_count`` evenly spaced points from ``start`` to ``end`` inclusive."""
    return interpolate_polyline([start, end], max(1, point_count - 1))


def generate_circle(center, radius: float, point_count: int) -> list[Point2D]:
    """Points on a circle, starting at angle 0; the first point is not repeated."""
    cx, cy = center
    return [
        Point2D(
            cx + radius * math.cos(2 * math.pi * i / point_count),
            cy + radius * math.sin(2 * math.pi * i / point_count),
        )
        for i in range(point_count)
    ]


# --- registry ---


class ReadWriteLock:
    """Many concurrent readers, or one writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read(self) -> Iterator[None]:
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self) -> Iterator[None]:
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class TemplateRegistry:
    """Named gesture templates, in registration order.

    Reads (scoring) may run concurrently; add/remove/replace are exclusive.
    """

    def __init__(self, tolerance: float = DEFAULT_TOLERANCE):
        self.tolerance = tolerance
        self._templates: dict[str, GestureTemplate] = {}
        self._lock = ReadWriteLock()

    def add(self, template: GestureTemplate):
        """Register a template.

        Raises:
            DuplicateTemplateName: A template with this name already exists.
        """
        with self._lock.write():
            if template.name in self._templates:
                raise DuplicateTemplateName(template.name)
            self._templates[template.name] = template
        logger.debug("Registered template %s", template.name)

    def replace(self, template: GestureTemplate):
        """Register a template, overwriting any existing one with the same name."""
        with self._lock.write():
            self._templates[template.name] = template
        logger.debug("Replaced template %s", template.name)

    def remove(self, name: str) -> bool:
        with self._lock.write():
            removed = self._templates.pop(name, None) is not None
        if removed:
            logger.debug("Removed template %s", name)
        return removed

    def get(self, name: str) -> Optional[GestureTemplate]:
        with self._lock.read():
            return self._templates.get(name)

    def list_all(self) -> list[GestureTemplate]:
        """Snapshot of all templates in registration order."""
        with self._lock.read():
            return list(self._templates.values())

    def create_template(
        self,
        name: str,
        points: Iterable,
        description: str = "",
        action: Any = None,
        shape: ShapeClass = ShapeClass.CUSTOM,
    ) -> GestureTemplate:
        """Build a template using this registry's tolerance (does not register it)."""
        return GestureTemplate.from_points(
            name, points, description=description, shape=shape,
            action=action, tolerance=self.tolerance,
        )

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._templates)

    def __contains__(self, name: object) -> bool:
        with self._lock.read():
            return name in self._templates

    def __iter__(self) -> Iterator[GestureTemplate]:
        return iter(self.list_all())

    @classmethod
    def with_defaults(cls, tolerance: float = DEFAULT_TOLERANCE) -> TemplateRegistry:
        """Create a registry with the built-in template set."""
        registry = cls(tolerance=tolerance)

        def add(name, description, shape, points):
            registry.add(registry.create_template(name, points, description=description, shape=shape))

        add("SwipeRight", "Horizontal swipe to the right", ShapeClass.SWIPE,
            generate_line((0, 50), (100, 50), 20))
        add("SwipeLeft", "Horizontal swipe to the left", ShapeClass.SWIPE,
            generate_line((100, 50), (0, 50), 20))
        add("SwipeUp", "Vertical swipe upward", ShapeClass.SWIPE,
            generate_line((50, 100), (50, 0), 20))
        add("SwipeDown", "Vertical swipe downward", ShapeClass.SWIPE,
            generate_line((50, 0), (50, 100), 20))

        add("Circle", "Circle", ShapeClass.CIRCLE,
            generate_circle((50, 50), 40, 30))

        add("LShapeRightDown", "L shape: right, then down", ShapeClass.L_SHAPE,
            interpolate_polyline([(20, 20), (80, 20), (80, 80)], 15))
        add("VShape", "V shape", ShapeClass.V_SHAPE,
            interpolate_polyline([(20, 80), (50, 20), (80, 80)], 15))
        add("ZShape", "Z shape", ShapeClass.Z_SHAPE,
            interpolate_polyline([(20, 20), (80, 20), (20, 80), (80, 80)], 15))

        return registry

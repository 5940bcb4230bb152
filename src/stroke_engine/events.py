"""Observable session events.

Hosts subscribe to the events they care about; the session emits them as
a stroke progresses. A subscriber that raises is logged and skipped, so a
buggy UI callback cannot break recognition.

Event names and payloads:
    recording_started   RecordingStarted
    point_added         PointAdded
    recording_stopped   RecordingStopped
    recognized          Recognized (from stroke_engine.session)
    recognition_failed  Failed (from stroke_engine.session)

Usage:
    @session.events.on("recognized")
    def handle(result):
        dispatch(result.template.action)

    session.events.on("*")(lambda payload: log.debug("%r", payload))
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable

from stroke_engine.geometry import Point2D

logger = logging.getLogger("stroke_engine.events")

RECORDING_STARTED = "recording_started"
POINT_ADDED = "point_added"
RECORDING_STOPPED = "recording_stopped"
RECOGNIZED = "recognized"
RECOGNITION_FAILED = "recognition_failed"

EVENT_NAMES = (RECORDING_STARTED, POINT_ADDED, RECORDING_STOPPED, RECOGNIZED, RECOGNITION_FAILED)
WILDCARD = "*"


@dataclass
class RecordingStarted:
    point: Point2D
    timestamp: float


@dataclass
class PointAdded:
    point: Point2D
    point_count: int
    timestamp: float


@dataclass
class RecordingStopped:
    start_point: Point2D
    end_point: Point2D
    points: list[Point2D] = field(default_factory=list)
    duration: float = 0.0  # seconds
    timed_out: bool = False


class EventBus:
    """Name-keyed subscriber lists with a ``*`` wildcard."""

    def __init__(self):
        self._handlers: dict[str, list[Callable[[Any], None]]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event: str, handler: Callable[[Any], None]):
        if event != WILDCARD and event not in EVENT_NAMES:
            raise ValueError(f"Unknown event '{event}'")
        with self._lock:
            self._handlers.setdefault(event, []).append(handler)

    def unsubscribe(self, event: str, handler: Callable[[Any], None]) -> bool:
        with self._lock:
            handlers = self._handlers.get(event, [])
            if handler in handlers:
                handlers.remove(handler)
                return True
        return False

    def on(self, event: str = WILDCARD):
        """Decorator form of :meth:`subscribe`."""
        def decorator(fn: Callable[[Any], None]):
            self.subscribe(event, fn)
            return fn
        return decorator

    def emit(self, event: str, payload: Any):
        with self._lock:
            handlers = self._handlers.get(event, []) + self._handlers.get(WILDCARD, [])
        for handler in handlers:
            try:
                handler(payload)
            except Exception as e:
                logger.error("Handler %r for %s failed: %s", handler, event, e)

    def clear(self):
        with self._lock:
            self._handlers.clear()

    def handler_count(self, event: str) -> int:
        with self._lock:
            return len(self._handlers.get(event, []))

"""Stroke archive: keep recent strokes and their outcomes for diagnostics.

Archived strokes can be saved to disk and replayed through a session
later, giving reproducible bug reports and regression fixtures without
a pointing device.

Usage:
    archive = StrokeRecorder(max_strokes=100)
    session = RecognitionSession(archive=archive)
    ...
    archive.save("strokes.json")

    for stroke in StrokeRecorder.load("strokes.json").strokes:
        print(session.recognize(stroke.points))
"""

from __future__ import annotations

import json
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Optional

import numpy as np

from stroke_engine.geometry import Point2D, as_array, to_points

ARCHIVE_VERSION = 1


@dataclass
class RawStroke:
    """Points captured during one recording, with monotonic timestamps."""
    points: list[Point2D] = field(default_factory=list)
    start_time: float = 0.0
    last_update_time: float = 0.0
    outcome: Optional[str] = None  # template name or failure reason, once known
    confidence: float = 0.0

    @property
    def duration(self) -> float:
        return max(0.0, self.last_update_time - self.start_time)

    def to_dict(self) -> dict:
        return {
            "points": [[p.x, p.y] for p in self.points],
            "start_time": self.start_time,
            "last_update_time": self.last_update_time,
            "outcome": self.outcome,
            "confidence": self.confidence,
        }

    @classmethod
    def from_dict(cls, data: dict) -> RawStroke:
        return cls(
            points=to_points(data.get("points", [])),
            start_time=data.get("start_time", 0.0),
            last_update_time=data.get("last_update_time", 0.0),
            outcome=data.get("outcome"),
            confidence=data.get("confidence", 0.0),
        )


class StrokeRecorder:
    """Bounded archive of completed strokes (oldest dropped first)."""

    def __init__(self, max_strokes: int = 50):
        self._strokes: deque[RawStroke] = deque(maxlen=max_strokes or None)

    def add(self, stroke: RawStroke):
        self._strokes.append(stroke)

    @property
    def strokes(self) -> list[RawStroke]:
        return list(self._strokes)

    @property
    def stroke_count(self) -> int:
        return len(self._strokes)

    def clear(self):
        self._strokes.clear()

    def __iter__(self) -> Iterator[RawStroke]:
        return iter(self.strokes)

    def save(self, path: str | Path):
        """Save archive to a JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        data = {
            "version": ARCHIVE_VERSION,
            "stroke_count": len(self._strokes),
            "strokes": [s.to_dict() for s in self._strokes],
        }
        with open(path, "w") as f:
            json.dump(data, f)

    def save_compact(self, path: str | Path) -> Path:
        """Save points as a flat numpy array plus per-stroke offsets (.npz)."""
        path = Path(path).with_suffix(".npz")
        path.parent.mkdir(parents=True, exist_ok=True)

        strokes = list(self._strokes)
        lengths = np.array([len(s.points) for s in strokes], dtype=np.int64)
        if strokes:
            points = np.concatenate([as_array(s.points) for s in strokes])
        else:
            points = np.zeros((0, 2), dtype=np.float64)
        np.savez_compressed(
            path,
            points=points,
            lengths=lengths,
            times=np.array([[s.start_time, s.last_update_time] for s in strokes], dtype=np.float64).reshape(-1, 2),
            meta=np.array([json.dumps([[s.outcome, s.confidence] for s in strokes])]),
        )
        return path

    @classmethod
    def load(cls, path: str | Path, max_strokes: int = 0) -> StrokeRecorder:
        """Load an archive written by :meth:`save` or :meth:`save_compact`.

        A JSON file holding a bare list of ``[x, y]`` pairs loads as a
        single stroke.
        """
        path = Path(path)
        if path.suffix == ".npz":
            strokes = cls._load_compact(path)
        else:
            with open(path) as f:
                data = json.load(f)
            if isinstance(data, list):
                strokes = [RawStroke(points=to_points(data))]
            else:
                strokes = [RawStroke.from_dict(s) for s in data.get("strokes", [])]

        recorder = cls(max_strokes=max_strokes or len(strokes))
        for stroke in strokes:
            recorder.add(stroke)
        return recorder

    @staticmethod
    def _load_compact(path: Path) -> list[RawStroke]:
        data = np.load(path, allow_pickle=False)
        points = data["points"]
        lengths = data["lengths"]
        times = data["times"]
        meta = json.loads(str(data["meta"][0]))

        strokes = []
        offset = 0
        for i, n in enumerate(lengths):
            n = int(n)
            chunk = points[offset:offset + n]
            offset += n
            outcome, confidence = meta[i] if i < len(meta) else (None, 0.0)
            strokes.append(RawStroke(
                points=[Point2D(float(x), float(y)) for x, y in chunk],
                start_time=float(times[i, 0]),
                last_update_time=float(times[i, 1]),
                outcome=outcome,
                confidence=confidence,
            ))
        return strokes

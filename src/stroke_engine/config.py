"""Engine configuration.

Every knob has a valid range. Out-of-range values are clamped (and logged),
never rejected, so a host can pass user-entered settings straight through.
Config can be loaded from YAML:

    min_gesture_length: 30
    max_gesture_time_ms: 2000
    simplification_tolerance: 5
    recognition_threshold: 0.7
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any

import yaml

from stroke_engine.errors import InvalidConfigurationValue

logger = logging.getLogger("stroke_engine.config")

# key → (min, max); None means unbounded
_LIMITS: dict[str, tuple[float | None, float | None]] = {
    "min_gesture_length": (10, None),
    "max_gesture_time_ms": (500, None),
    "simplification_tolerance": (1, None),
    "recognition_threshold": (0.1, 1.0),
    "archive_size": (0, None),
}


@dataclass
class EngineConfig:
    min_gesture_length: float = 30.0
    max_gesture_time_ms: int = 2000
    simplification_tolerance: float = 5.0
    recognition_threshold: float = 0.7
    strict_state: bool = False  # raise SessionStateViolation instead of ignoring
    archive_size: int = 50  # strokes kept for diagnostics

    def __post_init__(self):
        for key, (lo, hi) in _LIMITS.items():
            raw = getattr(self, key)
            field_type = int if key in ("max_gesture_time_ms", "archive_size") else float
            try:
                value = field_type(raw)
            except (TypeError, ValueError, OverflowError):
                raise InvalidConfigurationValue(key, raw) from None

            clamped = value
            if lo is not None:
                clamped = max(field_type(lo), clamped)
            if hi is not None:
                clamped = min(field_type(hi), clamped)
            if clamped != value:
                logger.warning("Config %s=%r out of range, clamped to %r", key, raw, clamped)
            setattr(self, key, clamped)
        self.strict_state = bool(self.strict_state)

    @property
    def timeout_seconds(self) -> float:
        return self.max_gesture_time_ms / 1000.0

    def replace(self, **changes: Any) -> EngineConfig:
        """Copy with some fields changed (clamped like the constructor)."""
        return dataclasses.replace(self, **_known_keys(changes))

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> EngineConfig:
        return cls(**_known_keys(data))

    @classmethod
    def from_yaml(cls, path: str | Path) -> EngineConfig:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise InvalidConfigurationValue(str(path), data)
        return cls.from_dict(data)

    def to_yaml(self, path: str | Path):
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w") as f:
            yaml.safe_dump(self.to_dict(), f, sort_keys=False)


def _known_keys(data: dict) -> dict:
    names = {f.name for f in dataclasses.fields(EngineConfig)}
    unknown = sorted(set(data) - names)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
    return {k: v for k, v in data.items() if k in names}

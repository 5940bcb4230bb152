"""Exception types raised by StrokeEngine.

Recognition failures are never raised; they come back as
:class:`~stroke_engine.session.Failed` results. The exceptions here cover
programming errors at the API boundary.
"""

from __future__ import annotations


class StrokeEngineError(Exception):
    """Base class for all StrokeEngine errors."""


class DuplicateTemplateName(StrokeEngineError):
    """A template with the same name is already registered."""

    def __init__(self, name: str):
        super().__init__(f"Template '{name}' is already registered")
        self.name = name


class InvalidTemplate(StrokeEngineError):
    """Template could not be built from the given name/points."""


class InvalidConfigurationValue(StrokeEngineError):
    """A configuration value cannot be used as a number.

    Covers non-numeric values and infinity for an integer knob.

    Out-of-range numbers are clamped instead of raising.
    """

    def __init__(self, key: str, value: object):
        super().__init__(f"Invalid value for '{key}': {value!r}")
        self.key = key
        self.value = value


class SessionStateViolation(StrokeEngineError):
    """Session method called in the wrong state (only raised in strict mode)."""

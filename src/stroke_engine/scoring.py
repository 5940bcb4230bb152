"""Similarity between two feature vectors.

The score is a weighted blend of seven sub-scores. Shape-class agreement
(closed / linear / circular) carries half the weight, so two strokes of the
same shape still match strongly when their size and sampling differ.
"""

from __future__ import annotations

import math

from stroke_engine.features import FeatureVector

FEATURE_WEIGHTS: dict[str, float] = {
    "point_count": 0.10,
    "total_length": 0.10,
    "direction_change_count": 0.15,
    "aspect_ratio": 0.15,
    "is_closed": 0.20,
    "is_linear": 0.15,
    "is_circular": 0.15,
}

_NUMERIC = ("point_count", "total_length", "direction_change_count", "aspect_ratio")
_BOOLEAN = ("is_closed", "is_linear", "is_circular")


def relative_similarity(a: float, b: float) -> float:
    """``1 - |a - b| / max(a, b)``; two zeros are a perfect match."""
    denom = max(a, b)
    if denom == 0:
        return 1.0 if a == b else 0.0
    sim = 1.0 - abs(a - b) / abs(denom)
    if math.isnan(sim):
        return 0.0
    return max(0.0, min(1.0, sim))


def sub_scores(a: FeatureVector, b: FeatureVector) -> dict[str, float]:
    """Per-feature similarity in [0, 1], keyed like FEATURE_WEIGHTS."""
    scores = {name: relative_similarity(getattr(a, name), getattr(b, name)) for name in _NUMERIC}
    for name in _BOOLEAN:
        scores[name] = 1.0 if getattr(a, name) == getattr(b, name) else 0.0
    return scores


def score(a: FeatureVector, b: FeatureVector) -> float:
    """Confidence in [0, 1] that two feature vectors describe the same gesture."""
    parts = sub_scores(a, b)
    total = sum(FEATURE_WEIGHTS[name] * value for name, value in parts.items())
    return max(0.0, min(1.0, total))

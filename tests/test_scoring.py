"""Tests for feature-vector similarity."""

import math

import pytest

from stroke_engine.features import FeatureVector, extract
from stroke_engine.paths import normalize
from stroke_engine.scoring import FEATURE_WEIGHTS, relative_similarity, score, sub_scores
from stroke_engine.templates import generate_circle, generate_line


class TestWeights:
    def test_sum_to_one(self):
        assert sum(FEATURE_WEIGHTS.values()) == pytest.approx(1.0)

    def test_shape_classes_carry_half(self):
        shape = FEATURE_WEIGHTS["is_closed"] + FEATURE_WEIGHTS["is_linear"] + FEATURE_WEIGHTS["is_circular"]
        assert shape == pytest.approx(0.5)


class TestRelativeSimilarity:
    def test_equal(self):
        assert relative_similarity(7, 7) == 1.0

    def test_both_zero(self):
        assert relative_similarity(0, 0) == 1.0

    def test_one_zero(self):
        assert relative_similarity(0, 10) == 0.0

    def test_ratio(self):
        assert relative_similarity(50, 100) == pytest.approx(0.5)
        assert relative_similarity(100, 50) == pytest.approx(0.5)

    def test_clamped(self):
        assert 0.0 <= relative_similarity(-5, 1) <= 1.0


class TestScore:
    def test_identical_vectors_score_one(self):
        f = extract(normalize(generate_circle((0, 0), 10, 20)))
        assert score(f, f) == pytest.approx(1.0)

    def test_empty_vectors_match(self):
        assert score(FeatureVector.empty(), FeatureVector.empty()) == pytest.approx(1.0)

    def test_symmetric(self):
        a = extract(normalize(generate_circle((0, 0), 10, 20)))
        b = extract(normalize(generate_line((0, 0), (100, 10), 8)))
        assert score(a, b) == pytest.approx(score(b, a))

    def test_boolean_mismatch_costs_its_weight(self):
        a = FeatureVector(point_count=5, total_length=100, is_closed=True)
        b = FeatureVector(point_count=5, total_length=100, is_closed=False)
        assert sub_scores(a, b)["is_closed"] == 0.0
        assert score(a, b) == pytest.approx(1.0 - FEATURE_WEIGHTS["is_closed"])

    def test_circle_vs_line_is_weak(self):
        circle = extract(normalize(generate_circle((50, 50), 40, 30)))
        line = extract(normalize(generate_line((0, 50), (100, 50), 20)))
        assert score(circle, line) < 0.5

    def test_in_range_and_finite(self):
        shapes = [
            extract(normalize(generate_circle((50, 50), 40, 30))),
            extract(normalize(generate_line((0, 0), (1e6, 3), 4))),
            extract(normalize(generate_line((0, 0), (0, 0.001), 2))),
            FeatureVector.empty(),
        ]
        for a in shapes:
            for b in shapes:
                s = score(a, b)
                assert 0.0 <= s <= 1.0
                assert not math.isnan(s)

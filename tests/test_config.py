"""Tests for EngineConfig."""

import logging

import pytest
import yaml

from stroke_engine.config import EngineConfig
from stroke_engine.errors import InvalidConfigurationValue


class TestDefaults:
    def test_values(self):
        cfg = EngineConfig()
        assert cfg.min_gesture_length == 30.0
        assert cfg.max_gesture_time_ms == 2000
        assert cfg.simplification_tolerance == 5.0
        assert cfg.recognition_threshold == 0.7
        assert cfg.strict_state is False
        assert cfg.timeout_seconds == pytest.approx(2.0)


class TestClamping:
    @pytest.mark.parametrize("key,value,expected", [
        ("min_gesture_length", 2, 10.0),
        ("max_gesture_time_ms", 100, 500),
        ("simplification_tolerance", 0, 1.0),
        ("recognition_threshold", 0.01, 0.1),
        ("recognition_threshold", 3.0, 1.0),
        ("archive_size", -4, 0),
    ])
    def test_out_of_range_clamped(self, key, value, expected):
        cfg = EngineConfig(**{key: value})
        assert getattr(cfg, key) == expected

    def test_in_range_untouched(self):
        cfg = EngineConfig(min_gesture_length=55, recognition_threshold=0.85)
        assert cfg.min_gesture_length == 55.0
        assert cfg.recognition_threshold == 0.85

    def test_clamping_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="stroke_engine.config"):
            EngineConfig(min_gesture_length=1)
        assert "clamped" in caplog.text

    def test_non_numeric_rejected(self):
        with pytest.raises(InvalidConfigurationValue) as exc:
            EngineConfig(recognition_threshold="high")
        assert exc.value.key == "recognition_threshold"

    def test_infinite_integer_rejected(self):
        with pytest.raises(InvalidConfigurationValue) as exc:
            EngineConfig(max_gesture_time_ms=float("inf"))
        assert exc.value.key == "max_gesture_time_ms"

    def test_numeric_strings_accepted(self):
        assert EngineConfig(max_gesture_time_ms="1200").max_gesture_time_ms == 1200

    def test_replace_clamps(self):
        cfg = EngineConfig().replace(simplification_tolerance=0.2)
        assert cfg.simplification_tolerance == 1.0


class TestSerialization:
    def test_dict_round_trip(self):
        cfg = EngineConfig(min_gesture_length=40, strict_state=True)
        assert EngineConfig.from_dict(cfg.to_dict()) == cfg

    def test_unknown_keys_ignored(self, caplog):
        with caplog.at_level(logging.WARNING, logger="stroke_engine.config"):
            cfg = EngineConfig.from_dict({"recognition_threshold": 0.8, "colour": "red"})
        assert cfg.recognition_threshold == 0.8
        assert "colour" in caplog.text

    def test_yaml_round_trip(self, tmp_path):
        path = tmp_path / "conf" / "engine.yaml"
        EngineConfig(max_gesture_time_ms=3000).to_yaml(path)
        assert yaml.safe_load(path.read_text())["max_gesture_time_ms"] == 3000
        assert EngineConfig.from_yaml(path).max_gesture_time_ms == 3000

    def test_empty_yaml_gives_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert EngineConfig.from_yaml(path) == EngineConfig()

    def test_yaml_must_be_mapping(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(InvalidConfigurationValue):
            EngineConfig.from_yaml(path)

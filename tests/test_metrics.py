"""Tests for Prometheus metrics."""

from stroke_engine.metrics import MetricsCollector


class TestMetricsCollector:
    def test_record_recognition(self):
        m = MetricsCollector()
        m.record_recognition("Circle")
        m.record_recognition("Circle")
        m.record_recognition("VShape")
        assert m.recognition_counts == {"Circle": 2, "VShape": 1}

    def test_record_failure(self):
        m = MetricsCollector()
        m.record_failure("too_short")
        assert m.failure_counts == {"too_short": 1}

    def test_record_stroke(self):
        m = MetricsCollector()
        m.record_stroke(0.001)
        m.record_stroke(0.002)
        assert m.strokes_total == 2

    def test_render_prometheus_format(self):
        m = MetricsCollector()
        m.record_recognition("SwipeUp")
        m.record_failure("low_score")
        m.record_stroke(0.0004)
        m.set_template_count(8)

        output = m.render()
        assert 'stroke_engine_recognitions_total{template="SwipeUp"} 1' in output
        assert 'stroke_engine_failures_total{reason="low_score"} 1' in output
        assert "stroke_engine_strokes_total 1" in output
        assert "stroke_engine_templates 8" in output
        assert "# HELP" in output
        assert "# TYPE" in output

    def test_histogram_buckets_cumulative(self):
        m = MetricsCollector()
        for _ in range(10):
            m.record_stroke(0.003)
        m.record_stroke(5.0)  # beyond the last bucket
        output = m.render()
        assert 'stroke_engine_recognition_latency_seconds_bucket{le="0.001"} 0' in output
        assert 'stroke_engine_recognition_latency_seconds_bucket{le="0.005"} 10' in output
        assert 'stroke_engine_recognition_latency_seconds_bucket{le="0.1"} 10' in output
        assert 'stroke_engine_recognition_latency_seconds_bucket{le="+Inf"} 11' in output
        assert "stroke_engine_recognition_latency_seconds_count 11" in output

"""
Tests for the metrics module and MetricsMiddleware.

CI-safe: No external dependencies or API keys required.
"""

import importlib
import os
from unittest.mock import patch, MagicMock

import pytest
from prometheus_client import REGISTRY


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _reload_metrics(env_overrides=None):
    """Reload the metrics module with optional env var overrides."""
    env = env_overrides or {}
    with patch.dict(os.environ, env, clear=False):
        import metrics
        return importlib.reload(metrics)


@pytest.fixture
def enabled_metrics():
    """Metrics module with real Prometheus collectors, reset to disabled afterwards."""
    m = _reload_metrics({"METRICS_ENABLED": "true"})
    yield m
    _reload_metrics({"METRICS_ENABLED": "false"})


# ---------------------------------------------------------------------------
# Unit tests: metrics module
# ---------------------------------------------------------------------------

class TestMetricsModule:
    """Tests for backend/metrics.py"""

    def test_metrics_disabled_by_default(self):
        """METRICS_ENABLED defaults to false."""
        m = _reload_metrics({"METRICS_ENABLED": "false"})
        assert m.METRICS_ENABLED is False

    def test_noop_metric_labels(self):
        """NoOp metrics should silently accept any labels."""
        m = _reload_metrics({"METRICS_ENABLED": "false"})
        # Should not raise
        m.http_requests_total.labels(method="GET", path="/test", status="200").inc()
        m.http_request_duration.labels(method="GET", path="/test").observe(0.5)
        m.source_fetch_total.labels(platform="linkedin", outcome="timeout").inc()
        m.analysis_request_duration.labels(model="gemini").observe(3.0)

    def test_track_request(self):
        """track_request increments internal counters."""
        m = _reload_metrics({"METRICS_ENABLED": "false"})
        initial = m._internal_counters["http_requests"]
        m.track_request("GET", "/api/test", 200, 0.05)
        assert m._internal_counters["http_requests"] == initial + 1

    def test_track_fetch_splits_ok_and_failed(self):
        m = _reload_metrics({"METRICS_ENABLED": "false"})
        ok, failed = m._internal_counters["fetches_ok"], m._internal_counters["fetches_failed"]
        m.track_fetch("website", "ok")
        m.track_fetch("twitter", "timeout")
        m.track_fetch("twitter", "http_error")
        assert m._internal_counters["fetches_ok"] == ok + 1
        assert m._internal_counters["fetches_failed"] == failed + 2

    def test_track_analysis_call(self):
        m = _reload_metrics({"METRICS_ENABLED": "false"})
        calls = m._internal_counters["analysis_calls"]
        failures = m._internal_counters["analysis_failures"]
        m.track_analysis_call("gemini-2.0-flash", duration=1.2, outcome="ok")
        m.track_analysis_call("gemini-2.0-flash", duration=0.0, outcome="timeout")
        assert m._internal_counters["analysis_calls"] == calls + 2
        assert m._internal_counters["analysis_failures"] == failures + 1

    def test_get_metrics_summary(self):
        """get_metrics_summary returns expected structure."""
        m = _reload_metrics({"METRICS_ENABLED": "false"})
        m.track_request("POST", "/api/scrape", 201, 0.1)
        summary = m.get_metrics_summary()
        assert summary["metrics_enabled"] is False
        assert summary["uptime_seconds"] >= 0
        assert summary["http_requests_total"] >= 1
        for key in ("source_fetches_ok", "source_fetches_failed", "analysis_calls_total", "analysis_failures_total"):
            assert key in summary

    def test_enabled_metrics_are_exported(self, enabled_metrics):
        """METRICS_ENABLED=true registers real collectors."""
        assert enabled_metrics.METRICS_ENABLED is True
        enabled_metrics.track_fetch("linkedin", "timeout")

        exposition = enabled_metrics.generate_latest().decode()
        assert 'source_fetch_total{platform="linkedin",outcome="timeout"} 1.0' in exposition

    def test_enabled_reload_starts_fresh(self, enabled_metrics):
        """Reloading with metrics on again must not collide with earlier collectors."""
        enabled_metrics.track_fetch("website", "ok")
        m = _reload_metrics({"METRICS_ENABLED": "true"})

        exposition = m.generate_latest().decode()
        assert 'source_fetch_total{platform="website",outcome="ok"}' not in exposition
        assert REGISTRY.get_sample_value(
            "source_fetch_total", {"platform": "linkedin", "outcome": "timeout"}
        ) is None


# ---------------------------------------------------------------------------
# MetricsMiddleware tests
# ---------------------------------------------------------------------------

class TestMetricsMiddleware:
    """Tests for middleware/metrics.py"""

    def test_normalize_path_with_id(self):
        """Path normalization replaces numeric IDs with {id}."""
        from middleware.metrics import normalize_path
        assert normalize_path("/api/competitors/42") == "/api/competitors/{id}"
        assert normalize_path("/api/social-accounts/7") == "/api/social-accounts/{id}"

    def test_normalize_path_no_match(self):
        """Paths without ids are returned unchanged."""
        from middleware.metrics import normalize_path
        assert normalize_path("/api/version") == "/api/version"
        assert normalize_path("/api/user-sentiment/scrape") == "/api/user-sentiment/scrape"

    def test_skip_paths(self):
        """Health and metrics paths are excluded from tracking."""
        from middleware.metrics import MetricsMiddleware
        mw = MetricsMiddleware(app=MagicMock())
        assert "/health" in mw._SKIP_PATHS
        assert "/readiness" in mw._SKIP_PATHS
        assert "/metrics" in mw._SKIP_PATHS

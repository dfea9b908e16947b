"""
Aether Intel - Prometheus Metrics Module

Prometheus counters/histograms when METRICS_ENABLED=true, zero-overhead
no-op stubs otherwise.

All metrics default to OFF (METRICS_ENABLED=false).

Usage:
    from metrics import track_request, track_fetch, track_analysis_call
    track_request("POST", "/api/scrape", 201, 3.2)
    track_fetch("linkedin", "timeout")
    track_analysis_call("gemini-2.0-flash", duration=4.1, outcome="ok")
"""

import os
import time
import logging
from typing import Dict, Any

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Histogram  # noqa: F401
from prometheus_client import generate_latest as _generate_latest

logger = logging.getLogger(__name__)

METRICS_ENABLED = os.environ.get("METRICS_ENABLED", "false").lower() == "true"

# Private registry; reloading the module replaces it along with the collectors
registry = CollectorRegistry()


class _NoOpMetric:
    """No-op metric that silently discards all operations."""

    def labels(self, *args, **kwargs):
        return self

    def inc(self, amount=1):
        pass

    def observe(self, amount):
        pass


if METRICS_ENABLED:
    logger.info("Prometheus metrics enabled")

    http_requests_total = Counter(
        "http_requests_total",
        "Total HTTP requests",
        ["method", "path", "status"],
        registry=registry,
    )
    http_request_duration = Histogram(
        "http_request_duration_seconds",
        "HTTP request duration in seconds",
        ["method", "path"],
        buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
        registry=registry,
    )

    # Source fetches, one sample per attempted source
    source_fetch_total = Counter(
        "source_fetch_total",
        "Source fetch attempts by platform and outcome",
        ["platform", "outcome"],
        registry=registry,
    )

    analysis_requests_total = Counter(
        "analysis_requests_total",
        "Analysis service calls",
        ["model", "outcome"],
        registry=registry,
    )
    analysis_request_duration = Histogram(
        "analysis_request_duration_seconds",
        "Analysis service round-trip in seconds",
        ["model"],
        buckets=(0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0),
        registry=registry,
    )
else:
    http_requests_total = _NoOpMetric()
    http_request_duration = _NoOpMetric()
    source_fetch_total = _NoOpMetric()
    analysis_requests_total = _NoOpMetric()
    analysis_request_duration = _NoOpMetric()


# In-memory counters for the JSON fallback summary
_internal_counters: Dict[str, Any] = {
    "http_requests": 0,
    "fetches_ok": 0,
    "fetches_failed": 0,
    "analysis_calls": 0,
    "analysis_failures": 0,
    "started_at": time.time(),
}


def track_request(method: str, path: str, status: int, duration: float) -> None:
    """Track an HTTP request."""
    http_requests_total.labels(method=method, path=path, status=str(status)).inc()
    http_request_duration.labels(method=method, path=path).observe(duration)
    _internal_counters["http_requests"] += 1


def track_fetch(platform: str, outcome: str) -> None:
    """Track one source fetch (outcome: ok / timeout / error / http_error)."""
    source_fetch_total.labels(platform=platform, outcome=outcome).inc()
    if outcome == "ok":
        _internal_counters["fetches_ok"] += 1
    else:
        _internal_counters["fetches_failed"] += 1


def track_analysis_call(model: str, duration: float = 0.0, outcome: str = "ok") -> None:
    """Track an analysis service round-trip."""
    analysis_requests_total.labels(model=model, outcome=outcome).inc()
    if duration > 0:
        analysis_request_duration.labels(model=model).observe(duration)
    _internal_counters["analysis_calls"] += 1
    if outcome != "ok":
        _internal_counters["analysis_failures"] += 1


def generate_latest() -> bytes:
    """Prometheus text exposition of this module's registry."""
    return _generate_latest(registry)


def get_metrics_summary() -> Dict[str, Any]:
    """JSON summary of metrics (served when Prometheus export is disabled)."""
    uptime = time.time() - _internal_counters["started_at"]
    return {
        "metrics_enabled": METRICS_ENABLED,
        "uptime_seconds": round(uptime, 1),
        "http_requests_total": _internal_counters["http_requests"],
        "source_fetches_ok": _internal_counters["fetches_ok"],
        "source_fetches_failed": _internal_counters["fetches_failed"],
        "analysis_calls_total": _internal_counters["analysis_calls"],
        "analysis_failures_total": _internal_counters["analysis_failures"],
    }

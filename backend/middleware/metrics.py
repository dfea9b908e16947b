"""
HTTP metrics middleware for Aether Intel.

Records request count and duration per method/path/status.
Zero overhead when METRICS_ENABLED=false (default).
"""

import re
import time
import logging

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)

# /api/insights/42 -> /api/insights/{id}
_ID_SEGMENT = re.compile(r"/\d+(?=/|$)")


def normalize_path(path: str) -> str:
    """Collapse numeric id segments so labels stay low-cardinality."""
    return _ID_SEGMENT.sub("/{id}", path)


class MetricsMiddleware(BaseHTTPMiddleware):
    """Feeds metrics.track_request for every API call except probes."""

    _SKIP_PATHS = frozenset({"/health", "/readiness", "/metrics", "/favicon.ico"})

    async def dispatch(self, request: Request, call_next):
        from metrics import METRICS_ENABLED, track_request

        if not METRICS_ENABLED:
            return await call_next(request)

        start = time.time()
        response = await call_next(request)
        duration = time.time() - start

        path = request.url.path
        if path not in self._SKIP_PATHS:
            track_request(request.method, normalize_path(path), response.status_code, duration)

        return response

"""Security, observability and tracing middleware for the Aether Intel backend."""

from middleware.security import SecurityHeadersMiddleware  # noqa: F401
from middleware.metrics import MetricsMiddleware  # noqa: F401
from middleware.correlation import CorrelationIdMiddleware, CorrelationIdFilter  # noqa: F401

__all__ = [
    "SecurityHeadersMiddleware",
    "MetricsMiddleware",
    "CorrelationIdMiddleware",
    "CorrelationIdFilter",
]

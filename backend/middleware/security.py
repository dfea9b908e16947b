"""Security headers middleware for the Aether Intel API.

The backend serves JSON only (the dashboard is a separate origin), so the
Content-Security-Policy is locked down to ``default-src 'none'``.

Configurable via SECURITY_HEADERS_ENABLED env var (default: true).
"""

import logging
import os

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

logger = logging.getLogger(__name__)


def is_security_headers_enabled() -> bool:
    return os.getenv("SECURITY_HEADERS_ENABLED", "true").lower() in ("true", "1", "yes")


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Adds CSP, HSTS (https only), X-Frame-Options, X-Content-Type-Options,
    Referrer-Policy and Permissions-Policy to every response."""

    CSP_POLICY = "default-src 'none'; frame-ancestors 'none'; base-uri 'none'"

    STATIC_HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "DENY",
        "Referrer-Policy": "no-referrer",
        "Permissions-Policy": "camera=(), microphone=(), geolocation=()",
    }

    def __init__(self, app, enabled: bool = True) -> None:
        super().__init__(app)
        self.enabled = enabled and is_security_headers_enabled()
        if not self.enabled:
            logger.info("SecurityHeadersMiddleware is DISABLED via SECURITY_HEADERS_ENABLED=false")

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)

        if not self.enabled:
            return response

        for name, value in self.STATIC_HEADERS.items():
            response.headers[name] = value
        # Swagger UI needs scripts; leave the docs pages alone
        if not request.url.path.startswith(("/docs", "/redoc")):
            response.headers["Content-Security-Policy"] = self.CSP_POLICY

        forwarded_proto = request.headers.get("X-Forwarded-Proto", "")
        if forwarded_proto == "https" or request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response

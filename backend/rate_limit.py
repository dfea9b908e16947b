"""
Aether Intel - Per-endpoint rate limiting (slowapi)

Usage:
    from rate_limit import limiter, SCAN_RATE_LIMIT

    @router.post("/api/scrape")
    @limiter.limit(SCAN_RATE_LIMIT)
    async def scan(request: Request, ...):
        ...
"""

import os
import logging

from slowapi import Limiter
from slowapi.util import get_remote_address

logger = logging.getLogger(__name__)

RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true"
SCAN_RATE_LIMIT = os.getenv("SCAN_RATE_LIMIT", "10/minute")

limiter = Limiter(key_func=get_remote_address, enabled=RATE_LIMIT_ENABLED)

if not RATE_LIMIT_ENABLED:
    logger.info("RATE_LIMIT_ENABLED=false - per-endpoint rate limiting disabled")

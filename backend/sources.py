"""
Aether Intel - Source Fetchers

Per-platform retrieval of competitor content:
  - website: the competitor's canonical URL, capped at 5000 chars
  - social: a profile page built from platform + handle, capped at 3000 chars

Every fetch is a single GET with a descriptive User-Agent and an explicit
timeout. Fetchers never raise: DNS failures, timeouts, non-2xx responses and
unknown platforms all come back as ``None`` with a warning naming the
platform and identifier.
"""

import os
import logging
from typing import Optional

import httpx

from constants import (
    DEFAULT_USER_AGENT,
    PLATFORM_ALIASES,
    PROFILE_URL_TEMPLATES,
    SOCIAL_CONTENT_CAP,
    WEBSITE_CONTENT_CAP,
    WEBSITE_PLATFORM,
)
from text_normalizer import normalize
from metrics import track_fetch

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = float(os.getenv("SCRAPE_TIMEOUT_SECONDS", "10"))
USER_AGENT = os.getenv("SCRAPE_USER_AGENT", DEFAULT_USER_AGENT)


def normalize_platform(platform: Optional[str]) -> str:
    """Case-fold a platform name and resolve known aliases ("X" -> "twitter")."""
    key = " ".join((platform or "").lower().split())
    return PLATFORM_ALIASES.get(key, key.replace(" ", ""))


def is_full_url(value: str) -> bool:
    return value.lower().startswith(("http://", "https://"))


def build_profile_url(platform: str, handle: str) -> Optional[str]:
    """Canonical profile URL for *handle* on *platform*.

    A handle that is already a full URL is returned unchanged. Unrecognized
    platforms return None.
    """
    template = PROFILE_URL_TEMPLATES.get(normalize_platform(platform))
    if template is None:
        return None
    handle = (handle or "").strip()
    if is_full_url(handle):
        return handle
    return template.format(handle=handle.lstrip("@"))


class PageFetcher:
    """HTTP retrieval for websites and social profile pages.

    Owns (or borrows) one ``httpx.AsyncClient``; use as an async context
    manager or call ``aclose()`` when done.
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = FETCH_TIMEOUT,
        user_agent: str = USER_AGENT,
    ):
        self.timeout = timeout
        self.user_agent = user_agent
        self._owns_client = client is None
        self._client = client

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "PageFetcher":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def _get_body(self, url: str, platform: str) -> Optional[str]:
        """GET *url*; return the body on 2xx, else None."""
        try:
            resp = await self.client.get(
                url,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
        except httpx.TimeoutException:
            logger.warning(f"Fetch timed out after {self.timeout}s for {platform}: {url}")
            track_fetch(platform, "timeout")
            return None
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(f"Fetch failed for {platform}: {url} ({type(e).__name__}: {e})")
            track_fetch(platform, "error")
            return None

        if not resp.is_success:
            logger.warning(f"Fetch for {platform}: {url} returned HTTP {resp.status_code}")
            track_fetch(platform, "http_error")
            return None

        track_fetch(platform, "ok")
        return resp.text

    async def fetch_website(self, url: str) -> Optional[str]:
        """Visible text of the competitor website, or None."""
        if not url or not url.strip():
            return None
        try:
            body = await self._get_body(url.strip(), WEBSITE_PLATFORM)
            if body is None:
                return None
            return normalize(body, WEBSITE_CONTENT_CAP) or None
        except Exception as e:
            logger.warning(f"Website fetch failed for {url}: {e}")
            return None

    async def fetch_social(self, handle: str, platform: str) -> Optional[str]:
        """Visible text of a social profile page, or None.

        Unrecognized platforms return None without a network call.
        """
        url = build_profile_url(platform, handle)
        if url is None:
            logger.warning(f"Unsupported social platform '{platform}' for handle {handle}")
            return None
        try:
            body = await self._get_body(url, normalize_platform(platform))
            if body is None:
                return None
            return normalize(body, SOCIAL_CONTENT_CAP) or None
        except Exception as e:
            logger.warning(f"Social fetch failed for {platform}/{handle}: {e}")
            return None

    async def fetch(self, identifier: str, platform: str) -> Optional[str]:
        """Dispatch on platform: ``website`` or one of the social platforms."""
        if normalize_platform(platform) == WEBSITE_PLATFORM:
            return await self.fetch_website(identifier)
        return await self.fetch_social(identifier, platform)

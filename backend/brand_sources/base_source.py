"""
Aether Intel - Base Brand Source

Abstract base for the comment feeds used by the brand-sentiment scan.
Each source turns a user-supplied handle (channel, subreddit, search term)
into a bounded list of BrandComment records.

All sources:
- Use httpx.AsyncClient for HTTP calls (shared client may be injected)
- Return a possibly-empty list and never raise
- Log failures with the source name and handle
"""

import os
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from metrics import track_fetch
from sources import FETCH_TIMEOUT, USER_AGENT

logger = logging.getLogger(__name__)


@dataclass
class BrandComment:
    """One piece of public feedback about the user's brand."""
    platform: str
    text: str
    author: Optional[str] = None
    url: Optional[str] = None
    published_at: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "platform": self.platform,
            "text": self.text,
            "author": self.author,
            "url": self.url,
            "publishedAt": self.published_at,
        }


class BaseBrandSource(ABC):
    """
    Subclasses define class attributes:
        source_name: str - platform tag on produced comments (e.g. "youtube")
        env_key_name: str - API key variable, empty when no key is needed
        base_url: str - API base URL

    And implement:
        _collect() - the actual retrieval; may raise, collect() contains it
    """

    source_name: str = ""
    env_key_name: str = ""
    base_url: str = ""

    def __init__(self, client: Optional[httpx.AsyncClient] = None, timeout: float = FETCH_TIMEOUT):
        self.api_key = os.getenv(self.env_key_name, "") if self.env_key_name else ""
        self.timeout = timeout
        self._client = client

    @classmethod
    def is_configured(cls) -> bool:
        """Sources without an API key variable are always usable."""
        if not cls.env_key_name:
            return True
        return bool(os.getenv(cls.env_key_name, ""))

    async def _get_json(self, url: str, params: Optional[Dict[str, Any]] = None) -> Optional[Dict[str, Any]]:
        """GET *url* and decode JSON; None on any transport, status or decode error."""
        headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
        try:
            if self._client is not None:
                resp = await self._client.get(url, params=params, headers=headers, timeout=self.timeout)
            else:
                async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
                    resp = await client.get(url, params=params, headers=headers)
            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException:
            logger.warning(f"{self.source_name}: request timed out: {url}")
            track_fetch(self.source_name, "timeout")
            return None
        except httpx.HTTPStatusError as e:
            logger.warning(f"{self.source_name}: HTTP {e.response.status_code} from {url}")
            track_fetch(self.source_name, "http_error")
            return None
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"{self.source_name}: request failed for {url}: {e}")
            track_fetch(self.source_name, "error")
            return None

        track_fetch(self.source_name, "ok")
        return data if isinstance(data, dict) else None

    @abstractmethod
    async def _collect(self, handle: str, **limits: int) -> List[BrandComment]:
        pass

    async def collect(self, handle: str, **limits: int) -> List[BrandComment]:
        """Bounded, possibly-empty comment list for *handle*. Never raises."""
        handle = (handle or "").strip()
        if not handle:
            return []
        try:
            comments = await self._collect(handle, **limits)
        except Exception as e:
            logger.error(f"{self.source_name}: collection failed for '{handle}': {e}")
            return []
        logger.info(f"{self.source_name}: collected {len(comments)} comment(s) for '{handle}'")
        return comments

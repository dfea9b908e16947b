"""
Aether Intel - Reddit Brand Source

Reddit's public JSON listings (no auth): either the newest posts of a
subreddit, when the handle names one, or a site-wide search for the handle.

Listing API: https://www.reddit.com/dev/api#listings
Rate Limit: unauthenticated clients are throttled per User-Agent
"""

import re
import logging
from typing import List

from constants import REDDIT_MAX_POSTS
from .base_source import BaseBrandSource, BrandComment

logger = logging.getLogger(__name__)

_SUBREDDIT_RE = re.compile(
    r"^(?:https?://)?(?:(?:www|old)\.)?(?:reddit\.com)?/?r/([A-Za-z0-9_]+)", re.IGNORECASE
)


def subreddit_from_handle(handle: str):
    """``"r/python"``, ``"/r/python"`` or a subreddit URL -> ``"python"``; else None."""
    match = _SUBREDDIT_RE.match(handle.strip())
    return match.group(1) if match else None


class RedditSource(BaseBrandSource):
    """Posts mentioning the brand, one comment record per post."""

    source_name = "reddit"
    base_url = "https://www.reddit.com"

    async def _collect(self, handle: str, max_posts: int = REDDIT_MAX_POSTS) -> List[BrandComment]:
        limit = max(1, min(max_posts, 100))
        subreddit = subreddit_from_handle(handle)
        if subreddit:
            url = f"{self.base_url}/r/{subreddit}/new.json"
            params = {"limit": limit}
        else:
            url = f"{self.base_url}/search.json"
            params = {"q": handle, "limit": limit, "sort": "new"}

        data = await self._get_json(url, params)
        if not data:
            return []

        comments = []
        for child in (data.get("data") or {}).get("children", []):
            post = child.get("data") or {}
            text = (post.get("selftext") or "").strip() or (post.get("title") or "").strip()
            if not text:
                continue
            permalink = post.get("permalink")
            comments.append(BrandComment(
                platform=self.source_name,
                text=text,
                author=post.get("author"),
                url=f"{self.base_url}{permalink}" if permalink else post.get("url"),
                published_at=str(post["created_utc"]) if post.get("created_utc") is not None else None,
            ))
            if len(comments) >= max_posts:
                break
        return comments

"""
Aether Intel - YouTube Brand Source

YouTube Data API v3: search for the brand's recent videos, then pull
top-level comment threads from each.

API Docs: https://developers.google.com/youtube/v3/docs
Auth: API key as the ``key`` query parameter (YOUTUBE_API_KEY)
Quota: search.list costs 100 units, commentThreads.list 1 unit
"""

import re
import logging
from typing import Any, Dict, List

from constants import (
    YOUTUBE_MAX_COMMENTS_PER_VIDEO,
    YOUTUBE_MAX_TOTAL_COMMENTS,
    YOUTUBE_MAX_VIDEOS,
)
from .base_source import BaseBrandSource, BrandComment

logger = logging.getLogger(__name__)

# Channel ids are "UC" + 22 url-safe base64 chars
_CHANNEL_ID_RE = re.compile(r"(?:youtube\.com/channel/)?(UC[\w-]{22})(?:[/?#]|$)")


class YouTubeSource(BaseBrandSource):
    """Comments on the brand's recent videos."""

    source_name = "youtube"
    env_key_name = "YOUTUBE_API_KEY"
    base_url = "https://www.googleapis.com/youtube/v3"

    def _search_params(self, handle: str, max_videos: int) -> Dict[str, Any]:
        params = {
            "part": "snippet",
            "type": "video",
            "order": "date",
            "maxResults": max(1, min(max_videos, 50)),
            "key": self.api_key,
        }
        match = _CHANNEL_ID_RE.search(handle)
        if match:
            params["channelId"] = match.group(1)
        else:
            params["q"] = handle.lstrip("@")
        return params

    async def search_videos(self, handle: str, max_videos: int = YOUTUBE_MAX_VIDEOS) -> List[Dict[str, str]]:
        """Up to *max_videos* ``{"video_id", "title"}`` dicts, newest first."""
        data = await self._get_json(f"{self.base_url}/search", self._search_params(handle, max_videos))
        if not data:
            return []
        videos = []
        for item in data.get("items", []):
            video_id = (item.get("id") or {}).get("videoId")
            if not video_id:
                continue
            videos.append({
                "video_id": video_id,
                "title": (item.get("snippet") or {}).get("title", ""),
            })
        return videos[:max_videos]

    async def fetch_comments(
        self, video_id: str, max_comments: int = YOUTUBE_MAX_COMMENTS_PER_VIDEO
    ) -> List[BrandComment]:
        data = await self._get_json(
            f"{self.base_url}/commentThreads",
            {
                "part": "snippet",
                "videoId": video_id,
                "maxResults": max(1, min(max_comments, 100)),
                "order": "relevance",
                "textFormat": "plainText",
                "key": self.api_key,
            },
        )
        if not data:
            return []

        comments = []
        for item in data.get("items", []):
            snippet = (
                ((item.get("snippet") or {}).get("topLevelComment") or {}).get("snippet") or {}
            )
            text = (snippet.get("textOriginal") or snippet.get("textDisplay") or "").strip()
            if not text:
                continue
            comments.append(BrandComment(
                platform=self.source_name,
                text=text,
                author=snippet.get("authorDisplayName"),
                url=f"https://www.youtube.com/watch?v={video_id}",
                published_at=snippet.get("publishedAt"),
            ))
        return comments[:max_comments]

    async def _collect(
        self,
        handle: str,
        max_videos: int = YOUTUBE_MAX_VIDEOS,
        max_comments_per_video: int = YOUTUBE_MAX_COMMENTS_PER_VIDEO,
        max_total: int = YOUTUBE_MAX_TOTAL_COMMENTS,
    ) -> List[BrandComment]:
        if not self.api_key:
            logger.info(f"YOUTUBE_API_KEY not set, skipping YouTube for '{handle}'")
            return []

        videos = await self.search_videos(handle, max_videos)
        comments: List[BrandComment] = []
        for video in videos:
            comments.extend(await self.fetch_comments(video["video_id"], max_comments_per_video))
            if len(comments) >= max_total:
                break
        return comments[:max_total]

"""
Aether Intel - Brand Sentiment Scan

Same shape as the competitor scan, applied to the user's own handles:
collect public comments (YouTube, Reddit), ask the analysis service for a
positive/neutral/negative split with summaries, store one
UserSentimentData row.

Limits: YouTube <= 10 videos, <= 50 comments per video, stop at 500;
Reddit <= 100 posts. Twitter handles are accepted but not scraped.
"""

import asyncio
import logging
from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from analysis_adapter import analyze_sentiment
from brand_sources import BaseBrandSource, BrandComment
from constants import (
    REDDIT_MAX_POSTS,
    YOUTUBE_MAX_COMMENTS_PER_VIDEO,
    YOUTUBE_MAX_TOTAL_COMMENTS,
    YOUTUBE_MAX_VIDEOS,
)
from database import UserSentimentData, insert_user_sentiment
from errors import AnalysisNotConfigured, NoCommentsFound, NoHandlesProvided

logger = logging.getLogger(__name__)

SUPPORTED_HANDLES = ("youtube", "reddit", "twitter")


def clean_handles(handles: Optional[Dict[str, Optional[str]]]) -> Dict[str, str]:
    """Keep the non-blank handles for known platforms."""
    cleaned = {}
    for platform in SUPPORTED_HANDLES:
        value = (handles or {}).get(platform)
        if isinstance(value, str) and value.strip():
            cleaned[platform] = value.strip()
    return cleaned


async def collect_brand_comments(
    handles: Dict[str, str],
    sources: Dict[str, BaseBrandSource],
) -> List[BrandComment]:
    """Comments from every handled platform; YouTube first, then Reddit."""
    jobs = []
    if "youtube" in handles and "youtube" in sources:
        jobs.append(sources["youtube"].collect(
            handles["youtube"],
            max_videos=YOUTUBE_MAX_VIDEOS,
            max_comments_per_video=YOUTUBE_MAX_COMMENTS_PER_VIDEO,
            max_total=YOUTUBE_MAX_TOTAL_COMMENTS,
        ))
    if "reddit" in handles and "reddit" in sources:
        jobs.append(sources["reddit"].collect(handles["reddit"], max_posts=REDDIT_MAX_POSTS))
    if "twitter" in handles:
        # No public read access without a paid API tier
        logger.info(f"Twitter handle {handles['twitter']} accepted but not scraped")

    comments: List[BrandComment] = []
    for batch in await asyncio.gather(*jobs):
        comments.extend(batch)
    return comments


async def run_brand_sentiment_scan(
    db: Session,
    user_id: str,
    handles: Optional[Dict[str, Optional[str]]],
    sources: Dict[str, BaseBrandSource],
    analysis_client,
) -> UserSentimentData:
    """
    Raises:
        NoHandlesProvided, AnalysisNotConfigured, NoCommentsFound, AnalysisFailed
    """
    handles = clean_handles(handles)
    if not handles:
        raise NoHandlesProvided()
    if not getattr(analysis_client, "is_configured", True):
        raise AnalysisNotConfigured()

    comments = await collect_brand_comments(handles, sources)
    if not comments:
        raise NoCommentsFound()

    logger.info(f"Analyzing {len(comments)} brand comment(s) for user {user_id}")
    analysis = await analyze_sentiment(analysis_client, [c.to_dict() for c in comments])

    now = datetime.utcnow()
    return insert_user_sentiment(db, {
        "user_id": user_id,
        "scraped_at": now,
        "positive_percentage": analysis.positive,
        "neutral_percentage": analysis.neutral,
        "negative_percentage": analysis.negative,
        "positive_summary": analysis.positive_summary,
        "neutral_summary": analysis.neutral_summary,
        "negative_summary": analysis.negative_summary,
        "raw_comments": [c.to_dict() for c in comments],
        "created_at": now,
    })

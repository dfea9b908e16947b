"""
Aether Intel - Brand Sentiment Pydantic Schemas
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import field_validator

from schemas.common import CamelModel, WriteModel


class SocialMediaHandles(CamelModel):
    youtube: Optional[str] = None
    reddit: Optional[str] = None
    twitter: Optional[str] = None


class SentimentScanRequest(WriteModel):
    social_media_handles: Optional[SocialMediaHandles] = None


class SentimentBreakdown(CamelModel):
    positive: int
    neutral: int
    negative: int


class SentimentScanResponse(CamelModel):
    success: bool = True
    message: str
    sentiment_id: int
    data: SentimentBreakdown


class UserSentimentResponse(CamelModel):
    id: int
    user_id: str
    scraped_at: datetime
    positive_percentage: int
    neutral_percentage: int
    negative_percentage: int
    positive_summary: List[str] = []
    neutral_summary: List[str] = []
    negative_summary: List[str] = []
    raw_comments: List[Dict[str, Any]] = []
    created_at: datetime

    @field_validator("positive_summary", "neutral_summary", "negative_summary", "raw_comments", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or []


class LatestSentimentResponse(CamelModel):
    sentiment_data: Optional[UserSentimentResponse] = None

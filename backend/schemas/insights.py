"""
Aether Intel - Insight and Scan Pydantic Schemas
"""

from datetime import datetime
from typing import Any, List, Optional

from pydantic import field_validator

from schemas.common import CamelModel, WriteModel


class InsightResponse(CamelModel):
    id: int
    user_id: str
    competitor_id: int
    competitor_name: Optional[str] = None
    platform: Optional[str] = None
    content: Optional[str] = None
    summary: Optional[str] = None
    insight_type: str
    sentiment: str
    priority: str
    key_points: List[str] = []
    recommendations: List[str] = []
    impact: Optional[str] = None
    tags: List[str] = []
    labels: List[str] = []
    public_opinion: Optional[Any] = None
    public_opinion_positive: int = 0
    public_opinion_negative: int = 0
    source_url: Optional[str] = None
    detected_at: datetime
    created_at: datetime

    @field_validator("key_points", "recommendations", "tags", "labels", mode="before")
    @classmethod
    def _none_as_empty(cls, value):
        return value or []


class InsightCreate(WriteModel):
    """Manual insight entry. Enum and required-field checks happen in the router."""
    competitor_id: Optional[Any] = None
    platform: Optional[str] = None
    content: Optional[str] = None
    summary: Optional[str] = None
    insight_type: Optional[str] = None
    sentiment: Optional[str] = None
    priority: Optional[str] = None
    key_points: Optional[List[str]] = None
    recommendations: Optional[List[str]] = None
    impact: Optional[str] = None
    tags: Optional[List[str]] = None
    labels: Optional[List[str]] = None
    public_opinion: Optional[Any] = None
    public_opinion_positive: Optional[int] = None
    public_opinion_negative: Optional[int] = None
    source_url: Optional[str] = None
    detected_at: Optional[datetime] = None


class InsightUpdate(WriteModel):
    platform: Optional[str] = None
    content: Optional[str] = None
    summary: Optional[str] = None
    insight_type: Optional[str] = None
    sentiment: Optional[str] = None
    priority: Optional[str] = None
    key_points: Optional[List[str]] = None
    recommendations: Optional[List[str]] = None
    impact: Optional[str] = None
    tags: Optional[List[str]] = None
    labels: Optional[List[str]] = None
    public_opinion: Optional[Any] = None
    public_opinion_positive: Optional[int] = None
    public_opinion_negative: Optional[int] = None
    source_url: Optional[str] = None
    detected_at: Optional[datetime] = None


class ScanRequest(WriteModel):
    # Validated by scan_pipeline.parse_competitor_id so bad ids get INVALID_COMPETITOR_ID
    competitor_id: Optional[Any] = None


class ScanResponse(CamelModel):
    message: str
    sources_scraped: int
    insights_generated: int
    insights: List[InsightResponse]

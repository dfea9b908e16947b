"""
Aether Intel - Brand Sentiment Router

- GET  /api/user-sentiment - Latest brand-sentiment breakdown for the caller
- POST /api/user-sentiment/scrape - Collect comments from the caller's own
  YouTube / Reddit handles and store a new breakdown
"""

import logging
from typing import Dict

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ai_client import AnalysisClient
from brand_sentiment import run_brand_sentiment_scan
from brand_sources import BaseBrandSource
from database import get_db, get_latest_user_sentiment
from dependencies import get_analysis_service, get_brand_sources, get_current_user, reject_user_id
from errors import MissingHandles
from rate_limit import SCAN_RATE_LIMIT, limiter
from schemas.sentiment import (
    LatestSentimentResponse, SentimentScanRequest, SentimentScanResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/user-sentiment", tags=["Brand Sentiment"])


@router.get("", response_model=LatestSentimentResponse)
async def get_user_sentiment(
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    return {"sentiment_data": get_latest_user_sentiment(db, current_user["id"])}


@router.post("/scrape", response_model=SentimentScanResponse, status_code=201)
@limiter.limit(SCAN_RATE_LIMIT)
async def scrape_user_sentiment(
    request: Request,
    payload: SentimentScanRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
    sources: Dict[str, BaseBrandSource] = Depends(get_brand_sources),
    analysis_client: AnalysisClient = Depends(get_analysis_service),
):
    reject_user_id(payload.extra_fields())
    if payload.social_media_handles is None:
        raise MissingHandles()

    row = await run_brand_sentiment_scan(
        db,
        current_user["id"],
        payload.social_media_handles.model_dump(),
        sources,
        analysis_client,
    )
    return SentimentScanResponse(
        success=True,
        message="Sentiment analysis completed successfully",
        sentiment_id=row.id,
        data={
            "positive": row.positive_percentage,
            "neutral": row.neutral_percentage,
            "negative": row.negative_percentage,
        },
    )

"""
Aether Intel - Competitor Scan Router

- POST /api/scrape - Scrape a competitor's website and social accounts,
  analyze the content and store the resulting insights.

Body: ``{"competitorId": <int>}``. Returns 201 with
``{message, sourcesScraped, insightsGenerated, insights}``; a scan whose
documents were all judged insignificant still succeeds with
``insightsGenerated: 0``.
"""

import logging

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from ai_client import AnalysisClient
from database import get_db
from dependencies import get_analysis_service, get_current_user, get_page_fetcher, reject_user_id
from rate_limit import SCAN_RATE_LIMIT, limiter
from scan_pipeline import run_competitor_scan
from schemas.insights import InsightResponse, ScanRequest, ScanResponse
from sources import PageFetcher

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Scan"])


@router.post("/scrape", response_model=ScanResponse, status_code=201)
@limiter.limit(SCAN_RATE_LIMIT)
async def scan_competitor(
    request: Request,
    payload: ScanRequest,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
    fetcher: PageFetcher = Depends(get_page_fetcher),
    analysis_client: AnalysisClient = Depends(get_analysis_service),
):
    reject_user_id(payload.extra_fields())
    result = await run_competitor_scan(
        db, current_user["id"], payload.competitor_id, fetcher, analysis_client
    )
    return ScanResponse(
        message=result.message,
        sources_scraped=result.sources_scraped,
        insights_generated=result.insights_generated,
        insights=[InsightResponse.model_validate(row) for row in result.insights],
    )

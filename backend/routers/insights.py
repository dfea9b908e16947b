"""
Aether Intel - Insights Router

- GET    /api/insights - Filtered, sorted, paginated list of the caller's insights
- GET    /api/insights/{id} - Get one insight
- POST   /api/insights - Manual insight entry
- PUT    /api/insights/{id} - Partial update (detectedAt kept unless supplied)
- DELETE /api/insights/{id} - Delete insight

Scan-generated insights are created by /api/scrape (routers/scan.py).
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import case, or_
from sqlalchemy.orm import Session

from constants import INSIGHT_EXCERPT_CAP, INSIGHT_TYPES, PRIORITIES, SENTIMENTS
from database import Insight, get_competitor, get_db, insert_insight
from dependencies import get_current_user, reject_user_id
from errors import CompetitorAccessDenied, InvalidCompetitorId, InvalidField, NotFound
from schemas.common import MessageResponse
from schemas.insights import InsightCreate, InsightResponse, InsightUpdate
from sources import normalize_platform
from validators import clean_text, parse_id, require_choice

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/insights", tags=["Insights"])

SORT_COLUMNS = ("detectedAt", "createdAt", "priority", "sentiment")

# high > medium > low when sorting descending
_PRIORITY_RANK = case({"high": 3, "medium": 2, "low": 1}, value=Insight.priority, else_=0)


def _sort_expression(sort: str):
    if sort == "createdAt":
        return Insight.created_at
    if sort == "priority":
        return _PRIORITY_RANK
    if sort == "sentiment":
        return Insight.sentiment
    return Insight.detected_at


def _owned_insight(db: Session, insight_id: str, user_id: str) -> Insight:
    insight = db.query(Insight).filter(
        Insight.id == parse_id(insight_id),
        Insight.user_id == user_id,
    ).first()
    if insight is None:
        raise NotFound("Insight not found")
    return insight


def _enum_value(value: Optional[str]) -> Optional[str]:
    return value.strip().lower() if isinstance(value, str) else value


def _percentage(value: Optional[int], field: str) -> int:
    if value is None:
        return 0
    if not 0 <= value <= 100:
        raise InvalidField("INVALID_PUBLIC_OPINION", f"{field} must be between 0 and 100")
    return value


@router.get("", response_model=List[InsightResponse])
async def list_insights(
    limit: int = Query(10, ge=1),
    offset: int = Query(0, ge=0),
    search: Optional[str] = None,
    competitor_id: Optional[str] = Query(None, alias="competitorId"),
    sentiment: Optional[str] = None,
    priority: Optional[str] = None,
    platform: Optional[str] = None,
    insight_type: Optional[str] = Query(None, alias="insightType"),
    date_from: Optional[datetime] = Query(None, alias="from"),
    date_to: Optional[datetime] = Query(None, alias="to"),
    sort: str = "detectedAt",
    order: str = "desc",
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    user_id = current_user["id"]
    query = db.query(Insight).filter(Insight.user_id == user_id)

    if competitor_id is not None:
        try:
            cid = parse_id(competitor_id)
        except InvalidField:
            raise InvalidCompetitorId()
        if get_competitor(db, cid, user_id) is None:
            raise CompetitorAccessDenied()
        query = query.filter(Insight.competitor_id == cid)
    if sentiment:
        query = query.filter(Insight.sentiment == _enum_value(sentiment))
    if priority:
        query = query.filter(Insight.priority == _enum_value(priority))
    if platform:
        query = query.filter(Insight.platform == normalize_platform(platform))
    if insight_type:
        query = query.filter(Insight.insight_type == _enum_value(insight_type))
    if date_from:
        query = query.filter(Insight.detected_at >= date_from)
    if date_to:
        query = query.filter(Insight.detected_at <= date_to)
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.filter(or_(Insight.content.ilike(term), Insight.summary.ilike(term)))

    column = _sort_expression(sort if sort in SORT_COLUMNS else "detectedAt")
    ordering = column.asc() if order.lower() == "asc" else column.desc()
    return (
        query.order_by(ordering, Insight.id.desc())
        .offset(offset)
        .limit(min(limit, 100))
        .all()
    )


@router.get("/{insight_id}", response_model=InsightResponse)
async def get_insight(
    insight_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    return _owned_insight(db, insight_id, current_user["id"])


@router.post("", response_model=InsightResponse, status_code=201)
async def create_insight(
    payload: InsightCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    reject_user_id(payload.extra_fields())
    if not payload.insight_type:
        raise InvalidField("MISSING_INSIGHT_TYPE", "Insight type is required")
    if not payload.sentiment:
        raise InvalidField("MISSING_SENTIMENT", "Sentiment is required")
    if payload.detected_at is None:
        raise InvalidField("MISSING_DETECTED_AT", "Detected at timestamp is required")
    try:
        competitor_id = parse_id(payload.competitor_id)
    except InvalidField:
        raise InvalidCompetitorId()

    insight_type = require_choice(
        _enum_value(payload.insight_type), INSIGHT_TYPES, "INVALID_INSIGHT_TYPE", "Insight type"
    )
    sentiment = require_choice(
        _enum_value(payload.sentiment), SENTIMENTS, "INVALID_SENTIMENT", "Sentiment"
    )
    priority = require_choice(
        _enum_value(payload.priority) or "medium", PRIORITIES, "INVALID_PRIORITY", "Priority"
    )

    if get_competitor(db, competitor_id, current_user["id"]) is None:
        raise CompetitorAccessDenied()

    content = clean_text(payload.content)
    insight = insert_insight(db, {
        "user_id": current_user["id"],
        "competitor_id": competitor_id,
        "platform": normalize_platform(payload.platform) if payload.platform else None,
        "content": content[:INSIGHT_EXCERPT_CAP] if content else None,
        "summary": clean_text(payload.summary),
        "insight_type": insight_type,
        "sentiment": sentiment,
        "priority": priority,
        "key_points": payload.key_points or [],
        "recommendations": payload.recommendations or [],
        "impact": clean_text(payload.impact),
        "tags": payload.tags or [],
        "labels": payload.labels or [],
        "public_opinion": payload.public_opinion,
        "public_opinion_positive": _percentage(payload.public_opinion_positive, "publicOpinionPositive"),
        "public_opinion_negative": _percentage(payload.public_opinion_negative, "publicOpinionNegative"),
        "source_url": clean_text(payload.source_url),
        "detected_at": payload.detected_at,
        "created_at": datetime.utcnow(),
    })
    logger.info(f"User {current_user['id']} added manual {insight_type} insight {insight.id}")
    return insight


@router.put("/{insight_id}", response_model=InsightResponse)
async def update_insight(
    insight_id: str,
    payload: InsightUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    reject_user_id(payload.extra_fields())
    insight = _owned_insight(db, insight_id, current_user["id"])
    changes = payload.model_dump(exclude_unset=True, exclude=set(payload.extra_fields()))

    if "insight_type" in changes:
        changes["insight_type"] = require_choice(
            _enum_value(changes["insight_type"]), INSIGHT_TYPES, "INVALID_INSIGHT_TYPE", "Insight type"
        )
    if "sentiment" in changes:
        changes["sentiment"] = require_choice(
            _enum_value(changes["sentiment"]), SENTIMENTS, "INVALID_SENTIMENT", "Sentiment"
        )
    if "priority" in changes:
        changes["priority"] = require_choice(
            _enum_value(changes["priority"]), PRIORITIES, "INVALID_PRIORITY", "Priority"
        )
    for field in ("key_points", "recommendations", "tags", "labels"):
        if field in changes:
            changes[field] = changes[field] or []
    for field in ("public_opinion_positive", "public_opinion_negative"):
        if field in changes:
            changes[field] = _percentage(changes[field], field)
    if "platform" in changes and changes["platform"]:
        changes["platform"] = normalize_platform(changes["platform"])
    if "content" in changes and changes["content"]:
        changes["content"] = changes["content"][:INSIGHT_EXCERPT_CAP]
    if "detected_at" in changes and changes["detected_at"] is None:
        del changes["detected_at"]

    for field, value in changes.items():
        setattr(insight, field, value)
    db.commit()
    db.refresh(insight)
    return insight


@router.delete("/{insight_id}", response_model=MessageResponse)
async def delete_insight(
    insight_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    insight = _owned_insight(db, insight_id, current_user["id"])
    deleted_id = insight.id
    db.delete(insight)
    db.commit()
    return {"message": "Insight deleted successfully", "id": deleted_id}

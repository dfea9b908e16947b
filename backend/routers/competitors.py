"""
Aether Intel - Competitors CRUD Router

Owner-scoped endpoints for competitor management:
- GET    /api/competitors - List the caller's competitors
- GET    /api/competitors/{id} - Get competitor details
- POST   /api/competitors - Create new competitor
- PUT    /api/competitors/{id} - Update competitor
- DELETE /api/competitors/{id} - Delete competitor (cascades accounts and insights)

A competitor owned by someone else is reported as not found.
"""

import logging
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy import or_
from sqlalchemy.orm import Session

from constants import COMPETITOR_STATUSES, MONITORING_FREQUENCIES
from database import Competitor, get_competitor as load_competitor, get_db
from dependencies import get_current_user, reject_user_id
from errors import NotFound
from schemas.common import MessageResponse
from schemas.competitors import CompetitorCreate, CompetitorResponse, CompetitorUpdate
from validators import clean_text, parse_id, require_choice, require_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/competitors", tags=["Competitors"])


def _owned_competitor(db: Session, competitor_id: str, user_id: str) -> Competitor:
    competitor = load_competitor(db, parse_id(competitor_id), user_id)
    if competitor is None:
        raise NotFound("Competitor not found")
    return competitor


@router.get("", response_model=List[CompetitorResponse])
async def list_competitors(
    status: Optional[str] = None,
    search: Optional[str] = None,
    limit: int = Query(10, ge=1),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    query = db.query(Competitor).filter(Competitor.user_id == current_user["id"])
    if status:
        query = query.filter(Competitor.status == status)
    if search and search.strip():
        term = f"%{search.strip()}%"
        query = query.filter(or_(Competitor.name.ilike(term), Competitor.industry.ilike(term)))
    return (
        query.order_by(Competitor.created_at.desc(), Competitor.id.desc())
        .offset(offset)
        .limit(min(limit, 100))
        .all()
    )


@router.get("/{competitor_id}", response_model=CompetitorResponse)
async def get_competitor(
    competitor_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    return _owned_competitor(db, competitor_id, current_user["id"])


@router.post("", response_model=CompetitorResponse, status_code=201)
async def create_competitor(
    payload: CompetitorCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    reject_user_id(payload.extra_fields())
    name = require_text(
        payload.name, "MISSING_REQUIRED_FIELD", "Name is required and must be a non-empty string"
    )
    status = require_choice(payload.status, COMPETITOR_STATUSES, "INVALID_STATUS", "Status")
    frequency = require_choice(
        payload.monitoring_frequency, MONITORING_FREQUENCIES,
        "INVALID_MONITORING_FREQUENCY", "Monitoring frequency",
    )

    competitor = Competitor(
        user_id=current_user["id"],
        name=name,
        website_url=clean_text(payload.website_url),
        logo_url=clean_text(payload.logo_url),
        industry=clean_text(payload.industry),
        status=status,
        monitoring_frequency=frequency,
    )
    db.add(competitor)
    db.commit()
    db.refresh(competitor)
    logger.info(f"User {current_user['id']} created competitor {competitor.id} ({competitor.name})")
    return competitor


@router.put("/{competitor_id}", response_model=CompetitorResponse)
async def update_competitor(
    competitor_id: str,
    payload: CompetitorUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    reject_user_id(payload.extra_fields())
    competitor = _owned_competitor(db, competitor_id, current_user["id"])
    changes = payload.model_dump(exclude_unset=True, exclude=set(payload.extra_fields()))

    if "name" in changes:
        competitor.name = require_text(
            changes["name"], "MISSING_REQUIRED_FIELD", "Name must be a non-empty string"
        )
    if "status" in changes:
        competitor.status = require_choice(
            changes["status"], COMPETITOR_STATUSES, "INVALID_STATUS", "Status"
        )
    if "monitoring_frequency" in changes:
        competitor.monitoring_frequency = require_choice(
            changes["monitoring_frequency"], MONITORING_FREQUENCIES,
            "INVALID_MONITORING_FREQUENCY", "Monitoring frequency",
        )
    for field in ("website_url", "logo_url", "industry"):
        if field in changes:
            setattr(competitor, field, clean_text(changes[field]))

    competitor.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(competitor)
    return competitor


@router.delete("/{competitor_id}", response_model=MessageResponse)
async def delete_competitor(
    competitor_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    competitor = _owned_competitor(db, competitor_id, current_user["id"])
    deleted_id = competitor.id
    db.delete(competitor)
    db.commit()
    logger.info(f"User {current_user['id']} deleted competitor {deleted_id}")
    return {"message": "Competitor deleted successfully", "id": deleted_id}

"""
Aether Intel - Social Accounts Router

- GET    /api/social-accounts?competitorId= - List accounts (all, or one competitor's)
- POST   /api/social-accounts - Attach an account to a competitor
- PUT    /api/social-accounts/{id} - Update handle / url / isActive
- DELETE /api/social-accounts/{id} - Remove an account

Ownership is checked through the parent competitor.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from constants import SOCIAL_PLATFORMS
from database import Competitor, SocialAccount, get_competitor, get_db
from dependencies import get_current_user, reject_user_id
from errors import CompetitorAccessDenied, InvalidCompetitorId, InvalidField, NotFound
from schemas.common import MessageResponse
from schemas.social_accounts import (
    SocialAccountCreate, SocialAccountResponse, SocialAccountUpdate,
)
from sources import normalize_platform
from validators import optional_http_url, parse_id, require_text

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/social-accounts", tags=["Social Accounts"])


def _owned_account(db: Session, account_id: str, user_id: str) -> SocialAccount:
    account = (
        db.query(SocialAccount)
        .join(Competitor, SocialAccount.competitor_id == Competitor.id)
        .filter(SocialAccount.id == parse_id(account_id), Competitor.user_id == user_id)
        .first()
    )
    if account is None:
        raise NotFound("Social account not found")
    return account


def _owned_competitor_id(db: Session, raw_id, user_id: str) -> int:
    try:
        competitor_id = parse_id(raw_id)
    except InvalidField:
        raise InvalidCompetitorId()
    if get_competitor(db, competitor_id, user_id) is None:
        raise CompetitorAccessDenied()
    return competitor_id


@router.get("", response_model=List[SocialAccountResponse])
async def list_social_accounts(
    competitor_id: Optional[str] = Query(None, alias="competitorId"),
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    query = (
        db.query(SocialAccount)
        .join(Competitor, SocialAccount.competitor_id == Competitor.id)
        .filter(Competitor.user_id == current_user["id"])
    )
    if competitor_id is not None:
        query = query.filter(
            SocialAccount.competitor_id
            == _owned_competitor_id(db, competitor_id, current_user["id"])
        )
    return query.order_by(SocialAccount.id).all()


@router.post("", response_model=SocialAccountResponse, status_code=201)
async def create_social_account(
    payload: SocialAccountCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    reject_user_id(payload.extra_fields())
    if payload.competitor_id is None:
        raise InvalidField("MISSING_COMPETITOR_ID", "Competitor ID is required")
    raw_platform = require_text(payload.platform, "MISSING_PLATFORM", "Platform is required")
    handle = require_text(payload.handle, "MISSING_HANDLE", "Handle is required")

    platform = normalize_platform(raw_platform)
    if platform not in SOCIAL_PLATFORMS:
        raise InvalidField(
            "INVALID_PLATFORM", f"Platform must be one of: {', '.join(SOCIAL_PLATFORMS)}"
        )
    competitor_id = _owned_competitor_id(db, payload.competitor_id, current_user["id"])

    account = SocialAccount(
        competitor_id=competitor_id,
        platform=platform,
        handle=handle,
        url=optional_http_url(payload.url),
        is_active=payload.is_active,
    )
    db.add(account)
    db.commit()
    db.refresh(account)
    logger.info(f"Added {platform} account {handle} to competitor {competitor_id}")
    return account


@router.put("/{account_id}", response_model=SocialAccountResponse)
async def update_social_account(
    account_id: str,
    payload: SocialAccountUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    reject_user_id(payload.extra_fields())
    account = _owned_account(db, account_id, current_user["id"])
    changes = payload.model_dump(exclude_unset=True, exclude=set(payload.extra_fields()))

    if "handle" in changes:
        account.handle = require_text(changes["handle"], "MISSING_HANDLE", "Handle must be non-empty")
    if "url" in changes:
        account.url = optional_http_url(changes["url"])
    if changes.get("is_active") is not None:
        account.is_active = changes["is_active"]

    db.commit()
    db.refresh(account)
    return account


@router.delete("/{account_id}", response_model=MessageResponse)
async def delete_social_account(
    account_id: str,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user)
):
    account = _owned_account(db, account_id, current_user["id"])
    deleted_id = account.id
    db.delete(account)
    db.commit()
    return {"message": "Social account deleted successfully", "id": deleted_id}

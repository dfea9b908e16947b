"""
Aether Intel - Shared FastAPI Dependencies

Authentication plus the injectable collaborators of the scan pipelines
(page fetcher, brand sources, analysis client). Tests swap these through
``app.dependency_overrides``.
"""

import logging
from typing import Dict

import httpx
from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from ai_client import AnalysisClient, get_analysis_client
from auth import verify_token
from brand_sources import ALL_SOURCES, BaseBrandSource, get_brand_source
from database import ensure_user, get_db
from errors import AuthenticationRequired, UserIdNotAllowed
from sources import FETCH_TIMEOUT, USER_AGENT, PageFetcher

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="token", auto_error=False)


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db)
):
    """Verify JWT token and return ``{"id", "email"}``. Raises 401 if invalid/missing."""
    if not token:
        raise AuthenticationRequired()

    payload = verify_token(token)
    if not payload:
        raise AuthenticationRequired()

    user = ensure_user(db, payload["sub"], payload.get("email"))
    return {"id": user.id, "email": user.email}


def reject_user_id(body: dict) -> None:
    """Owner always comes from the token, never from the request body."""
    if body and ("userId" in body or "user_id" in body):
        raise UserIdNotAllowed()


async def get_page_fetcher():
    """One PageFetcher (and its httpx client) per request."""
    async with PageFetcher() as fetcher:
        yield fetcher


async def get_brand_sources():
    """Every registered brand source, sharing one httpx client for the request."""
    async with httpx.AsyncClient(
        timeout=FETCH_TIMEOUT,
        follow_redirects=True,
        headers={"User-Agent": USER_AGENT},
    ) as client:
        sources: Dict[str, BaseBrandSource] = {
            cls.source_name: get_brand_source(cls.source_name, client=client) for cls in ALL_SOURCES
        }
        yield sources


def get_analysis_service() -> AnalysisClient:
    return get_analysis_client()

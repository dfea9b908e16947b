"""
Aether Intel - Social Account Pydantic Schemas
"""

from datetime import datetime
from typing import Any, Optional

from schemas.common import CamelModel, WriteModel


class SocialAccountCreate(WriteModel):
    competitor_id: Optional[Any] = None
    platform: Optional[str] = None
    handle: Optional[str] = None
    url: Optional[str] = None
    is_active: bool = True


class SocialAccountUpdate(WriteModel):
    handle: Optional[str] = None
    url: Optional[str] = None
    is_active: Optional[bool] = None


class SocialAccountResponse(CamelModel):
    id: int
    competitor_id: int
    platform: str
    handle: str
    url: Optional[str] = None
    is_active: bool
    profile_url: Optional[str] = None
    created_at: Optional[datetime] = None

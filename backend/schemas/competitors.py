"""
Aether Intel - Competitor Pydantic Schemas
"""

from datetime import datetime
from typing import Optional

from schemas.common import CamelModel, WriteModel


class CompetitorCreate(WriteModel):
    name: Optional[str] = None
    website_url: Optional[str] = None
    logo_url: Optional[str] = None
    industry: Optional[str] = None
    status: str = "active"
    monitoring_frequency: str = "daily"


class CompetitorUpdate(WriteModel):
    name: Optional[str] = None
    website_url: Optional[str] = None
    logo_url: Optional[str] = None
    industry: Optional[str] = None
    status: Optional[str] = None
    monitoring_frequency: Optional[str] = None


class CompetitorResponse(CamelModel):
    id: int
    user_id: str
    name: str
    website_url: Optional[str] = None
    logo_url: Optional[str] = None
    industry: Optional[str] = None
    status: str
    monitoring_frequency: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

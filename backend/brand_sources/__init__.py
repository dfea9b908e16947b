"""
Brand comment sources for Aether Intel.

Usage:
    from brand_sources import get_brand_source

    youtube = get_brand_source("youtube", client)
    comments = await youtube.collect("@acme")
"""

from typing import Optional

import httpx

from .base_source import BaseBrandSource, BrandComment  # noqa: F401
from .youtube import YouTubeSource  # noqa: F401
from .reddit import RedditSource  # noqa: F401

ALL_SOURCES = [YouTubeSource, RedditSource]


def get_brand_source(name: str, client: Optional[httpx.AsyncClient] = None) -> Optional[BaseBrandSource]:
    """Source instance by name (case-insensitive), or None."""
    for SourceClass in ALL_SOURCES:
        if SourceClass.source_name == name.lower():
            return SourceClass(client=client)
    return None


def get_all_source_status() -> list:
    """Configuration status of every source, for the readiness probe."""
    return [
        {"source": SourceClass.source_name, "is_configured": SourceClass.is_configured()}
        for SourceClass in ALL_SOURCES
    ]

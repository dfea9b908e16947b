"""
Aether Intel - Competitor Scan Pipeline

One scan = collect -> analyze -> persist for a single competitor, run inside
the request that triggered it:

    1. validate the id and load the competitor under the caller's ownership
    2. fan out to the website and every active social account
    3. one analysis round-trip over all collected documents
    4. store one insight per accepted draft

Authorization and "no data at all" abort before anything is written.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, List

from sqlalchemy.orm import Session

from analysis_adapter import analyze
from collector import collect_documents
from database import Insight, get_competitor, list_active_social_accounts
from errors import (
    AnalysisNotConfigured, CompetitorAccessDenied, InvalidCompetitorId, InvalidField,
)
from persister import persist_insights
from validators import parse_id

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    sources_scraped: int
    insights: List[Insight] = field(default_factory=list)

    @property
    def insights_generated(self) -> int:
        return len(self.insights)

    @property
    def message(self) -> str:
        return (
            f"Successfully scraped and analyzed {self.sources_scraped} "
            f"source{'s' if self.sources_scraped != 1 else ''}"
        )


def parse_competitor_id(value: Any) -> int:
    """Positive integer id, accepting numeric strings; else InvalidCompetitorId."""
    try:
        return parse_id(value)
    except InvalidField:
        raise InvalidCompetitorId()


async def run_competitor_scan(
    db: Session,
    user_id: str,
    competitor_id: Any,
    fetcher: Any,
    analysis_client: Any,
) -> ScanResult:
    """Scan one competitor owned by *user_id*.

    *analysis_client* needs an async ``generate(prompt) -> str``. An
    ``is_configured`` attribute is optional; when present and false the scan
    stops with AnalysisNotConfigured before anything is fetched.

    Raises:
        InvalidCompetitorId, CompetitorAccessDenied, AnalysisNotConfigured,
        NoDataScraped, AnalysisFailed
    """
    competitor_id = parse_competitor_id(competitor_id)

    competitor = get_competitor(db, competitor_id, user_id)
    if competitor is None:
        logger.warning(f"User {user_id} attempted to scan competitor {competitor_id} they do not own")
        raise CompetitorAccessDenied()

    if not getattr(analysis_client, "is_configured", True):
        raise AnalysisNotConfigured()

    accounts = list_active_social_accounts(db, competitor.id)
    logger.info(
        f"Starting scan of {competitor.name} (id={competitor.id}): "
        f"website={'yes' if competitor.website_url else 'no'}, {len(accounts)} social account(s)"
    )

    documents = await collect_documents(competitor, accounts, fetcher)
    drafts = await analyze(analysis_client, competitor.name, documents)
    stored = persist_insights(db, user_id, competitor.id, drafts)

    if drafts and len(stored) < len(drafts):
        logger.warning(
            f"Stored {len(stored)}/{len(drafts)} insights for competitor {competitor.id}"
        )
    logger.info(
        f"Scan of {competitor.name} finished: {len(documents)} source(s), {len(stored)} insight(s)"
    )
    return ScanResult(sources_scraped=len(documents), insights=stored)

"""
Aether Intel - Fan-out Collector

Pulls every configured source for one competitor (website first, then each
active social account) and turns the successful, non-empty results into
ScrapedDocuments.

Fetches run concurrently behind a semaphore. Each source produces exactly one
FetchOutcome; a failure is recorded on its outcome and never cancels or
delays siblings beyond its own timeout. Documents come back in source order.
"""

import os
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from constants import WEBSITE_PLATFORM
from errors import NoDataScraped
from sources import FETCH_TIMEOUT, build_profile_url, normalize_platform

logger = logging.getLogger(__name__)

MAX_CONCURRENCY = int(os.getenv("SCRAPE_MAX_CONCURRENCY", "4"))

# Slack on top of the fetcher's own timeout before a source is abandoned
_TIMEOUT_GRACE_SECONDS = 2.0


@dataclass
class ScrapedDocument:
    """Transient unit handed to the analysis adapter."""
    platform: str
    url: str
    content: str

    def to_dict(self) -> dict:
        return {"platform": self.platform, "url": self.url, "content": self.content}


@dataclass
class SourceTask:
    """One planned fetch: what to ask the fetcher for, and where it points."""
    platform: str
    identifier: str
    url: str


@dataclass
class FetchOutcome:
    """Result of one SourceTask. Exactly one of content/error is meaningful."""
    task: SourceTask
    content: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and bool(self.content)


def plan_sources(competitor: Any, social_accounts: Iterable[Any]) -> List[SourceTask]:
    """Website (when set) followed by each active social account."""
    tasks: List[SourceTask] = []

    website = (getattr(competitor, "website_url", None) or "").strip()
    if website:
        tasks.append(SourceTask(platform=WEBSITE_PLATFORM, identifier=website, url=website))

    for account in social_accounts:
        if not getattr(account, "is_active", True):
            continue
        platform = normalize_platform(account.platform)
        if account.url:
            # The override is both what gets fetched and what gets recorded
            url = build_profile_url(platform, account.url) or account.url
            identifier = url
        else:
            identifier = account.handle
            url = build_profile_url(platform, account.handle) or account.handle
        tasks.append(SourceTask(platform=platform, identifier=identifier, url=url))

    return tasks


async def run_fetches(
    fetcher: Any,
    tasks: List[SourceTask],
    max_concurrency: int = MAX_CONCURRENCY,
    timeout: Optional[float] = None,
) -> List[FetchOutcome]:
    """Run every task and return one outcome per task, in task order."""
    semaphore = asyncio.Semaphore(max(1, max_concurrency))
    budget = (timeout if timeout is not None else FETCH_TIMEOUT) + _TIMEOUT_GRACE_SECONDS

    async def _run_one(task: SourceTask) -> FetchOutcome:
        async with semaphore:
            try:
                content = await asyncio.wait_for(
                    fetcher.fetch(task.identifier, task.platform), timeout=budget
                )
            except asyncio.TimeoutError:
                return FetchOutcome(task=task, error=f"timed out after {budget:.0f}s")
            except Exception as e:
                return FetchOutcome(task=task, error=f"{type(e).__name__}: {e}")
        if not content:
            return FetchOutcome(task=task, error="empty response")
        return FetchOutcome(task=task, content=content)

    results = await asyncio.gather(*(_run_one(t) for t in tasks), return_exceptions=True)

    outcomes: List[FetchOutcome] = []
    for task, result in zip(tasks, results):
        if isinstance(result, BaseException):
            outcomes.append(FetchOutcome(task=task, error=f"{type(result).__name__}: {result}"))
        else:
            outcomes.append(result)
    return outcomes


async def collect_documents(
    competitor: Any,
    social_accounts: Iterable[Any],
    fetcher: Any,
    max_concurrency: int = MAX_CONCURRENCY,
) -> List[ScrapedDocument]:
    """Fetch all of a competitor's sources.

    Raises:
        NoDataScraped: when no source produced any content.
    """
    tasks = plan_sources(competitor, social_accounts)
    outcomes = await run_fetches(fetcher, tasks, max_concurrency=max_concurrency)

    documents: List[ScrapedDocument] = []
    failed = 0
    for outcome in outcomes:
        if outcome.ok:
            documents.append(ScrapedDocument(
                platform=outcome.task.platform,
                url=outcome.task.url,
                content=outcome.content,
            ))
        else:
            failed += 1
            logger.warning(
                f"Source skipped for competitor {getattr(competitor, 'id', '?')}: "
                f"{outcome.task.platform} {outcome.task.identifier} ({outcome.error})"
            )

    logger.info(
        f"Collected {len(documents)}/{len(tasks)} sources for competitor "
        f"{getattr(competitor, 'name', '?')} ({failed} skipped)"
    )

    if not documents:
        raise NoDataScraped()
    return documents

"""
Aether Intel - Collector Tests

Source planning, failure isolation and ordering of the concurrent fan-out.

Run: python -m pytest -xvs tests/test_collector.py
"""

import asyncio
from types import SimpleNamespace

import pytest

from collector import ScrapedDocument, collect_documents, plan_sources, run_fetches
from errors import NoDataScraped

from conftest import FakeFetcher


def _competitor(website="https://example.com"):
    return SimpleNamespace(id=1, name="Acme", website_url=website)


def _account(platform, handle, url=None, is_active=True):
    return SimpleNamespace(platform=platform, handle=handle, url=url, is_active=is_active)


class TestPlanSources:
    def test_website_first_then_accounts(self):
        tasks = plan_sources(_competitor(), [_account("twitter", "acme"), _account("LinkedIn", "acme-inc")])

        assert [t.platform for t in tasks] == ["website", "twitter", "linkedin"]
        assert tasks[0].url == "https://example.com"
        assert tasks[2].url == "https://www.linkedin.com/company/acme-inc"

    def test_no_website_skips_website_task(self):
        tasks = plan_sources(_competitor(website=None), [_account("twitter", "acme")])
        assert [t.platform for t in tasks] == ["twitter"]

    def test_account_url_overrides_handle(self):
        account = _account("twitter", "acme", url="https://twitter.com/acme_real")
        task = plan_sources(_competitor(website=""), [account])[0]

        assert task.identifier == "https://twitter.com/acme_real"
        assert task.url == "https://twitter.com/acme_real"

    def test_relative_url_override_resolved_once(self):
        account = _account("twitter", "acme", url="acme.io/news")
        task = plan_sources(_competitor(website=""), [account])[0]

        assert task.identifier == "https://twitter.com/acme.io/news"
        assert task.url == task.identifier

    @pytest.mark.asyncio
    async def test_document_url_is_the_fetched_url(self):
        fetcher = FakeFetcher({"https://twitter.com/acme.io/news": "Launch news"})
        account = _account("twitter", "acme", url="acme.io/news")

        documents = await collect_documents(_competitor(website=None), [account], fetcher)

        assert [doc.url for doc in documents] == [fetcher.calls[0][0]]

    def test_inactive_accounts_ignored(self):
        tasks = plan_sources(_competitor(), [_account("twitter", "acme", is_active=False)])
        assert len(tasks) == 1


class TestCollectDocuments:
    @pytest.mark.asyncio
    async def test_middle_source_failure_is_isolated(self):
        fetcher = FakeFetcher({
            "https://example.com": "Homepage text",
            "acme": RuntimeError("boom"),
            "acme-inc": "LinkedIn text",
        })
        accounts = [_account("twitter", "acme"), _account("linkedin", "acme-inc")]

        documents = await collect_documents(_competitor(), accounts, fetcher)

        assert documents == [
            ScrapedDocument(platform="website", url="https://example.com", content="Homepage text"),
            ScrapedDocument(
                platform="linkedin",
                url="https://www.linkedin.com/company/acme-inc",
                content="LinkedIn text",
            ),
        ]
        assert len(fetcher.calls) == 3

    @pytest.mark.asyncio
    async def test_empty_content_is_skipped(self):
        fetcher = FakeFetcher({"https://example.com": "", "acme": "Tweets"})
        documents = await collect_documents(_competitor(), [_account("twitter", "acme")], fetcher)

        assert [d.platform for d in documents] == ["twitter"]

    @pytest.mark.asyncio
    async def test_all_sources_failing_raises_no_data(self):
        fetcher = FakeFetcher({"https://example.com": None, "acme": ValueError("bad")})

        with pytest.raises(NoDataScraped) as exc_info:
            await collect_documents(_competitor(), [_account("twitter", "acme")], fetcher)

        assert exc_info.value.code == "NO_DATA_SCRAPED"
        assert exc_info.value.status_code == 400

    @pytest.mark.asyncio
    async def test_no_sources_at_all_raises_no_data(self):
        with pytest.raises(NoDataScraped):
            await collect_documents(_competitor(website=None), [], FakeFetcher())

    @pytest.mark.asyncio
    async def test_results_keep_source_order_regardless_of_completion(self):
        class StaggeredFetcher:
            delays = {"https://example.com": 0.05, "a": 0.0, "b": 0.02}

            async def fetch(self, identifier, platform):
                await asyncio.sleep(self.delays[identifier])
                return f"content {identifier}"

        accounts = [_account("twitter", "a"), _account("facebook", "b")]
        documents = await collect_documents(_competitor(), accounts, StaggeredFetcher(), max_concurrency=3)

        assert [d.platform for d in documents] == ["website", "twitter", "facebook"]


class TestRunFetches:
    @pytest.mark.asyncio
    @pytest.mark.timeout(15)
    async def test_hanging_source_times_out_without_blocking_siblings(self):
        class HangingFetcher:
            async def fetch(self, identifier, platform):
                if identifier == "hang":
                    await asyncio.sleep(60)
                return f"ok {identifier}"

        tasks = plan_sources(_competitor(website=None), [_account("twitter", "hang"), _account("twitter", "fine")])
        outcomes = await run_fetches(HangingFetcher(), tasks, timeout=0.1)

        assert outcomes[0].ok is False
        assert "timed out" in outcomes[0].error
        assert outcomes[1].ok is True
        assert outcomes[1].content == "ok fine"

    @pytest.mark.asyncio
    async def test_one_outcome_per_task(self):
        tasks = plan_sources(_competitor(), [_account("twitter", "a"), _account("twitter", "b")])
        outcomes = await run_fetches(FakeFetcher({"a": "x"}), tasks)

        assert len(outcomes) == len(tasks)
        assert [o.task for o in outcomes] == tasks
        assert [o.ok for o in outcomes] == [False, True, False]

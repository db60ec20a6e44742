"""Indexing pipeline orchestration."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Mapping, Sequence

import httpx

from govsearch.core.config import ApiSourceConfig, CrawlSourceConfig, Settings
from govsearch.core.logging import get_logger
from govsearch.core.metrics import REFRESH_DURATION
from govsearch.db.memory import RecordStore
from govsearch.ingest.crawler import CrawlOptions, CrawlStats, Sleeper, StructuredCrawler
from govsearch.ingest.fetchers import ApiFetcher
from govsearch.models.records import Category, InvalidRecordError, Record, record_from_payload
from govsearch.search.engine import SearchEngine
from govsearch.utils.ids import new_id

logger = get_logger(__name__)


class IndexingPipeline:
    """Coordinate API fetches, website crawls and index rebuilds.

    The pipeline is the only writer to the record store. Runs that mutate the
    store hold ``_lock`` so a scheduled refresh, a manual refresh and ad-hoc
    submissions never interleave.
    """

    def __init__(
        self,
        store: RecordStore,
        engine: SearchEngine,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.store = store
        self.engine = engine
        self.settings = settings
        self.transport = transport
        self._sleep = sleep
        self._lock = asyncio.Lock()

    async def initialize(self) -> dict[str, Any]:
        async with self._lock:
            summary = await self.fetch_all()
            self.engine.build_from_store(self.store)
        logger.info("Data indexer initialized: %s", summary)
        return self.engine.get_stats()

    async def refresh(self) -> dict[str, Any]:
        """Drop every fetched and crawled record, re-run all jobs and rebuild."""
        async with self._lock:
            started = time.perf_counter()
            self.store.clear_fetched()
            summary = await self.fetch_all()
            self.engine.build_from_store(self.store)
            REFRESH_DURATION.observe(time.perf_counter() - started)
        logger.info("Data refresh completed: %s", summary)
        return self.engine.get_stats()

    async def fetch_all(self) -> dict[str, int]:
        """Run every configured API fetch and crawl job; failures stay local to their job."""
        self.store.reset_visited()
        async with self._client() as client:
            fetcher = ApiFetcher(client, self.settings)
            crawler = StructuredCrawler(self.store, client, self.settings, sleep=self._sleep)
            jobs = [self._run_api_source(fetcher, source) for source in self.settings.api_sources]
            jobs.extend(self._run_crawl_source(crawler, source) for source in self.settings.crawl_sources)
            outcomes = await asyncio.gather(*jobs, return_exceptions=True)

        failed = 0
        for outcome in outcomes:
            if isinstance(outcome, BaseException):
                failed += 1
                logger.error("Indexing job failed: %s", outcome, exc_info=outcome)
        summary = {
            "datasets": self.store.count(Category.DATASET),
            "apis": self.store.count(Category.API),
            "documents": self.store.count(Category.DOCUMENT),
            "sections": self.store.count(Category.SECTION),
            "failed_jobs": failed,
        }
        logger.info(
            "Indexed %s datasets, %s APIs, %s documents",
            summary["datasets"],
            summary["apis"],
            summary["documents"],
        )
        return summary

    async def submit_record(self, payload: Mapping[str, Any]) -> Record:
        """Add an externally supplied record and rebuild the index.

        A derived id that is already taken in the record's category gets a
        random suffix; an explicitly supplied duplicate id is rejected.
        """
        record = record_from_payload(payload)
        async with self._lock:
            if self.store.has_id(record.category, record.id):
                if payload.get("id"):
                    raise InvalidRecordError(f"A {record.category} record with ID {record.id} already exists")
                record.id = f"{record.id}-{new_id()[:8]}"
            self.store.add_submitted(record)
            self.engine.build_from_store(self.store)
        logger.info("Added %s record %s", record.category, record.id)
        return record

    async def crawl_url(
        self,
        url: str,
        source: str,
        tags: Sequence[str] = (),
        max_depth: int | None = None,
    ) -> CrawlStats:
        """Crawl one site on demand into the current run and rebuild the index."""
        options = CrawlOptions(
            source=source,
            tags=list(tags),
            max_depth=max_depth or self.settings.crawl_max_depth,
        )
        async with self._lock:
            async with self._client() as client:
                crawler = StructuredCrawler(self.store, client, self.settings, sleep=self._sleep)
                stats = await crawler.crawl(url, options)
            self.engine.build_from_store(self.store)
        return stats

    # Internal helpers -------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            transport=self.transport,
            follow_redirects=True,
            headers={"User-Agent": self.settings.user_agent},
        )

    async def _run_api_source(self, fetcher: ApiFetcher, source: ApiSourceConfig) -> None:
        record = await fetcher.fetch(source)
        if record is not None:
            self.store.add(record)

    async def _run_crawl_source(self, crawler: StructuredCrawler, source: CrawlSourceConfig) -> None:
        options = CrawlOptions(
            source=source.source,
            tags=list(source.tags),
            max_depth=source.max_depth or self.settings.crawl_max_depth,
        )
        await crawler.crawl(source.url, options)


__all__ = ["IndexingPipeline"]

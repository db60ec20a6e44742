"""Structured website crawler."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable

import httpx

from govsearch.core.config import Settings
from govsearch.core.logging import get_logger
from govsearch.core.metrics import CRAWL_ERRORS, PAGES_CRAWLED
from govsearch.db.memory import RecordStore
from govsearch.ingest.html import ParsedPage, filter_relevant_links, parse_page
from govsearch.models.records import DocumentRecord, SectionRecord
from govsearch.utils.ids import slugify

logger = get_logger(__name__)

Sleeper = Callable[[float], Awaitable[None]]


@dataclass(slots=True)
class CrawlOptions:
    source: str
    tags: list[str] = field(default_factory=list)
    max_depth: int = 3

    def __post_init__(self) -> None:
        if self.max_depth < 1:
            raise ValueError("max_depth must be at least 1")


@dataclass(slots=True)
class CrawlStats:
    pages: int = 0
    sections: int = 0
    failed: int = 0
    skipped: int = 0

    def to_dict(self) -> dict[str, int]:
        return {
            "pages": self.pages,
            "sections": self.sections,
            "failed": self.failed,
            "skipped": self.skipped,
        }


class StructuredCrawler:
    """Depth-bounded crawler emitting one document plus its sections per page.

    Work is an explicit ``(url, depth)`` stack popped depth-first, so the first
    relevant link of a page is fully explored before its siblings. A URL is
    marked visited in the shared store before the first suspension point of its
    fetch, so concurrent crawls on the same store never fetch it twice.
    """

    def __init__(
        self,
        store: RecordStore,
        client: httpx.AsyncClient,
        settings: Settings,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self.store = store
        self.client = client
        self.settings = settings
        self._sleep = sleep

    async def crawl(self, seed_url: str, options: CrawlOptions) -> CrawlStats:
        stats = CrawlStats()
        worklist: list[tuple[str, int]] = [(seed_url, 0)]
        while worklist:
            url, depth = worklist.pop()
            if depth >= options.max_depth or not self.store.mark_visited(url):
                stats.skipped += 1
                continue
            if depth > 0 and self.settings.crawl_delay > 0:
                await self._sleep(self.settings.crawl_delay)

            page = await self._fetch_page(url, options)
            if page is None:
                stats.failed += 1
                continue
            stats.pages += 1
            stats.sections += self._emit(url, page, options)

            if depth + 1 < options.max_depth:
                for link in reversed(self._next_links(page, options)):
                    worklist.append((link, depth + 1))

        logger.info(
            "Crawled %s: %s pages, %s sections, %s failed",
            seed_url,
            stats.pages,
            stats.sections,
            stats.failed,
        )
        return stats

    # Internal helpers -------------------------------------------------

    async def _fetch_page(self, url: str, options: CrawlOptions) -> ParsedPage | None:
        try:
            response = await self.client.get(
                url,
                timeout=self.settings.crawl_timeout,
                headers={"User-Agent": self.settings.user_agent},
            )
            response.raise_for_status()
        except httpx.HTTPError as exc:
            logger.warning("Error crawling %s: %s", url, exc)
            CRAWL_ERRORS.labels(source=options.source).inc()
            return None

        try:
            page = parse_page(
                response.text,
                url,
                section_limit=self.settings.section_content_limit,
                text_limit=self.settings.document_content_limit,
            )
        except Exception as exc:
            logger.exception("Failed to parse %s: %s", url, exc)
            CRAWL_ERRORS.labels(source=options.source).inc()
            return None
        PAGES_CRAWLED.labels(source=options.source).inc()
        return page

    def _emit(self, url: str, page: ParsedPage, options: CrawlOptions) -> int:
        self.store.add(
            DocumentRecord(
                id=slugify(url),
                title=page.title,
                description=page.description,
                content=page.text,
                source=options.source,
                type="website",
                url=url,
                tags=list(options.tags),
                sections=list(page.sections),
            )
        )
        for section in page.sections:
            self.store.add(
                SectionRecord(
                    id=slugify(f"{url}#{section.id}"),
                    title=section.title,
                    content=section.content,
                    source=options.source,
                    type="section",
                    url=section.url,
                    tags=[*options.tags, *section.tags],
                    level=section.level,
                    path=list(section.path),
                    parent_url=url,
                    parent_title=page.title,
                )
            )
        return len(page.sections)

    def _next_links(self, page: ParsedPage, options: CrawlOptions) -> list[str]:
        unvisited = [link for link in page.links if not self.store.is_visited(link)]
        relevant = filter_relevant_links(unvisited, options.tags)
        return relevant[: self.settings.max_links_per_page]


__all__ = ["StructuredCrawler", "CrawlOptions", "CrawlStats"]

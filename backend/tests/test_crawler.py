"""Crawler tests against an in-memory site."""

from __future__ import annotations

import asyncio

import httpx

from govsearch.core.config import Settings
from govsearch.db.memory import RecordStore
from govsearch.ingest.crawler import CrawlOptions, StructuredCrawler
from govsearch.models.records import Category

SEED = "https://gov.example/"

SITE = {
    "https://gov.example/": """
        <html><head><title>Gov Home</title></head><body>
        <h2>Data Catalogue</h2><p>Education datasets for adelaide.</p>
        <a href="/data/a">A</a>
        <a href="/data/b">B</a>
        <a href="/contact">Contact</a>
        <a href="/data/a#section">A again</a>
        </body></html>
    """,
    "https://gov.example/data/a": """
        <html><head><title>Dataset A</title></head><body>
        <p>Alpha.</p><a href="/data/deep">Deep</a><a href="/">Home</a>
        </body></html>
    """,
    "https://gov.example/data/deep": "<html><head><title>Deep</title></head><body><p>Deep.</p></body></html>",
}


def _transport(requested: list[str]) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        requested.append(url)
        if url in SITE:
            return httpx.Response(200, html=SITE[url])
        return httpx.Response(500, text="boom")

    return httpx.MockTransport(handler)


def _run_crawls(store: RecordStore, settings: Settings, requested: list[str], *option_sets: CrawlOptions, sleep=None):
    async def runner():
        async with httpx.AsyncClient(transport=_transport(requested)) as client:
            kwargs = {"sleep": sleep} if sleep is not None else {}
            crawler = StructuredCrawler(store, client, settings, **kwargs)
            return await asyncio.gather(*(crawler.crawl(SEED, options) for options in option_sets))

    return asyncio.run(runner())


def test_depth_bound_and_failure_isolation(settings: Settings) -> None:
    store = RecordStore()
    requested: list[str] = []
    [stats] = _run_crawls(store, settings, requested, CrawlOptions(source="Gov", tags=["portal"], max_depth=2))

    assert requested == ["https://gov.example/", "https://gov.example/data/a", "https://gov.example/data/b"]
    assert stats.pages == 2
    assert stats.failed == 1
    snapshot = store.snapshot()
    assert {doc.url for doc in snapshot.documents} == {"https://gov.example/", "https://gov.example/data/a"}


def test_depth_first_order_and_no_duplicate_fetch(settings: Settings) -> None:
    store = RecordStore()
    requested: list[str] = []
    _run_crawls(store, settings, requested, CrawlOptions(source="Gov", max_depth=3))

    assert requested == [
        "https://gov.example/",
        "https://gov.example/data/a",
        "https://gov.example/data/deep",
        "https://gov.example/data/b",
    ]
    assert len(requested) == len(set(requested))


def test_concurrent_crawls_share_visited_set(settings: Settings) -> None:
    store = RecordStore()
    requested: list[str] = []
    first, second = _run_crawls(
        store,
        settings,
        requested,
        CrawlOptions(source="Gov", max_depth=3),
        CrawlOptions(source="Gov", max_depth=3),
    )

    assert sorted(requested) == sorted(set(requested))
    assert first.pages + second.pages == 3
    assert len(store.snapshot().documents) == 3


def test_documents_and_sections_emitted(settings: Settings) -> None:
    store = RecordStore()
    _run_crawls(store, settings, [], CrawlOptions(source="Gov", tags=["gov"], max_depth=1))

    snapshot = store.snapshot()
    [document] = snapshot.documents
    assert document.id == "https-gov-example"
    assert document.type == "website"
    assert document.title == "Gov Home"
    assert [section.title for section in document.sections] == ["Data Catalogue"]

    [section] = snapshot.sections
    assert section.category == Category.SECTION
    assert section.id == "https-gov-example-data-catalogue"
    assert section.url == "https://gov.example/#data-catalogue"
    assert section.parent_url == SEED
    assert section.parent_title == "Gov Home"
    assert section.tags == ["gov", "adelaide", "education"]


def test_courtesy_delay_before_child_pages() -> None:
    delays: list[float] = []

    async def fake_sleep(seconds: float) -> None:
        delays.append(seconds)

    store = RecordStore()
    _run_crawls(store, Settings(crawl_delay=1.0), [], CrawlOptions(source="Gov", max_depth=3), sleep=fake_sleep)
    assert delays == [1.0, 1.0, 1.0]


def test_already_visited_seed_is_skipped(settings: Settings) -> None:
    store = RecordStore()
    store.mark_visited(SEED)
    requested: list[str] = []
    [stats] = _run_crawls(store, settings, requested, CrawlOptions(source="Gov", max_depth=3))
    assert requested == []
    assert stats.pages == 0
    assert stats.skipped == 1

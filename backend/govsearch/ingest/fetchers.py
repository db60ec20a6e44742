"""Fetchers for structured API endpoints."""

from __future__ import annotations

import httpx

from govsearch.core.config import ApiSourceConfig, Settings
from govsearch.core.logging import get_logger
from govsearch.core.metrics import CRAWL_ERRORS
from govsearch.models.records import ApiRecord, Category, DatasetRecord, DocumentRecord, Record
from govsearch.utils.text import truncate

logger = get_logger(__name__)

_RECORD_TYPES: dict[str, type[Record]] = {
    Category.DATASET: DatasetRecord,
    Category.API: ApiRecord,
    Category.DOCUMENT: DocumentRecord,
}


class FetchError(Exception):
    """Raised when an endpoint cannot be fetched."""


class ApiFetcher:
    """Turns configured API endpoints into dataset, api or document records."""

    def __init__(self, client: httpx.AsyncClient, settings: Settings) -> None:
        self.client = client
        self.settings = settings

    async def fetch(self, source: ApiSourceConfig) -> Record | None:
        """Fetch one endpoint; ``None`` when it fails or returns an empty body."""
        try:
            body = await self._get(source)
        except FetchError as exc:
            logger.warning("Error fetching %s (%s): %s", source.id, source.url, exc)
            CRAWL_ERRORS.labels(source=source.source).inc()
            return None
        if not body.strip():
            logger.warning("Empty response from %s", source.url)
            return None

        record_cls = _RECORD_TYPES.get(source.category)
        if record_cls is None:
            logger.warning("Unsupported category %r for API source %s", source.category, source.id)
            return None
        content = ""
        if record_cls is DocumentRecord:
            content = truncate(body, self.settings.document_content_limit)
        return record_cls(
            id=source.id,
            title=source.title,
            description=source.description,
            content=content,
            source=source.source,
            type=source.type,
            url=source.url,
            tags=list(source.tags),
        )

    async def _get(self, source: ApiSourceConfig) -> str:
        headers = {"User-Agent": self.settings.user_agent}
        if source.accept:
            headers["Accept"] = source.accept
        try:
            response = await self.client.get(source.url, headers=headers, timeout=self.settings.fetch_timeout)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise FetchError(str(exc)) from exc
        return response.text


__all__ = ["ApiFetcher", "FetchError"]

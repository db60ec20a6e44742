"""Pydantic DTOs exposed via API."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, HttpUrl


class Pagination(BaseModel):
    page: int
    limit: int
    total: int
    pages: int


class SearchPage(BaseModel):
    results: list[dict[str, Any]]
    pagination: Pagination
    query: str
    filters: dict[str, Any]
    suggestions: list[str] = Field(default_factory=list)
    sort: str = "relevance"
    last_updated: datetime | None = None


class SearchFilters(BaseModel):
    category: str | None = None
    source: str | None = None
    type: str | None = None


class AdvancedSearchRequest(BaseModel):
    query: str
    filters: SearchFilters = Field(default_factory=SearchFilters)
    sort: Literal["relevance", "date", "title", "source"] = "relevance"
    limit: int = Field(default=20, ge=1)
    page: int = Field(default=1, ge=1)


class SuggestionsResponse(BaseModel):
    suggestions: list[Any]


class RecordSubmitRequest(BaseModel):
    id: str | None = None
    title: str = ""
    description: str = ""
    content: str = ""
    source: str = ""
    type: str = "file"
    category: str = "custom"
    url: str | None = None
    tags: list[str] = Field(default_factory=list)


class UrlSubmitRequest(BaseModel):
    url: HttpUrl
    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    source: str = "External URL"
    tags: str = ""
    category: Literal["dataset", "api", "document", "custom"] = "document"
    type: str = "url"


class CrawlRequest(BaseModel):
    url: HttpUrl
    source: str
    tags: list[str] = Field(default_factory=list)
    max_depth: int | None = Field(default=None, ge=1, le=5)


class CrawlResponse(BaseModel):
    stats: dict[str, int]
    index: dict[str, Any]


class RecordResponse(BaseModel):
    success: bool = True
    data: dict[str, Any]


class RecordListResponse(BaseModel):
    items: list[dict[str, Any]]
    pagination: Pagination


class RefreshResponse(BaseModel):
    message: str
    data: dict[str, Any]


__all__ = [
    "Pagination",
    "SearchPage",
    "SearchFilters",
    "AdvancedSearchRequest",
    "SuggestionsResponse",
    "RecordSubmitRequest",
    "UrlSubmitRequest",
    "CrawlRequest",
    "CrawlResponse",
    "RecordResponse",
    "RecordListResponse",
    "RefreshResponse",
]

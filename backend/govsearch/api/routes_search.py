"""Search API routes."""

from __future__ import annotations

import math
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from govsearch.api.dependencies import get_app_settings, get_search_engine
from govsearch.core.config import Settings
from govsearch.models.dto import AdvancedSearchRequest, Pagination, RecordResponse, SearchPage, SuggestionsResponse
from govsearch.search import SearchEngine, SearchResults

router = APIRouter()

_SORT_KEYS = {
    "date": (lambda item: item["last_updated"], True),
    "title": (lambda item: item["title"].lower(), False),
    "source": (lambda item: item["source"].lower(), False),
}


@router.get("", response_model=SearchPage, summary="Search every indexed record")
async def search(
    q: str = Query("", description="Search query"),
    limit: int = Query(20, ge=1),
    page: int = Query(1, ge=1),
    category: str | None = None,
    source: str | None = None,
    type: str | None = None,
    engine: SearchEngine = Depends(get_search_engine),
    settings: Settings = Depends(get_app_settings),
) -> SearchPage:
    query = _require_query(q)
    page_size = min(limit, settings.search_max_limit)
    results = engine.search(query, limit=page * page_size, category=category, source=source, record_type=type)
    return _paginate(results, engine, page, page_size)


@router.post("/advanced", response_model=SearchPage, summary="Search with filters and sorting")
async def advanced_search(
    request: AdvancedSearchRequest,
    engine: SearchEngine = Depends(get_search_engine),
    settings: Settings = Depends(get_app_settings),
) -> SearchPage:
    query = _require_query(request.query)
    page_size = min(request.limit, settings.search_max_limit)
    results = engine.search(
        query,
        limit=request.page * page_size,
        category=request.filters.category,
        source=request.filters.source,
        record_type=request.filters.type,
    )
    return _paginate(results, engine, request.page, page_size, sort=request.sort)


@router.get("/suggestions", response_model=SuggestionsResponse, summary="Autocomplete words and tags")
async def suggestions(
    q: str = "",
    limit: int = Query(10, ge=1, le=50),
    engine: SearchEngine = Depends(get_search_engine),
) -> SuggestionsResponse:
    return SuggestionsResponse(suggestions=engine.autocomplete(q, limit=limit))


@router.get("/semantic-suggestions", response_model=SuggestionsResponse, summary="Title, tag and section suggestions")
async def semantic_suggestions(
    q: str = "",
    limit: int = Query(10, ge=1, le=50),
    engine: SearchEngine = Depends(get_search_engine),
) -> SuggestionsResponse:
    return SuggestionsResponse(suggestions=engine.semantic_suggestions(q, limit=limit))


@router.get("/filters", summary="Available filter values")
async def filters(engine: SearchEngine = Depends(get_search_engine)) -> dict[str, Any]:
    return engine.get_filters()


@router.get("/item/{record_id}", response_model=RecordResponse, summary="Look up a record by id")
async def get_item(record_id: str, engine: SearchEngine = Depends(get_search_engine)) -> RecordResponse:
    record = engine.get_item(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail=f"No item found with ID: {record_id}")
    return RecordResponse(data=record.to_dict())


def _require_query(query: str) -> str:
    query = (query or "").strip()
    if not query:
        raise HTTPException(status_code=400, detail="Query parameter is required")
    return query


def _paginate(
    results: SearchResults,
    engine: SearchEngine,
    page: int,
    page_size: int,
    sort: str = "relevance",
) -> SearchPage:
    payload = results.to_dict()
    items = payload["results"]
    if sort in _SORT_KEYS:
        key, reverse = _SORT_KEYS[sort]
        items.sort(key=key, reverse=reverse)
    start = (page - 1) * page_size
    return SearchPage(
        results=items[start : start + page_size],
        pagination=Pagination(
            page=page,
            limit=page_size,
            total=payload["total"],
            pages=math.ceil(payload["total"] / page_size),
        ),
        query=payload["query"],
        filters=payload["filters"],
        suggestions=payload["suggestions"],
        sort=sort,
        last_updated=engine.last_updated,
    )


__all__ = ["router"]

"""Record browsing, statistics and refresh routes."""

from __future__ import annotations

import math
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query

from govsearch.api.dependencies import get_app_settings, get_pipeline, get_search_engine
from govsearch.core.config import Settings
from govsearch.ingest.pipeline import IndexingPipeline
from govsearch.models.dto import Pagination, RecordListResponse, RecordResponse, RefreshResponse
from govsearch.models.records import Category
from govsearch.search import SearchEngine

router = APIRouter()

_COLLECTIONS = {
    "datasets": Category.DATASET,
    "apis": Category.API,
    "documents": Category.DOCUMENT,
}


@router.get("/stats", summary="Record counts and breakdowns")
async def stats(engine: SearchEngine = Depends(get_search_engine)) -> dict[str, Any]:
    return engine.get_stats()


@router.post("/refresh", response_model=RefreshResponse, summary="Re-fetch every source and rebuild the index")
async def refresh(pipeline: IndexingPipeline = Depends(get_pipeline)) -> RefreshResponse:
    stats = await pipeline.refresh()
    return RefreshResponse(message="Data refresh completed successfully", data=stats)


@router.get("/{collection}", response_model=RecordListResponse, summary="List records in a collection")
async def list_records(
    collection: str,
    limit: int = Query(50, ge=1),
    page: int = Query(1, ge=1),
    source: str | None = None,
    type: str | None = None,
    engine: SearchEngine = Depends(get_search_engine),
    settings: Settings = Depends(get_app_settings),
) -> RecordListResponse:
    records = engine.list_records(_category(collection))
    if source:
        needle = source.lower()
        records = [record for record in records if needle in record.source.lower()]
    if type:
        records = [record for record in records if record.type == type]
    page_size = min(limit, settings.search_max_limit)
    start = (page - 1) * page_size
    return RecordListResponse(
        items=[record.to_dict() for record in records[start : start + page_size]],
        pagination=Pagination(
            page=page,
            limit=page_size,
            total=len(records),
            pages=math.ceil(len(records) / page_size),
        ),
    )


@router.get("/{collection}/{record_id}", response_model=RecordResponse, summary="Fetch one record")
async def get_record(
    collection: str,
    record_id: str,
    engine: SearchEngine = Depends(get_search_engine),
) -> RecordResponse:
    for record in engine.list_records(_category(collection)):
        if record.id == record_id:
            return RecordResponse(data=record.to_dict())
    raise HTTPException(status_code=404, detail=f"No record found with ID: {record_id}")


def _category(collection: str) -> str:
    category = _COLLECTIONS.get(collection)
    if category is None:
        raise HTTPException(status_code=404, detail=f"Unknown collection: {collection}")
    return category


__all__ = ["router"]

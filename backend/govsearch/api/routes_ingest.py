"""Ingest API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from govsearch.api.dependencies import get_pipeline
from govsearch.ingest.pipeline import IndexingPipeline
from govsearch.models.dto import CrawlRequest, CrawlResponse, RecordResponse, RecordSubmitRequest, UrlSubmitRequest
from govsearch.models.records import InvalidRecordError

router = APIRouter()


@router.post("/record", response_model=RecordResponse, summary="Add a fully formed record")
async def submit_record(
    request: RecordSubmitRequest,
    pipeline: IndexingPipeline = Depends(get_pipeline),
) -> RecordResponse:
    try:
        record = await pipeline.submit_record(request.model_dump(exclude_none=True))
    except InvalidRecordError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return RecordResponse(data=record.to_dict())


@router.post("/url", response_model=RecordResponse, summary="Add a link to an external resource")
async def submit_url(
    request: UrlSubmitRequest,
    pipeline: IndexingPipeline = Depends(get_pipeline),
) -> RecordResponse:
    payload = request.model_dump()
    payload["url"] = str(request.url)
    try:
        record = await pipeline.submit_record(payload)
    except InvalidRecordError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return RecordResponse(data=record.to_dict())


@router.post("/crawl", response_model=CrawlResponse, summary="Crawl a website into documents and sections")
async def crawl(
    request: CrawlRequest,
    pipeline: IndexingPipeline = Depends(get_pipeline),
) -> CrawlResponse:
    stats = await pipeline.crawl_url(
        str(request.url),
        source=request.source,
        tags=request.tags,
        max_depth=request.max_depth,
    )
    return CrawlResponse(stats=stats.to_dict(), index=pipeline.engine.get_stats())


__all__ = ["router"]

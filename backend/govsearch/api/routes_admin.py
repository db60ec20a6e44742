"""Administrative routes for govsearch."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from govsearch.api.dependencies import get_search_engine, get_store
from govsearch.core.metrics import metrics_response
from govsearch.db.memory import RecordStore
from govsearch.search import SearchEngine
from govsearch.utils.time import utc_now

router = APIRouter()


@router.get("/api/health", summary="Liveness and index status")
async def health(
    engine: SearchEngine = Depends(get_search_engine),
    store: RecordStore = Depends(get_store),
) -> dict[str, Any]:
    return {
        "status": "OK",
        "timestamp": utc_now(),
        "index_ready": engine.is_ready,
        "last_updated": engine.last_updated,
        "visited_urls": store.visited_count,
    }


@router.get("/metrics", summary="Prometheus metrics")
async def get_metrics():
    return metrics_response()


__all__ = ["router"]

"""FastAPI application setup for govsearch."""

from __future__ import annotations

import asyncio
import contextlib
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from govsearch.api.dependencies import get_app_settings, get_pipeline, get_search_engine, get_store
from govsearch.api.routes_admin import router as admin_router
from govsearch.api.routes_data import router as data_router
from govsearch.api.routes_ingest import router as ingest_router
from govsearch.api.routes_search import router as search_router
from govsearch.core.logging import configure_logging, get_logger
from govsearch.core.metrics import REQUEST_COUNT, REQUEST_LATENCY
from govsearch.ingest.pipeline import IndexingPipeline

configure_logging()
logger = get_logger(__name__)

app = FastAPI(
    title="govsearch",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_app_settings().cors_origins,
    allow_credentials=True,
    allow_methods=['*'],
    allow_headers=['*'],
)

app.include_router(search_router, prefix="/api/search", tags=["search"])
app.include_router(data_router, prefix="/api/data", tags=["data"])
app.include_router(ingest_router, prefix="/api/ingest", tags=["ingest"])
app.include_router(admin_router, prefix="", tags=["admin"])

_refresh_task: asyncio.Task | None = None


@app.middleware("http")
async def record_request_metrics(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    route = request.scope.get("route")
    endpoint = getattr(route, "path", request.url.path)
    REQUEST_COUNT.labels(endpoint=endpoint, method=request.method, status=str(response.status_code)).inc()
    REQUEST_LATENCY.labels(endpoint=endpoint, method=request.method).observe(time.perf_counter() - started)
    return response


async def refresh_periodically(pipeline: IndexingPipeline, interval_hours: float) -> None:
    """Re-run every fetch and crawl job until cancelled."""
    while True:
        await asyncio.sleep(interval_hours * 3600)
        logger.info("Starting scheduled data refresh")
        try:
            await pipeline.refresh()
        except Exception:  # noqa: BLE001
            logger.exception("Scheduled data refresh failed")


@app.on_event("startup")
async def startup() -> None:
    """Warm up core singletons and build the initial index."""
    global _refresh_task
    settings = get_app_settings()
    get_store()
    get_search_engine()
    pipeline = get_pipeline()
    if settings.index_on_startup:
        await pipeline.initialize()
    if settings.refresh_interval_hours > 0:
        _refresh_task = asyncio.create_task(refresh_periodically(pipeline, settings.refresh_interval_hours))


@app.on_event("shutdown")
async def shutdown() -> None:
    global _refresh_task
    if _refresh_task is not None:
        _refresh_task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await _refresh_task
        _refresh_task = None

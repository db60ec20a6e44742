"""Shared FastAPI dependencies."""

from __future__ import annotations

from functools import lru_cache

from govsearch.core.config import Settings, get_settings
from govsearch.db.memory import RecordStore
from govsearch.ingest.pipeline import IndexingPipeline
from govsearch.search import SearchEngine

_STORE: RecordStore | None = None
_ENGINE: SearchEngine | None = None
_PIPELINE: IndexingPipeline | None = None


@lru_cache(maxsize=1)
def get_app_settings() -> Settings:
    return get_settings()


def get_store() -> RecordStore:
    global _STORE
    if _STORE is None:
        _STORE = RecordStore()
    return _STORE


def get_search_engine() -> SearchEngine:
    global _ENGINE
    if _ENGINE is None:
        _ENGINE = SearchEngine(get_app_settings())
    return _ENGINE


def get_pipeline() -> IndexingPipeline:
    global _PIPELINE
    if _PIPELINE is None:
        _PIPELINE = IndexingPipeline(
            store=get_store(),
            engine=get_search_engine(),
            settings=get_app_settings(),
        )
    return _PIPELINE


__all__ = [
    "get_app_settings",
    "get_store",
    "get_search_engine",
    "get_pipeline",
]

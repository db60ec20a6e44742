"""Test fixtures for govsearch."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest

BACKEND_ROOT = Path(__file__).resolve().parents[1]
if str(BACKEND_ROOT) not in sys.path:
    sys.path.insert(0, str(BACKEND_ROOT))

os.environ.setdefault("GOVS_INDEX_ON_STARTUP", "false")
os.environ.setdefault("GOVS_REFRESH_INTERVAL_HOURS", "0")


@pytest.fixture(autouse=True)
def reset_state(monkeypatch: pytest.MonkeyPatch) -> None:
    """Reset global singletons and environment between tests."""
    monkeypatch.setenv("GOVS_INDEX_ON_STARTUP", "false")
    monkeypatch.setenv("GOVS_REFRESH_INTERVAL_HOURS", "0")
    monkeypatch.setenv("GOVS_CRAWL_DELAY", "0")
    monkeypatch.delenv("GOVS_CONFIG", raising=False)

    from govsearch.api import dependencies as deps
    from govsearch.core.config import get_settings

    get_settings.cache_clear()
    deps.get_app_settings.cache_clear()
    deps._STORE = None
    deps._ENGINE = None
    deps._PIPELINE = None
    yield
    get_settings.cache_clear()
    deps.get_app_settings.cache_clear()
    deps._STORE = None
    deps._ENGINE = None
    deps._PIPELINE = None


@pytest.fixture
def settings():
    from govsearch.core.config import Settings

    return Settings(crawl_delay=0, refresh_interval_hours=0, index_on_startup=False)


@pytest.fixture
def sample_records():
    from govsearch.models.records import ApiRecord, CustomRecord, DatasetRecord, DocumentRecord, SectionRecord

    return {
        "datasets": [
            DatasetRecord(
                id="abs-codelist-lga-2021",
                title="ABS Local Government Areas 2021 Codelist",
                description="Australian Bureau of Statistics Local Government Areas classification for 2021",
                source="Australian Bureau of Statistics",
                type="codelist",
                tags=["abs", "local-government", "geography"],
            ),
            DatasetRecord(
                id="adelaide-schools",
                title="Adelaide School Enrolments",
                description="Education enrolment counts for schools in adelaide",
                source="SA Department for Education",
                type="csv",
                tags=["education", "adelaide", "schools"],
            ),
        ],
        "apis": [
            ApiRecord(
                id="abs-dataflow-api",
                title="ABS Data API - All Dataflows",
                description="Complete list of available dataflows from the Australian Bureau of Statistics Data API",
                source="Australian Bureau of Statistics",
                type="api",
                tags=["abs", "api", "dataflow", "statistics"],
            ),
        ],
        "documents": [
            DocumentRecord(
                id="https-example-gov-au",
                title="Employment Outlook",
                description="Labour market reports",
                content="Employment projections by industry and region.",
                source="DEWR",
                type="website",
                url="https://example.gov.au/",
                tags=["employment"],
            ),
        ],
        "sections": [
            SectionRecord(
                id="https-example-gov-au-perth-housing",
                title="Perth Housing",
                content="Housing approvals across perth suburbs.",
                source="DEWR",
                type="section",
                url="https://example.gov.au/#perth-housing",
                tags=["perth", "housing"],
                level=2,
                path=["Employment Outlook"],
                parent_url="https://example.gov.au/",
                parent_title="Employment Outlook",
            ),
        ],
        "custom": [
            CustomRecord(
                id="bike-paths",
                title="Bike Path Network",
                description="Cycling routes maintained by council",
                source="City Council",
                type="file",
                tags=["transport"],
            ),
        ],
    }

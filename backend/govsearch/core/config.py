"""Application configuration handling."""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, Field, field_validator

ENV_PREFIX = "GOVS_"
DEFAULT_CONFIG_PATH = Path("~/.config/govsearch/config.yaml")

_YAML_KEY_MAP: Mapping[tuple[str, ...], str] = {
    ("http", "user_agent"): "user_agent",
    ("http", "fetch_timeout"): "fetch_timeout",
    ("http", "crawl_timeout"): "crawl_timeout",
    ("http", "cors_origins"): "cors_origins",
    ("crawl", "max_depth"): "crawl_max_depth",
    ("crawl", "delay"): "crawl_delay",
    ("crawl", "max_links_per_page"): "max_links_per_page",
    ("crawl", "sources"): "crawl_sources",
    ("content", "section_limit"): "section_content_limit",
    ("content", "document_limit"): "document_content_limit",
    ("search", "default_limit"): "search_default_limit",
    ("search", "max_limit"): "search_max_limit",
    ("search", "fuzzy_threshold"): "fuzzy_threshold",
    ("search", "min_match_length"): "min_match_length",
    ("refresh", "interval_hours"): "refresh_interval_hours",
    ("refresh", "on_startup"): "index_on_startup",
    ("apis", "sources"): "api_sources",
}

_ABS_CODELIST_URL = "https://data.api.abs.gov.au/rest/codelist/abs/CL_LGA_2021"
_ABS_DATAFLOW_URL = "https://data.api.abs.gov.au/rest/dataflow/all?detail=allstubs"
_ABS_OPENAPI_URL = (
    "https://raw.githubusercontent.com/apigovau/api-descriptions/gh-pages/abs/DataAPI.openapi.yaml"
)


class ApiSourceConfig(BaseModel):
    """A single API endpoint fetched into one record per indexing run."""

    id: str
    title: str
    description: str = ""
    source: str
    type: str
    category: str = "dataset"
    url: str
    tags: list[str] = Field(default_factory=list)
    accept: str | None = "application/json"


class CrawlSourceConfig(BaseModel):
    """A website seed crawled into documents and sections."""

    url: str
    source: str
    tags: list[str] = Field(default_factory=list)
    max_depth: int | None = Field(default=None, ge=1)


def _default_api_sources() -> list[ApiSourceConfig]:
    abs_label = "Australian Bureau of Statistics"
    return [
        ApiSourceConfig(
            id="abs-codelist-lga-2021",
            title="ABS Local Government Areas 2021 Codelist",
            description="Australian Bureau of Statistics Local Government Areas classification for 2021",
            source=abs_label,
            type="codelist",
            category="dataset",
            url=_ABS_CODELIST_URL,
            tags=["abs", "local-government", "geography", "classification"],
        ),
        ApiSourceConfig(
            id="abs-dataflow-api",
            title="ABS Data API - All Dataflows",
            description="Complete list of available dataflows from the Australian Bureau of Statistics Data API",
            source=abs_label,
            type="api",
            category="api",
            url=_ABS_DATAFLOW_URL,
            tags=["abs", "api", "dataflow", "statistics"],
        ),
        ApiSourceConfig(
            id="abs-openapi-spec",
            title="ABS Data API OpenAPI Specification",
            description="Technical documentation and API specification for the ABS Data API",
            source=abs_label,
            type="documentation",
            category="document",
            url=_ABS_OPENAPI_URL,
            tags=["abs", "api", "documentation", "openapi", "specification"],
            accept=None,
        ),
    ]


def _default_crawl_sources() -> list[CrawlSourceConfig]:
    return [
        CrawlSourceConfig(
            url="https://www.dewr.gov.au/",
            source="Department of Employment and Workplace Relations",
            tags=["dewr", "employment", "workplace-relations", "government"],
            max_depth=2,
        ),
        CrawlSourceConfig(
            url="https://www.ato.gov.au/about-ato/research-and-statistics",
            source="Australian Taxation Office",
            tags=["ato", "taxation", "research", "statistics", "government"],
            max_depth=2,
        ),
        CrawlSourceConfig(
            url=(
                "https://www.abs.gov.au/AUSSTATS/abs@.nsf/allprimarymainfeatures/"
                "A7FFA19FF6239724CA257F65002272E1?opendocument"
            ),
            source="Australian Bureau of Statistics",
            tags=["abs", "statistics", "data", "government", "census"],
            max_depth=2,
        ),
    ]


class Settings(BaseModel):
    """Runtime configuration loaded from YAML file and environment variables."""

    user_agent: str = "Mozilla/5.0 (compatible; GovHack-Crawler/1.0)"
    fetch_timeout: float = 10.0
    crawl_timeout: float = 15.0
    crawl_max_depth: int = Field(default=3, ge=1)
    crawl_delay: float = Field(default=1.0, ge=0.0)
    max_links_per_page: int = Field(default=5, ge=0)
    section_content_limit: int = 1000
    document_content_limit: int = 10000
    search_default_limit: int = 50
    search_max_limit: int = 100
    fuzzy_threshold: float = Field(default=0.4, ge=0.0, le=1.0)
    min_match_length: int = 2
    refresh_interval_hours: float = 6.0
    index_on_startup: bool = True
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:3000"])
    api_sources: list[ApiSourceConfig] = Field(default_factory=_default_api_sources)
    crawl_sources: list[CrawlSourceConfig] = Field(default_factory=_default_crawl_sources)

    model_config = {
        "validate_assignment": True,
        "extra": "ignore",
    }

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _split_origins(cls, value: Any) -> Any:
        if isinstance(value, str):
            return [origin.strip() for origin in value.split(",") if origin.strip()]
        return value

    @classmethod
    def from_yaml(cls, path: Path | None = None) -> "Settings":
        """Load YAML config and overlay env vars; fall back to defaults."""
        config_path = cls._resolve_config_path(path)
        data: dict[str, Any] = {}
        if config_path and config_path.exists():
            with config_path.open("r", encoding="utf-8") as fh:
                raw = yaml.safe_load(fh) or {}
            data.update(_flatten_yaml(raw))
        data.update(_load_env_overrides())
        return cls(**data)

    @staticmethod
    def _resolve_config_path(path: Path | None) -> Path | None:
        if path is not None:
            return path.expanduser()
        env_path = os.environ.get(f"{ENV_PREFIX}CONFIG")
        if env_path:
            return Path(env_path).expanduser()
        resolved_default = DEFAULT_CONFIG_PATH.expanduser()
        return resolved_default if resolved_default.exists() else None


def _flatten_yaml(raw: Mapping[str, Any], prefix: tuple[str, ...] = ()) -> dict[str, Any]:
    """Flatten nested YAML configuration to Settings field names."""
    flat: dict[str, Any] = {}
    for key, value in raw.items():
        next_prefix = prefix + (key,)
        mapped_key = _YAML_KEY_MAP.get(next_prefix)
        if mapped_key:
            flat[mapped_key] = value
        elif isinstance(value, Mapping):
            flat.update(_flatten_yaml(value, prefix=next_prefix))
        elif key in Settings.model_fields:
            flat[key] = value
    return flat


def _load_env_overrides() -> dict[str, Any]:
    """Map environment variables with GOVS_ prefix into Settings fields."""
    overrides: dict[str, Any] = {}
    for key, value in os.environ.items():
        if not key.startswith(ENV_PREFIX):
            continue
        field_name = key[len(ENV_PREFIX) :].lower()
        if field_name in {"api_sources", "crawl_sources"}:
            continue
        if field_name in Settings.model_fields:
            overrides[field_name] = value
    return overrides


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings accessor for dependency injection."""
    return Settings.from_yaml()


__all__ = ["Settings", "ApiSourceConfig", "CrawlSourceConfig", "get_settings"]

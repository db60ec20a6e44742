"""Configuration loading tests."""

from pathlib import Path

import pytest

from govsearch.core.config import Settings


def test_defaults() -> None:
    settings = Settings()
    assert settings.crawl_max_depth == 3
    assert settings.max_links_per_page == 5
    assert settings.search_max_limit == 100
    assert [source.id for source in settings.api_sources] == [
        "abs-codelist-lga-2021",
        "abs-dataflow-api",
        "abs-openapi-spec",
    ]
    assert all(source.max_depth == 2 for source in settings.crawl_sources)


def test_yaml_and_env_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config = tmp_path / "config.yaml"
    config.write_text(
        "crawl:\n"
        "  max_depth: 4\n"
        "  sources:\n"
        "    - url: https://site.example/\n"
        "      source: Site\n"
        "search:\n"
        "  fuzzy_threshold: 0.3\n"
        "http:\n"
        "  cors_origins: http://a.example, http://b.example\n"
    )
    monkeypatch.setenv("GOVS_CONFIG", str(config))
    monkeypatch.setenv("GOVS_MAX_LINKS_PER_PAGE", "2")

    settings = Settings.from_yaml()
    assert settings.crawl_max_depth == 4
    assert settings.fuzzy_threshold == 0.3
    assert settings.max_links_per_page == 2
    assert settings.cors_origins == ["http://a.example", "http://b.example"]
    [source] = settings.crawl_sources
    assert source.url == "https://site.example/"
    assert source.max_depth is None
    assert settings.index_on_startup is False

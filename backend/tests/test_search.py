"""Search engine behaviour tests."""

from __future__ import annotations

import pytest

from govsearch.models.records import DatasetRecord, SectionRecord
from govsearch.search import SearchEngine, Strategy, analyze_query
from govsearch.search.analysis import generate_search_suggestions
from govsearch.search.ranking import StrategyHit, context_score, merge_hits, relevance_score


@pytest.fixture
def engine(settings, sample_records) -> SearchEngine:
    engine = SearchEngine(settings)
    assert engine.build_index(**sample_records)
    return engine


def test_search_before_index_built(settings) -> None:
    engine = SearchEngine(settings)
    assert engine.search("health").to_dict()["results"] == []


def test_empty_query_returns_empty_results(engine: SearchEngine) -> None:
    payload = engine.search("").to_dict()
    assert payload["results"] == []
    assert payload["total"] == 0
    assert engine.search("   ").total == 0


def test_local_government_finds_codelist(engine: SearchEngine) -> None:
    results = engine.search("local government")
    top = results.results[0]
    assert top.record.id == "abs-codelist-lga-2021"
    assert top.search_type in (Strategy.EXACT, Strategy.FUZZY)
    payload = results.to_dict()["results"][0]
    assert payload["id"] == "abs-codelist-lga-2021"
    assert payload["category"] == "dataset"
    assert payload["query_analysis"]["gov_levels"] == ["local"]


def test_specific_query_prefers_matching_section(engine: SearchEngine) -> None:
    results = engine.search("housing in perth")
    top = results.results[0]
    assert top.record.id == "https-example-gov-au-perth-housing"
    assert top.search_type is Strategy.SEMANTIC
    assert top.context_score == 21


def test_results_sorted_by_relevance(engine: SearchEngine) -> None:
    scores = [result.relevance_score for result in engine.search("abs").results]
    assert scores == sorted(scores, reverse=True)
    assert all(score >= 0 for score in scores)


def test_results_are_deduplicated(engine: SearchEngine) -> None:
    results = engine.search("education adelaide schools").results
    keys = [result.record.dedup_key for result in results]
    assert len(keys) == len(set(keys))


def test_topic_only_query_suggests_location(engine: SearchEngine) -> None:
    suggestions = engine.search("education").suggestions
    assert any("in adelaide" in suggestion for suggestion in suggestions)


def test_location_only_query_suggests_topic() -> None:
    suggestions = generate_search_suggestions(analyze_query("sydney"), [])
    assert suggestions == ['Try adding a topic: "education sydney"']


def test_filters_restrict_results(engine: SearchEngine) -> None:
    results = engine.search("abs", category="api")
    assert results.results
    assert all(result.record.category == "api" for result in results.results)
    assert results.filters == {"category": "api"}
    assert engine.search("abs", source="Nobody").results == []


def test_limit_applies(engine: SearchEngine) -> None:
    assert engine.search("abs", limit=1).total == 1


def test_exact_hit_survives_fuzzy_duplicate() -> None:
    record = DatasetRecord(id="lga", title="Local Government Areas")
    analysis = analyze_query("local government")
    fuzzy = StrategyHit(record=record, strategy=Strategy.FUZZY, similarity=0.95)
    exact = StrategyHit(record=record, strategy=Strategy.EXACT, similarity=0.9)

    for ordering in ([exact, fuzzy], [fuzzy, exact]):
        [merged] = merge_hits(ordering, analysis)
        assert merged.strategy is Strategy.EXACT


def test_partial_never_replaces() -> None:
    record = DatasetRecord(id="lga", title="Local Government Areas")
    analysis = analyze_query("local")
    fuzzy = StrategyHit(record=record, strategy=Strategy.FUZZY, similarity=0.7)
    partial = StrategyHit(record=record, strategy=Strategy.PARTIAL, similarity=1.0)
    [merged] = merge_hits([fuzzy, partial], analysis)
    assert merged.strategy is Strategy.FUZZY


def test_strategy_bonus_is_monotonic() -> None:
    record = DatasetRecord(id="x", title="X")
    analysis = analyze_query("x")
    scores = [
        relevance_score(StrategyHit(record=record, strategy=strategy, similarity=0.8), analysis)
        for strategy in (Strategy.SEMANTIC, Strategy.EXACT, Strategy.FUZZY, Strategy.PARTIAL)
    ]
    assert scores == sorted(scores, reverse=True)
    assert len(set(scores)) == 4


def test_context_score_weights(sample_records) -> None:
    [section] = sample_records["sections"]
    dataset = sample_records["datasets"][1]
    assert context_score(dataset, analyze_query("education in adelaide")) == 18
    assert context_score(section, analyze_query("housing in perth")) == 21
    assert context_score(section, analyze_query("tourism")) == 3
    assert context_score(dataset, analyze_query("tourism")) == 0


def test_every_section_gets_context_bonus(engine: SearchEngine) -> None:
    section = SectionRecord(id="s", title="Contact us", content="Phone numbers.")
    assert context_score(section, analyze_query("education")) == 3

    hits = {result.record.id: result for result in engine.search("education").results}
    housing = hits["https-example-gov-au-perth-housing"]
    assert housing.search_type is Strategy.SEMANTIC
    assert housing.context_score == 3
    assert housing.relevance_score < hits["adelaide-schools"].relevance_score


def test_quoted_query_matches_exactly(engine: SearchEngine) -> None:
    results = engine.search('"local government"')
    assert results.query == '"local government"'
    assert results.results[0].record.id == "abs-codelist-lga-2021"
    assert results.results[0].search_type is Strategy.EXACT
    assert engine.search('""').total == 0


def test_failed_rebuild_keeps_previous_index(engine: SearchEngine) -> None:
    before = engine.last_updated
    assert engine.build_index(datasets=["not a record"], apis=[], documents=[], sections=[]) is False
    assert engine.last_updated == before
    assert engine.search("local government").results


def test_stats_and_filters(engine: SearchEngine) -> None:
    stats = engine.get_stats()
    assert stats["datasets"] == 2
    assert stats["apis"] == 1
    assert stats["documents"] == 1
    assert stats["sections"] == 1
    assert stats["custom"] == 1
    assert stats["total"] == 5
    assert stats["breakdown"]["sources"]["Australian Bureau of Statistics"] == 2
    assert stats["breakdown"]["top_tags"]["abs"] == 2
    assert stats["last_updated"] is not None

    filters = engine.get_filters()
    assert set(filters["categories"]) == {"dataset", "api", "document", "custom"}
    assert "codelist" in filters["types"]


def test_get_item(engine: SearchEngine) -> None:
    assert engine.get_item("bike-paths").title == "Bike Path Network"
    assert engine.get_item("https-example-gov-au-perth-housing") is None
    assert engine.get_item("missing") is None


def test_autocomplete(engine: SearchEngine) -> None:
    assert "adelaide" in engine.autocomplete("adel")
    assert engine.autocomplete("a") == []


def test_semantic_suggestions(engine: SearchEngine) -> None:
    suggestions = engine.semantic_suggestions("housing")
    assert "Perth Housing" in [item["text"] for item in suggestions]
    relevances = [item["relevance"] for item in suggestions]
    assert relevances == sorted(relevances, reverse=True)
    assert engine.semantic_suggestions("h") == []

"""Tests for the weighted fuzzy index."""

import pytest

from govsearch.models.records import DatasetRecord, DocumentRecord
from govsearch.search.fuzzy_index import FuzzyIndex, IndexBuildError


def _records():
    return [
        DatasetRecord(id="housing", title="Housing Report", description="Quarterly approvals"),
        DocumentRecord(id="outlook", title="Labour Outlook", content="Projections for housing and jobs"),
        DatasetRecord(id="jobs", title="Employment Outlook", description="Labour market data"),
    ]


def test_exact_phrase_reports_positions() -> None:
    index = FuzzyIndex(_records())
    hits = index.search('"labour market"')
    assert [hit.record.id for hit in hits] == ["jobs"]
    [match] = hits[0].matches
    assert match.key == "description"
    assert match.indices == [(0, 13)]
    assert match.similarity == 1.0


def test_fuzzy_tolerates_typos() -> None:
    index = FuzzyIndex(_records())
    hits = index.search("emplyment")
    assert hits
    assert hits[0].record.id == "jobs"
    assert 0.0 < hits[0].similarity <= 1.0


def test_title_hit_outranks_content_hit() -> None:
    index = FuzzyIndex(_records())
    ids = [hit.record.id for hit in index.search("housing")]
    assert ids.index("housing") < ids.index("outlook")


def test_unrelated_pattern_and_short_pattern() -> None:
    index = FuzzyIndex(_records())
    assert index.search("xqzj") == []
    assert index.search("h") == []
    assert index.search('"zzz unknown phrase"') == []


def test_rejects_non_records() -> None:
    with pytest.raises(IndexBuildError):
        FuzzyIndex([{"title": "not a record"}])


def test_len_and_records() -> None:
    index = FuzzyIndex(_records())
    assert len(index) == 3
    assert [record.id for record in index.records] == ["housing", "outlook", "jobs"]

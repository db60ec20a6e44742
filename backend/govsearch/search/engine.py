"""Multi-strategy search over the published record snapshot."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Sequence

from govsearch.core.config import Settings
from govsearch.core.logging import get_logger
from govsearch.core.metrics import INDEX_SIZE, SEARCH_LATENCY
from govsearch.db.memory import RecordSnapshot, RecordStore
from govsearch.models.records import (
    ApiRecord,
    Category,
    CustomRecord,
    DatasetRecord,
    DocumentRecord,
    Record,
    SectionRecord,
)
from govsearch.search.analysis import QueryAnalysis, analyze_query, generate_search_suggestions
from govsearch.search.fuzzy_index import FieldMatch, FuzzyIndex, IndexBuildError
from govsearch.search.ranking import Strategy, StrategyHit, context_hits, merge_hits
from govsearch.utils.time import utc_now

logger = get_logger(__name__)

TOP_TAG_COUNT = 20
FILTER_TAG_COUNT = 50
MIN_SUGGESTION_QUERY = 2
PARTIAL_WORD_MIN_LENGTH = 3


@dataclass(slots=True)
class SearchResult:
    record: Record
    search_type: Strategy
    match_score: float
    relevance_score: float
    context_score: int = 0
    matches: list[FieldMatch] = field(default_factory=list)

    @classmethod
    def from_hit(cls, hit: StrategyHit) -> "SearchResult":
        return cls(
            record=hit.record,
            search_type=hit.strategy,
            match_score=hit.similarity,
            relevance_score=hit.relevance_score,
            context_score=hit.context_score,
            matches=list(hit.matches),
        )

    def to_dict(self, analysis: QueryAnalysis | None = None) -> dict[str, Any]:
        payload = self.record.to_dict()
        payload.update(
            {
                "match_score": self.match_score,
                "relevance_score": self.relevance_score,
                "context_score": self.context_score,
                "matches": [match.to_dict() for match in self.matches],
                "search_type": self.search_type.value,
            }
        )
        if analysis is not None:
            payload["query_analysis"] = analysis.to_dict()
        return payload


@dataclass(slots=True)
class SearchResults:
    query: str
    results: list[SearchResult] = field(default_factory=list)
    filters: dict[str, Any] = field(default_factory=dict)
    analysis: QueryAnalysis | None = None
    suggestions: list[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    def to_dict(self) -> dict[str, Any]:
        return {
            "results": [result.to_dict(self.analysis) for result in self.results],
            "total": self.total,
            "query": self.query,
            "filters": dict(self.filters),
            "suggestions": list(self.suggestions),
        }


@dataclass(slots=True, frozen=True)
class IndexSnapshot:
    records: RecordSnapshot
    index: FuzzyIndex
    built_at: datetime


class SearchEngine:
    """Builds the fuzzy index and answers queries with four retrieval strategies.

    Each rebuild constructs a complete :class:`IndexSnapshot` before publishing
    it with a single assignment, so queries never see a half-built index and a
    failed rebuild leaves the previous snapshot serving.
    """

    def __init__(self, settings: Settings) -> None:
        self.settings = settings
        self._snapshot: IndexSnapshot | None = None

    @property
    def is_ready(self) -> bool:
        return self._snapshot is not None

    @property
    def last_updated(self) -> datetime | None:
        return self._snapshot.built_at if self._snapshot else None

    # Indexing ---------------------------------------------------------

    def build_index(
        self,
        datasets: Iterable[DatasetRecord],
        apis: Iterable[ApiRecord],
        documents: Iterable[DocumentRecord],
        sections: Iterable[SectionRecord],
        custom: Iterable[CustomRecord] = (),
    ) -> bool:
        records = RecordSnapshot(
            datasets=tuple(datasets),
            apis=tuple(apis),
            documents=tuple(documents),
            sections=tuple(sections),
            custom=tuple(custom),
        )
        try:
            index = FuzzyIndex(
                records.all_records(),
                threshold=self.settings.fuzzy_threshold,
                min_match_length=self.settings.min_match_length,
            )
        except IndexBuildError as exc:
            logger.error("Index rebuild aborted, keeping previous index: %s", exc)
            return False

        self._snapshot = IndexSnapshot(records=records, index=index, built_at=utc_now())
        for category, items in records.by_category().items():
            INDEX_SIZE.labels(category=category).set(len(items))
        logger.info(
            "Search index built with %s items (%s sections)",
            len(index),
            len(records.sections),
        )
        return True

    def build_from_store(self, store: RecordStore) -> bool:
        snapshot = store.snapshot()
        return self.build_index(
            snapshot.datasets,
            snapshot.apis,
            snapshot.documents,
            snapshot.sections,
            snapshot.custom,
        )

    # Querying ---------------------------------------------------------

    def search(
        self,
        query: str,
        limit: int | None = None,
        category: str | None = None,
        source: str | None = None,
        record_type: str | None = None,
    ) -> SearchResults:
        filters = {
            key: value
            for key, value in (("category", category), ("source", source), ("type", record_type))
            if value
        }
        snapshot = self._snapshot
        if snapshot is None or not query or not query.strip():
            return SearchResults(query=query or "", filters=filters)

        query = query.strip()
        # Quotes are added back for the exact strategy.
        term = query.strip('"').strip()
        if not term:
            return SearchResults(query=query, filters=filters)
        limit = limit or self.settings.search_default_limit
        analysis = analyze_query(term)

        hits: list[StrategyHit] = []
        if analysis.has_context:
            with SEARCH_LATENCY.labels(strategy=Strategy.SEMANTIC.value).time():
                hits.extend(context_hits(snapshot.records.all_records(), analysis))
        with SEARCH_LATENCY.labels(strategy=Strategy.EXACT.value).time():
            hits.extend(StrategyHit.from_index(hit, Strategy.EXACT) for hit in snapshot.index.search(f'"{term}"'))
        with SEARCH_LATENCY.labels(strategy=Strategy.FUZZY.value).time():
            hits.extend(StrategyHit.from_index(hit, Strategy.FUZZY) for hit in snapshot.index.search(term))
        with SEARCH_LATENCY.labels(strategy=Strategy.PARTIAL.value).time():
            for word in analysis.words:
                if len(word) >= PARTIAL_WORD_MIN_LENGTH:
                    hits.extend(StrategyHit.from_index(hit, Strategy.PARTIAL) for hit in snapshot.index.search(word))

        merged = merge_hits(hits, analysis)
        if category:
            merged = [hit for hit in merged if hit.record.category == category]
        if source:
            merged = [hit for hit in merged if hit.record.source == source]
        if record_type:
            merged = [hit for hit in merged if hit.record.type == record_type]
        merged.sort(key=lambda hit: hit.relevance_score, reverse=True)
        merged = merged[:limit]

        return SearchResults(
            query=query,
            results=[SearchResult.from_hit(hit) for hit in merged],
            filters=filters,
            analysis=analysis,
            suggestions=generate_search_suggestions(analysis, (hit.record for hit in merged)),
        )

    def autocomplete(self, query: str, limit: int = 10) -> list[str]:
        """Title words and tags from matching records that contain the query."""
        needle = (query or "").strip().lower()
        if len(needle) < MIN_SUGGESTION_QUERY:
            return []
        suggestions: list[str] = []
        for result in self.search(needle, limit=limit).results:
            candidates = [word for word in result.record.title.lower().split() if len(word) > 2]
            candidates.extend(result.record.tags)
            for candidate in candidates:
                if needle in candidate.lower() and candidate not in suggestions:
                    suggestions.append(candidate)
        return suggestions[:limit]

    def semantic_suggestions(self, query: str, limit: int = 10) -> list[dict[str, Any]]:
        """Title, tag and section suggestions ranked by relevance."""
        needle = (query or "").strip().lower()
        snapshot = self._snapshot
        if len(needle) < MIN_SUGGESTION_QUERY or snapshot is None:
            return []

        suggestions: list[dict[str, Any]] = []
        seen: set[str] = set()

        def add(text: str, kind: str, relevance: float, context: str, path: Sequence[str]) -> None:
            key = text.lower()
            if key in seen:
                return
            seen.add(key)
            suggestions.append(
                {"text": text, "type": kind, "relevance": relevance, "context": context, "section_path": list(path)}
            )

        for result in self.search(needle, limit=limit * 2).results:
            record = result.record
            add(record.title, "semantic", result.match_score, _preview(record.description), [record.source])
            for tag in record.tags:
                if needle in tag:
                    add(tag, "tag", 0.7, f"Found in {record.title}", [record.source])

        for section in snapshot.records.sections:
            if needle in section.title.lower() or needle in section.content.lower():
                add(section.title, "section", 0.9, _preview(section.content), section.path)

        suggestions.sort(key=lambda item: item["relevance"], reverse=True)
        return suggestions[:limit]

    # Browsing ---------------------------------------------------------

    def list_records(self, category: str) -> list[Record]:
        if self._snapshot is None:
            return []
        return list(self._snapshot.records.by_category().get(category, ()))

    def get_item(self, record_id: str) -> Record | None:
        for category in (Category.DATASET, Category.API, Category.DOCUMENT, Category.CUSTOM):
            for record in self.list_records(category):
                if record.id == record_id:
                    return record
        return None

    def get_stats(self) -> dict[str, Any]:
        counts = {category: len(self.list_records(category)) for category in Category.ALL}
        browsable = [
            record
            for category in (Category.DATASET, Category.API, Category.DOCUMENT, Category.CUSTOM)
            for record in self.list_records(category)
        ]
        tag_counts = Counter(tag for record in browsable for tag in record.tags)
        return {
            "datasets": counts[Category.DATASET],
            "apis": counts[Category.API],
            "documents": counts[Category.DOCUMENT],
            "sections": counts[Category.SECTION],
            "custom": counts[Category.CUSTOM],
            "total": len(browsable),
            "last_updated": self.last_updated,
            "breakdown": {
                "sources": dict(Counter(record.source for record in browsable)),
                "types": dict(Counter(record.type for record in browsable)),
                "top_tags": dict(tag_counts.most_common(TOP_TAG_COUNT)),
            },
        }

    def get_filters(self) -> dict[str, Any]:
        browsable = [
            record
            for category in (Category.DATASET, Category.API, Category.DOCUMENT, Category.CUSTOM)
            for record in self.list_records(category)
        ]
        return {
            "categories": _unique(record.category for record in browsable),
            "sources": _unique(record.source for record in browsable),
            "types": _unique(record.type for record in browsable),
            "tags": _unique(tag for record in browsable for tag in record.tags)[:FILTER_TAG_COUNT],
            "stats": self.get_stats(),
        }


def _preview(text: str, length: int = 100) -> str:
    return f"{text[:length]}..." if text else ""


def _unique(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(value for value in values if value))


__all__ = ["SearchEngine", "SearchResult", "SearchResults", "IndexSnapshot"]

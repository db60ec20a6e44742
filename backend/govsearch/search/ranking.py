"""Strategy hits, context scoring and composite relevance."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Sequence

from govsearch.models.records import Category, Record
from govsearch.search.analysis import QueryAnalysis
from govsearch.search.fuzzy_index import FieldMatch, IndexHit

BASE_SCORE = 100.0
LOCATION_WEIGHT = 10
TOPIC_WEIGHT = 8
GOV_LEVEL_WEIGHT = 5
SECTION_CONTEXT_BONUS = 3
SPECIFIC_SECTION_BONUS = 20


class Strategy(str, Enum):
    SEMANTIC = "semantic"
    EXACT = "exact"
    FUZZY = "fuzzy"
    PARTIAL = "partial"


STRATEGY_BONUS: dict[Strategy, float] = {
    Strategy.SEMANTIC: 50.0,
    Strategy.EXACT: 40.0,
    Strategy.FUZZY: 20.0,
    Strategy.PARTIAL: 10.0,
}

# Lower value wins when the same record is hit by several strategies.
_PRIORITY: dict[Strategy, int] = {
    Strategy.SEMANTIC: 0,
    Strategy.EXACT: 1,
    Strategy.FUZZY: 2,
    Strategy.PARTIAL: 3,
}


@dataclass(slots=True)
class StrategyHit:
    record: Record
    strategy: Strategy
    similarity: float
    matches: list[FieldMatch] = field(default_factory=list)
    context_score: int = 0
    relevance_score: float = 0.0

    @classmethod
    def from_index(cls, hit: IndexHit, strategy: Strategy) -> "StrategyHit":
        return cls(record=hit.record, strategy=strategy, similarity=hit.similarity, matches=hit.matches)


def context_score(record: Record, analysis: QueryAnalysis) -> int:
    """Score a record against the locations, topics and government levels in the query."""
    tags = set(record.tags)
    text = record.context_text()

    def weigh(terms: Sequence[str], weight: int) -> int:
        return sum(weight for term in terms if term in tags or term in text)

    score = (
        weigh(analysis.locations, LOCATION_WEIGHT)
        + weigh(analysis.topics, TOPIC_WEIGHT)
        + weigh(analysis.gov_levels, GOV_LEVEL_WEIGHT)
    )
    if record.category == Category.SECTION:
        score += SECTION_CONTEXT_BONUS
    return score


def context_hits(records: Iterable[Record], analysis: QueryAnalysis) -> list[StrategyHit]:
    """Semantic strategy: every record with a non-zero context score, best first.

    The similarity ``1 - 1 / (score + 1)`` keeps context hits on the same
    higher-is-better scale as index hits.
    """
    hits: list[StrategyHit] = []
    for record in records:
        score = context_score(record, analysis)
        if score > 0:
            hits.append(
                StrategyHit(
                    record=record,
                    strategy=Strategy.SEMANTIC,
                    similarity=1.0 - 1.0 / (score + 1),
                    context_score=score,
                )
            )
    hits.sort(key=lambda hit: hit.context_score, reverse=True)
    return hits


def relevance_score(hit: StrategyHit, analysis: QueryAnalysis) -> float:
    score = BASE_SCORE + STRATEGY_BONUS[hit.strategy]
    score -= (1.0 - hit.similarity) * 100.0
    score += hit.context_score
    if analysis.is_specific and hit.record.category == Category.SECTION:
        score += SPECIFIC_SECTION_BONUS
    return max(0.0, score)


def should_replace(existing: StrategyHit, incoming: StrategyHit) -> bool:
    if incoming.strategy is Strategy.SEMANTIC:
        return True
    if incoming.strategy is Strategy.PARTIAL:
        return False
    if _PRIORITY[incoming.strategy] != _PRIORITY[existing.strategy]:
        return _PRIORITY[incoming.strategy] < _PRIORITY[existing.strategy]
    return incoming.similarity > existing.similarity


def merge_hits(hits: Iterable[StrategyHit], analysis: QueryAnalysis) -> list[StrategyHit]:
    """Deduplicate by category-qualified id, scoring each surviving hit."""
    merged: dict[str, StrategyHit] = {}
    for hit in hits:
        key = hit.record.dedup_key
        existing = merged.get(key)
        if existing is None or should_replace(existing, hit):
            hit.relevance_score = relevance_score(hit, analysis)
            merged[key] = hit
    return list(merged.values())


__all__ = [
    "Strategy",
    "StrategyHit",
    "STRATEGY_BONUS",
    "context_score",
    "context_hits",
    "relevance_score",
    "should_replace",
    "merge_hits",
]

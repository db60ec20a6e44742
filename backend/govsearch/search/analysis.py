"""Query analysis and follow-up suggestions."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable

from govsearch.ingest.vocabulary import GOV_LEVELS, LOCATIONS, TOPICS, find_terms
from govsearch.models.records import Record

RELATED_TOPIC_COUNT = 3


@dataclass(slots=True)
class QueryAnalysis:
    original_query: str
    words: list[str] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)
    topics: list[str] = field(default_factory=list)
    gov_levels: list[str] = field(default_factory=list)

    @property
    def has_context(self) -> bool:
        return bool(self.locations or self.topics)

    @property
    def is_specific(self) -> bool:
        return bool(self.locations and self.topics)

    def to_dict(self) -> dict[str, Any]:
        return {
            "original_query": self.original_query,
            "words": list(self.words),
            "locations": list(self.locations),
            "topics": list(self.topics),
            "gov_levels": list(self.gov_levels),
            "has_context": self.has_context,
            "is_specific": self.is_specific,
        }


def analyze_query(query: str) -> QueryAnalysis:
    lowered = query.lower()
    return QueryAnalysis(
        original_query=query,
        words=lowered.split(),
        locations=find_terms(lowered, LOCATIONS),
        topics=find_terms(lowered, TOPICS),
        gov_levels=find_terms(lowered, GOV_LEVELS),
    )


def generate_search_suggestions(analysis: QueryAnalysis, records: Iterable[Record]) -> list[str]:
    """Suggest the missing half of a location/topic pair plus a few related tags."""
    suggestions: list[str] = []
    if analysis.topics and not analysis.locations:
        suggestions.append(f'Try adding a location: "{analysis.original_query} in {LOCATIONS[0]}"')
    if analysis.locations and not analysis.topics:
        suggestions.append(f'Try adding a topic: "{TOPICS[0]} {analysis.original_query}"')

    related: list[str] = []
    for record in records:
        for tag in record.tags:
            if tag not in related:
                related.append(tag)
        if len(related) >= RELATED_TOPIC_COUNT:
            break
    if related:
        suggestions.append(f"Related topics: {', '.join(related[:RELATED_TOPIC_COUNT])}")
    return suggestions


__all__ = ["QueryAnalysis", "analyze_query", "generate_search_suggestions"]

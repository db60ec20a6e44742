"""Weighted multi-field fuzzy index."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Sequence

from rapidfuzz import fuzz

from govsearch.models.records import Record

# (field, weight); weights are normalised to sum to one.
DEFAULT_FIELDS: tuple[tuple[str, float], ...] = (
    ("title", 0.3),
    ("content", 0.25),
    ("description", 0.2),
    ("tags", 0.15),
    ("source", 0.05),
    ("type", 0.03),
    ("category", 0.02),
)

_EPSILON = 0.001


class IndexBuildError(Exception):
    """Raised when records cannot be indexed."""


@dataclass(slots=True)
class FieldMatch:
    key: str
    value: str
    indices: list[tuple[int, int]]
    similarity: float

    def to_dict(self) -> dict[str, object]:
        return {
            "key": self.key,
            "value": self.value,
            "indices": [list(span) for span in self.indices],
            "similarity": self.similarity,
        }


@dataclass(slots=True)
class IndexHit:
    """A record matched by the index; ``similarity`` is in [0, 1], higher is better."""

    record: Record
    similarity: float
    matches: list[FieldMatch] = field(default_factory=list)


@dataclass(slots=True)
class _Entry:
    record: Record
    fields: list[tuple[str, float, list[str]]]


class FuzzyIndex:
    """Fuzzy and exact-phrase matching across weighted record fields.

    Matching is unanchored: a field matches when some window of it is within
    ``threshold`` distance of the pattern. Patterns wrapped in double quotes
    switch to exact substring matching. Per-field similarities are combined the
    way Fuse-style indexes do it: the product of ``distance ** weight`` over the
    matched fields gives the record distance, so hits on heavier fields and hits
    on several fields both rank higher.
    """

    def __init__(
        self,
        records: Iterable[Record],
        fields: Sequence[tuple[str, float]] = DEFAULT_FIELDS,
        threshold: float = 0.4,
        min_match_length: int = 2,
    ) -> None:
        total_weight = sum(weight for _, weight in fields)
        if total_weight <= 0:
            raise IndexBuildError("Field weights must sum to a positive value")
        self.fields = [(name, weight / total_weight) for name, weight in fields]
        self.threshold = threshold
        self.min_match_length = min_match_length
        self._entries = [self._make_entry(record) for record in records]

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def records(self) -> list[Record]:
        return [entry.record for entry in self._entries]

    def search(self, pattern: str) -> list[IndexHit]:
        """Return hits sorted best first; quoted patterns match exactly."""
        pattern = pattern.strip()
        exact = len(pattern) >= 2 and pattern.startswith('"') and pattern.endswith('"')
        term = (pattern[1:-1] if exact else pattern).strip().lower()
        if len(term) < self.min_match_length:
            return []

        hits: list[IndexHit] = []
        for entry in self._entries:
            matches: list[FieldMatch] = []
            distance = 1.0
            for key, weight, values in entry.fields:
                field_matches = [
                    match
                    for match in (self._match_value(key, value, term, exact) for value in values)
                    if match is not None
                ]
                if not field_matches:
                    continue
                best = max(match.similarity for match in field_matches)
                distance *= max(1.0 - best, _EPSILON) ** weight
                matches.extend(field_matches)
            if matches:
                hits.append(IndexHit(record=entry.record, similarity=1.0 - distance, matches=matches))
        hits.sort(key=lambda hit: hit.similarity, reverse=True)
        return hits

    # ------------------------------------------------------------------

    def _make_entry(self, record: Record) -> _Entry:
        if not isinstance(record, Record):
            raise IndexBuildError(f"Cannot index object of type {type(record).__name__}")
        fields: list[tuple[str, float, list[str]]] = []
        for key, weight in self.fields:
            raw = getattr(record, key, None)
            if raw is None:
                continue
            values = [str(item) for item in raw] if isinstance(raw, (list, tuple)) else [str(raw)]
            values = [value for value in values if value]
            if values:
                fields.append((key, weight, values))
        return _Entry(record=record, fields=fields)

    def _match_value(self, key: str, value: str, term: str, exact: bool) -> FieldMatch | None:
        lowered = value.lower()
        if exact:
            indices = _find_all(lowered, term)
            if not indices:
                return None
            return FieldMatch(key=key, value=value, indices=indices, similarity=1.0)

        cutoff = (1.0 - self.threshold) * 100
        if len(lowered) < len(term):
            # A value shorter than the pattern must match as a whole.
            score = fuzz.ratio(term, lowered, score_cutoff=cutoff)
            if not score:
                return None
            return FieldMatch(key=key, value=value, indices=[(0, len(value))], similarity=score / 100.0)
        alignment = fuzz.partial_ratio_alignment(term, lowered, score_cutoff=cutoff)
        if alignment is None:
            return None
        return FieldMatch(
            key=key,
            value=value,
            indices=[(alignment.dest_start, alignment.dest_end)],
            similarity=alignment.score / 100.0,
        )


def _find_all(haystack: str, needle: str) -> list[tuple[int, int]]:
    spans: list[tuple[int, int]] = []
    start = haystack.find(needle)
    while start != -1:
        spans.append((start, start + len(needle)))
        start = haystack.find(needle, start + len(needle))
    return spans


__all__ = ["FuzzyIndex", "IndexHit", "FieldMatch", "IndexBuildError", "DEFAULT_FIELDS"]

"""In-memory record store shared by the indexing pipeline and the search engine."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

from govsearch.models.records import (
    ApiRecord,
    Category,
    CustomRecord,
    DatasetRecord,
    DocumentRecord,
    Record,
    SectionRecord,
)


@dataclass(slots=True, frozen=True)
class RecordSnapshot:
    """Immutable view of the store at one point in time."""

    datasets: tuple[DatasetRecord, ...]
    apis: tuple[ApiRecord, ...]
    documents: tuple[DocumentRecord, ...]
    sections: tuple[SectionRecord, ...]
    custom: tuple[CustomRecord, ...]

    def all_records(self) -> tuple[Record, ...]:
        return (*self.datasets, *self.apis, *self.documents, *self.sections, *self.custom)

    def by_category(self) -> dict[str, tuple[Record, ...]]:
        return {
            Category.DATASET: self.datasets,
            Category.API: self.apis,
            Category.DOCUMENT: self.documents,
            Category.SECTION: self.sections,
            Category.CUSTOM: self.custom,
        }


class RecordStore:
    """Owns every record collection and the per-run visited-URL set.

    Only the indexing pipeline writes to the store. Fetched and crawled records
    are cleared on refresh; submitted records live in their own list and survive
    refreshes.
    """

    def __init__(self) -> None:
        self._fetched: dict[str, list[Record]] = {
            Category.DATASET: [],
            Category.API: [],
            Category.DOCUMENT: [],
            Category.SECTION: [],
        }
        self._submitted: list[Record] = []
        self._visited: set[str] = set()

    # Visited URLs -----------------------------------------------------

    def mark_visited(self, url: str) -> bool:
        """Record ``url`` as visited; return False if it already was."""
        if url in self._visited:
            return False
        self._visited.add(url)
        return True

    def is_visited(self, url: str) -> bool:
        return url in self._visited

    @property
    def visited_count(self) -> int:
        return len(self._visited)

    def reset_visited(self) -> None:
        self._visited.clear()

    # Records ----------------------------------------------------------

    def add(self, record: Record) -> None:
        if isinstance(record, CustomRecord):
            raise TypeError("Custom records must be added with add_submitted()")
        self._fetched[record.category].append(record)

    def add_submitted(self, record: Record) -> None:
        if isinstance(record, SectionRecord):
            raise TypeError("Sections cannot be submitted directly")
        self._submitted.append(record)

    def clear_fetched(self) -> None:
        for collection in self._fetched.values():
            collection.clear()
        self._visited.clear()

    def has_id(self, category: str, record_id: str) -> bool:
        return any(record.id == record_id for record in self.iter_category(category))

    def count(self, category: str) -> int:
        return sum(1 for _ in self.iter_category(category))

    def iter_category(self, category: str) -> Iterator[Record]:
        yield from self._fetched.get(category, [])
        for record in self._submitted:
            if record.category == category:
                yield record

    def snapshot(self) -> RecordSnapshot:
        return RecordSnapshot(
            datasets=tuple(self.iter_category(Category.DATASET)),
            apis=tuple(self.iter_category(Category.API)),
            documents=tuple(self.iter_category(Category.DOCUMENT)),
            sections=tuple(self.iter_category(Category.SECTION)),
            custom=tuple(self.iter_category(Category.CUSTOM)),
        )


__all__ = ["RecordStore", "RecordSnapshot"]

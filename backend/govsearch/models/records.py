"""Indexable record types.

Every record shares the :class:`Record` base; the concrete subclass decides the
category it is indexed under, so merge and dedup logic never has to guess a
record's kind from its shape.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any, ClassVar, Mapping

from govsearch.utils.ids import new_id, slugify
from govsearch.utils.text import normalize_tags
from govsearch.utils.time import utc_now


class Category:
    DATASET = "dataset"
    API = "api"
    DOCUMENT = "document"
    SECTION = "section"
    CUSTOM = "custom"

    ALL = (DATASET, API, DOCUMENT, SECTION, CUSTOM)


class InvalidRecordError(ValueError):
    """Raised when a submitted payload cannot be turned into a record."""


@dataclass(slots=True, kw_only=True)
class Record:
    category: ClassVar[str] = Category.CUSTOM

    id: str
    title: str
    description: str = ""
    content: str = ""
    source: str = ""
    type: str = ""
    url: str | None = None
    tags: list[str] = field(default_factory=list)
    last_updated: datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        self.tags = normalize_tags(self.tags)

    @property
    def dedup_key(self) -> str:
        return f"{self.category}:{self.id or self.title}"

    def body(self) -> str:
        """Content if present, else description."""
        return self.content or self.description

    def context_text(self) -> str:
        return f"{self.title} {self.body()}".lower()

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["category"] = self.category
        return payload


@dataclass(slots=True, kw_only=True)
class DatasetRecord(Record):
    category: ClassVar[str] = Category.DATASET


@dataclass(slots=True, kw_only=True)
class ApiRecord(Record):
    category: ClassVar[str] = Category.API


@dataclass(slots=True)
class SectionSummary:
    """A heading-delimited section as it appears inside its page."""

    id: str
    title: str
    content: str
    level: int
    path: list[str]
    tags: list[str]
    url: str


@dataclass(slots=True, kw_only=True)
class DocumentRecord(Record):
    category: ClassVar[str] = Category.DOCUMENT

    sections: list[SectionSummary] = field(default_factory=list)


@dataclass(slots=True, kw_only=True)
class SectionRecord(Record):
    category: ClassVar[str] = Category.SECTION

    level: int = 1
    path: list[str] = field(default_factory=list)
    parent_url: str = ""
    parent_title: str = ""


@dataclass(slots=True, kw_only=True)
class CustomRecord(Record):
    category: ClassVar[str] = Category.CUSTOM


_SUBMITTABLE: Mapping[str, type[Record]] = {
    Category.DATASET: DatasetRecord,
    Category.API: ApiRecord,
    Category.DOCUMENT: DocumentRecord,
    Category.CUSTOM: CustomRecord,
}


def record_from_payload(payload: Mapping[str, Any]) -> Record:
    """Build a record from externally submitted data.

    ``category`` defaults to ``custom``; sections cannot be submitted directly
    because they only exist as children of a crawled document. A missing ``id``
    is derived from the URL or title.
    """
    category = (payload.get("category") or Category.CUSTOM).strip()
    record_cls = _SUBMITTABLE.get(category)
    if record_cls is None:
        raise InvalidRecordError(f"Unsupported category: {category}")
    title = (payload.get("title") or "").strip()
    if not title:
        raise InvalidRecordError("Record title is required")

    tags = payload.get("tags") or []
    if isinstance(tags, str):
        tags = tags.split(",")

    url = payload.get("url") or None
    record_id = payload.get("id") or slugify(url or title) or new_id(Category.CUSTOM)
    return record_cls(
        id=record_id,
        title=title,
        description=(payload.get("description") or "").strip(),
        content=payload.get("content") or "",
        source=(payload.get("source") or "").strip(),
        type=(payload.get("type") or "file").strip(),
        url=url,
        tags=list(tags),
    )


__all__ = [
    "Category",
    "InvalidRecordError",
    "Record",
    "DatasetRecord",
    "ApiRecord",
    "DocumentRecord",
    "SectionRecord",
    "SectionSummary",
    "CustomRecord",
    "record_from_payload",
]

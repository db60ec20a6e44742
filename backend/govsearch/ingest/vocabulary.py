"""Fixed vocabularies used for context tagging and query analysis."""

from __future__ import annotations

LOCATIONS: tuple[str, ...] = (
    "adelaide",
    "melbourne",
    "sydney",
    "brisbane",
    "perth",
    "darwin",
    "hobart",
    "canberra",
)

TOPICS: tuple[str, ...] = (
    "education",
    "health",
    "employment",
    "housing",
    "transport",
    "environment",
    "economy",
    "tourism",
)

GOV_LEVELS: tuple[str, ...] = ("federal", "state", "local", "council")


def find_terms(text: str, vocabulary: tuple[str, ...]) -> list[str]:
    """Vocabulary terms occurring as substrings of the lower-cased text."""
    lowered = text.lower()
    return [term for term in vocabulary if term in lowered]


def extract_context_tags(title: str, content: str) -> list[str]:
    """Locations, then topics, then government levels found in a heading and its text."""
    text = f"{title} {content}"
    return find_terms(text, LOCATIONS) + find_terms(text, TOPICS) + find_terms(text, GOV_LEVELS)


__all__ = ["LOCATIONS", "TOPICS", "GOV_LEVELS", "find_terms", "extract_context_tags"]

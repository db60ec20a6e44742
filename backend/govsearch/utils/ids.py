"""ID helpers."""

from __future__ import annotations

import re
import uuid

_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")

SECTION_ANCHOR_LENGTH = 50


def slugify(text: str) -> str:
    """Lower-case ``text`` and collapse every non-alphanumeric run into one hyphen.

    ``"ABS Census 2021!"`` becomes ``"abs-census-2021"``. Applying it twice
    yields the same value.
    """
    return _NON_ALNUM_RE.sub("-", text.lower()).strip("-")


def section_anchor(heading: str) -> str:
    """Anchor fragment used for a heading within its page."""
    return slugify(heading)[:SECTION_ANCHOR_LENGTH]


def new_id(prefix: str | None = None) -> str:
    """Generate a random UUID4 string with optional prefix."""
    base = uuid.uuid4().hex
    return f"{prefix}-{base}" if prefix else base

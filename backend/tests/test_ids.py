"""Tests for id and text helpers."""

from govsearch.utils.ids import new_id, section_anchor, slugify
from govsearch.utils.text import normalize, normalize_tags, truncate


def test_slugify_collapses_non_alphanumeric_runs() -> None:
    assert slugify("ABS Census 2021!") == "abs-census-2021"
    assert slugify("https://www.abs.gov.au/census#data") == "https-www-abs-gov-au-census-data"


def test_slugify_is_idempotent() -> None:
    once = slugify("  Local Government -- Areas (2021) ")
    assert once == "local-government-areas-2021"
    assert slugify(once) == once


def test_section_anchor_truncates() -> None:
    heading = "A very long heading " * 10
    anchor = section_anchor(heading)
    assert len(anchor) == 50
    assert anchor.startswith("a-very-long-heading-a-very")


def test_new_id_prefix() -> None:
    value = new_id("custom")
    assert value.startswith("custom-")
    assert new_id("custom") != value


def test_text_helpers() -> None:
    assert normalize("  one\n\t two  ") == "one two"
    assert truncate("abcdef", 3) == "abc"
    assert truncate("abc", 10) == "abc"
    assert normalize_tags([" ABS", "abs", "", "Census "]) == ["abs", "census"]

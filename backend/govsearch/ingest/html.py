"""HTML page structure extraction."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, Sequence
from urllib.parse import urldefrag, urljoin, urlparse

from bs4 import BeautifulSoup, Tag

from govsearch.ingest.vocabulary import extract_context_tags
from govsearch.models.records import SectionSummary
from govsearch.utils.ids import section_anchor
from govsearch.utils.text import normalize, truncate

HEADING_RE = re.compile(r"^h([1-6])$")
DESCRIPTION_FALLBACK_LENGTH = 200
RELEVANT_URL_TERMS = ("data", "api", "statistics")

_TEXT_CONTAINERS = {"p", "div", "section"}
_LIST_CONTAINERS = {"ul", "ol"}


@dataclass(slots=True)
class ParsedPage:
    title: str
    description: str
    text: str
    sections: list[SectionSummary] = field(default_factory=list)
    links: list[str] = field(default_factory=list)


def parse_page(
    html: str,
    url: str,
    section_limit: int = 1000,
    text_limit: int = 10000,
) -> ParsedPage:
    """Extract title, description, heading sections and same-domain links."""
    soup = BeautifulSoup(html, "html.parser")
    for node in soup(["script", "style", "noscript"]):
        node.decompose()
    return ParsedPage(
        title=_page_title(soup),
        description=_page_description(soup),
        text=truncate(normalize(soup.get_text(" ")), text_limit),
        sections=extract_sections(soup, url, section_limit),
        links=extract_internal_links(soup, url),
    )


def heading_level(tag: Tag) -> int | None:
    match = HEADING_RE.match(tag.name or "")
    return int(match.group(1)) if match else None


def extract_sections(soup: BeautifulSoup, url: str, section_limit: int = 1000) -> list[SectionSummary]:
    """Walk every heading in document order and emit one section per non-empty heading."""
    sections: list[SectionSummary] = []
    for heading in soup.find_all(HEADING_RE):
        title = normalize(heading.get_text(" "))
        if not title:
            continue
        level = heading_level(heading)
        content = extract_section_content(heading, section_limit)
        anchor = section_anchor(title)
        sections.append(
            SectionSummary(
                id=anchor,
                title=title,
                content=content,
                level=level,
                path=section_path(sections, level),
                tags=extract_context_tags(title, content),
                url=f"{url}#{anchor}",
            )
        )
    return sections


def extract_section_content(heading: Tag, limit: int = 1000) -> str:
    """Text of the siblings after ``heading`` up to the next heading of equal or shallower level."""
    level = heading_level(heading)
    parts: list[str] = []
    for sibling in heading.find_next_siblings():
        sibling_level = heading_level(sibling)
        if sibling_level is not None and sibling_level <= level:
            break
        if sibling.name in _TEXT_CONTAINERS:
            parts.append(normalize(sibling.get_text(" ")))
        elif sibling.name in _LIST_CONTAINERS:
            parts.extend(normalize(item.get_text(" ")) for item in sibling.find_all("li"))
    return truncate(" ".join(part for part in parts if part).strip(), limit)


def section_path(previous: Sequence[SectionSummary], level: int) -> list[str]:
    """Ancestor heading titles, outermost first.

    Scans earlier sections backwards and keeps each one whose level is shallower
    than the running threshold. This follows heading levels, not DOM nesting, so
    irregular documents (an h3 straight after an h1) still get the h1 as parent.
    """
    path: list[str] = []
    threshold = level
    for section in reversed(previous):
        if section.level < threshold:
            path.insert(0, section.title)
            threshold = section.level
    return path


def extract_internal_links(soup: BeautifulSoup, base_url: str) -> list[str]:
    """Unique absolute links on the same host as ``base_url``, fragments removed."""
    base_host = urlparse(base_url).hostname
    seen: set[str] = set()
    links: list[str] = []
    for anchor in soup.find_all("a", href=True):
        href = anchor["href"].strip()
        if not href:
            continue
        try:
            absolute, _ = urldefrag(urljoin(base_url, href))
            parsed = urlparse(absolute)
            host = parsed.hostname
        except ValueError:
            continue
        if parsed.scheme not in ("http", "https") or host != base_host:
            continue
        if absolute not in seen:
            seen.add(absolute)
            links.append(absolute)
    return links


def filter_relevant_links(links: Iterable[str], tags: Sequence[str]) -> list[str]:
    """Links whose URL mentions a crawl tag or a data-ish term."""
    lowered_tags = [tag.lower() for tag in tags]
    relevant: list[str] = []
    for link in links:
        lowered = link.lower()
        if any(tag in lowered for tag in lowered_tags) or any(term in lowered for term in RELEVANT_URL_TERMS):
            relevant.append(link)
    return relevant


def _page_title(soup: BeautifulSoup) -> str:
    if soup.title is not None:
        title = normalize(soup.title.get_text(" "))
        if title:
            return title
    first_h1 = soup.find("h1")
    if first_h1 is not None:
        heading = normalize(first_h1.get_text(" "))
        if heading:
            return heading
    return "Untitled"


def _page_description(soup: BeautifulSoup) -> str:
    for attrs in ({"name": "description"}, {"property": "og:description"}):
        meta = soup.find("meta", attrs=attrs)
        if meta is not None:
            content = normalize(meta.get("content") or "")
            if content:
                return content
    first_paragraph = soup.find("p")
    if first_paragraph is not None:
        return normalize(first_paragraph.get_text(" "))[:DESCRIPTION_FALLBACK_LENGTH]
    return ""


__all__ = [
    "ParsedPage",
    "parse_page",
    "extract_sections",
    "extract_section_content",
    "section_path",
    "extract_internal_links",
    "filter_relevant_links",
]

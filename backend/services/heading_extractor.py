"""
City extraction from guide headings.

Two heading conventions are supported:

- Markdown: lines starting with ``##`` or ``###``; the rest of the line is the city.
- Day separator: HTML ``h2``-``h4`` elements reading "Day 1 – Tokyo" (or "Jour 1 – Tokyo");
  only the text after the en dash is the city.

The scanners here are shared with the renderer so a guide is always re-read
with the same rules that produced its stored enrichment.
"""
from __future__ import annotations

import re
from typing import Iterable, Iterator, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from domain.models import HeadingPattern

# Applied to one line at a time, as produced by split_lines().
MARKDOWN_HEADING_RE = re.compile(r"^(#{2,3})(?!#)[ \t]*(.+?)[ \t]*$")
DAY_HEADING_TAGS = ("h2", "h3", "h4")
DAY_SEPARATOR = "–"  # en dash, as in "Day 1 – Tokyo"


def _clean(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    cleaned = text.strip()
    return cleaned or None


def split_lines(content: str) -> List[str]:
    """Split on \\n, \\r\\n or a lone \\r only; other separators stay inside the line."""
    return (content or "").replace("\r\n", "\n").replace("\r", "\n").split("\n")


def parse_markdown_heading(line: str) -> Optional[Tuple[int, str]]:
    """Return (level, city) when the line is a level 2-3 markdown heading."""
    match = MARKDOWN_HEADING_RE.match(line)
    if not match:
        return None
    city = _clean(match.group(2))
    if not city:
        return None
    return len(match.group(1)), city


def iter_markdown_headings(content: str) -> Iterator[str]:
    for line in split_lines(content):
        heading = parse_markdown_heading(line)
        if heading:
            yield heading[1]


def city_from_day_heading(text: str) -> Optional[str]:
    """Take the part of "Day N – City" after the separator; None without one."""
    if DAY_SEPARATOR not in (text or ""):
        return None
    return _clean(text.split(DAY_SEPARATOR, 1)[1])


def parse_html(content: str) -> BeautifulSoup:
    return BeautifulSoup(content or "", "html.parser")


def iter_day_headings(soup: BeautifulSoup) -> Iterator[Tuple[Tag, str]]:
    """Yield (heading element, city) for every day heading in document order."""
    for heading in soup.find_all(DAY_HEADING_TAGS):
        city = city_from_day_heading(heading.get_text(" ", strip=True))
        if city:
            yield heading, city


def _unique(names: Iterable[str]) -> List[str]:
    seen = set()
    ordered: List[str] = []
    for name in names:
        if name in seen:
            continue
        seen.add(name)
        ordered.append(name)
    return ordered


def extract_cities(content: str, pattern: HeadingPattern = HeadingPattern.MARKDOWN) -> List[str]:
    """
    Return the cities named by the guide's headings.

    Names are trimmed, empty ones dropped, and duplicates removed keeping the
    first occurrence. A document without matching headings yields [].
    """
    if pattern == HeadingPattern.DAY_SEPARATOR:
        names = (city for _, city in iter_day_headings(parse_html(content)))
    else:
        names = iter_markdown_headings(content)
    return _unique(names)


def detect_heading_pattern(content: str) -> HeadingPattern:
    """Pick DAY_SEPARATOR for HTML guides with day headings, MARKDOWN otherwise."""
    if "<" not in (content or ""):
        return HeadingPattern.MARKDOWN
    soup = parse_html(content)
    for _ in iter_day_headings(soup):
        return HeadingPattern.DAY_SEPARATOR
    return HeadingPattern.MARKDOWN

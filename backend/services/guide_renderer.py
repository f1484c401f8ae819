"""
Guide page rendering.

A stored guide is first turned into a small document tree (headings with
their picture, text blocks, or pre-built HTML for HTML guides) and then
serialized by the Jinja2 template with autoescaping on. City names and
document text never reach the markup or the map script unescaped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from jinja2 import Environment, FileSystemLoader, select_autoescape

from domain.models import GuideRecord, HeadingPattern
from services.heading_extractor import iter_day_headings, parse_html, parse_markdown_heading, split_lines

logger = logging.getLogger(__name__)

BASE_DIR = Path(__file__).resolve().parents[1]
TEMPLATE_DIR = BASE_DIR / "templates"
GUIDE_TEMPLATE = "guide.html"
NO_MAP_MESSAGE = "No geographic data available for this guide."

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


@dataclass
class HeadingNode:
    level: int
    text: str
    image_url: Optional[str] = None
    kind: str = "heading"


@dataclass
class TextNode:
    text: str
    kind: str = "text"


@dataclass
class HtmlNode:
    """Markup of an HTML guide, already carrying its inserted images."""
    markup: str
    kind: str = "html"


Node = Union[HeadingNode, TextNode, HtmlNode]


@dataclass
class GuideDocument:
    guide_id: str
    nodes: List[Node] = field(default_factory=list)
    map_points: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def has_map(self) -> bool:
        return bool(self.map_points)


def _markdown_nodes(content: str, city_images: Dict[str, str]) -> List[Node]:
    nodes: List[Node] = []
    paragraph: List[str] = []

    def flush() -> None:
        if paragraph:
            nodes.append(TextNode(text="\n".join(paragraph)))
            paragraph.clear()

    for line in split_lines(content):
        heading = parse_markdown_heading(line)
        if heading:
            flush()
            level, city = heading
            nodes.append(HeadingNode(level=level, text=city, image_url=city_images.get(city)))
        elif line.strip():
            paragraph.append(line.rstrip())
        else:
            flush()
    flush()
    return nodes


def _day_separator_nodes(content: str, city_images: Dict[str, str]) -> List[Node]:
    soup = parse_html(content)
    for heading, city in list(iter_day_headings(soup)):
        image_url = city_images.get(city)
        if not image_url:
            continue
        img = soup.new_tag("img", attrs={"src": image_url, "alt": f"Image of {city}", "class": "city-image"})
        heading.insert_after(img)
    root = soup.body or soup
    return [HtmlNode(markup=root.decode_contents())]


def build_guide_document(record: GuideRecord) -> GuideDocument:
    """Build the document tree for a stored guide using its write-time heading pattern."""
    if record.heading_pattern == HeadingPattern.DAY_SEPARATOR:
        nodes = _day_separator_nodes(record.content, record.city_images)
    else:
        nodes = _markdown_nodes(record.content, record.city_images)
    return GuideDocument(
        guide_id=record.id,
        nodes=nodes,
        map_points=[c.to_dict() for c in record.coordinates],
    )


def render_guide_page(record: GuideRecord) -> str:
    """Render a stored guide as a self-contained HTML page."""
    document = build_guide_document(record)
    template = _env.get_template(GUIDE_TEMPLATE)
    html = template.render(document=document, no_map_message=NO_MAP_MESSAGE)
    logger.debug(
        "Rendered guide %s: %d nodes, %d map points",
        record.id,
        len(document.nodes),
        len(document.map_points),
    )
    return html

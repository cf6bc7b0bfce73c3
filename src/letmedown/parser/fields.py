"""Field resolution and field type inference."""

import logging
import re
from typing import Callable, Iterable

from ..model import FieldData
from .html import LIST_TAGS, parse_fragment, strip_tags
from .markers import REGULAR, first_paragraph, scan_fields, strip_field_markers

logger = logging.getLogger(__name__)

HEADING_LINE = re.compile(r'^#+\s+', re.MULTILINE)

Renderer = Callable[[str], str]


def _image_data(img) -> dict:
    return {"src": img.get("src", ""), "alt": img.get("alt", "")}


def _link_data(anchor) -> dict:
    return {"href": anchor.get("href", ""), "text": anchor.get_text().strip()}


def classify_field(markdown: str, html: str) -> tuple[str, object]:
    """
    Infer a field's type and structured data. First match wins:

    - a markdown heading line -> ``heading``
    - one or more lists -> ``list`` (one record per item, with its own links/images)
    - images -> ``image`` / ``images``
    - links -> ``link`` / ``links``
    - anything else -> ``text``
    """
    if HEADING_LINE.search(markdown):
        return "heading", {}

    soup = parse_fragment(html)

    list_nodes = soup.find_all(list(LIST_TAGS))
    if list_nodes:
        items = []
        seen: set[int] = set()
        for list_node in list_nodes:
            for li in list_node.find_all("li"):
                # Nested lists are found twice, once through their parent list
                if id(li) in seen:
                    continue
                seen.add(id(li))
                items.append({
                    "text": li.get_text().strip(),
                    "html": li.decode_contents().strip(),
                    "links": [_link_data(a) for a in li.find_all("a", href=True)],
                    "images": [_image_data(img) for img in li.find_all("img")],
                })
        return "list", items

    images = [_image_data(img) for img in soup.find_all("img")]
    if images:
        if len(images) > 1:
            return "images", images
        return "image", images[0]

    links = [_link_data(a) for a in soup.find_all("a", href=True)]
    if links:
        if len(links) > 1:
            return "links", links
        return "link", links[0]

    return "text", {}


def build_field(name: str, markdown: str, render: Renderer) -> FieldData:
    """Render a field's markdown and classify it."""
    html = render(markdown).strip()
    field_type, data = classify_field(markdown, html)
    return FieldData(
        name=name,
        markdown=markdown,
        html=html,
        text=strip_tags(html).strip(),
        type=field_type,
        data=data,
    )


def _collect_fields(markdown: str, render: Renderer, fields: dict[str, FieldData]) -> None:
    for marker in scan_fields(markdown):
        if marker.name in fields:
            logger.debug("Field %r already set in this scope, skipping later occurrence", marker.name)
            continue

        content = strip_field_markers(marker.content(markdown)).strip()
        if marker.mode == REGULAR:
            content = first_paragraph(content)
        if not content:
            logger.debug("Dropping empty field %r", marker.name)
            continue

        fields[marker.name] = build_field(marker.name, content, render)


def parse_fields(markdown: str, render: Renderer) -> dict[str, FieldData]:
    """
    Resolve all fields in one scope.

    Only the first non-empty occurrence of each name is kept, so a field in
    a nested block cannot replace the same-named field of its parent.
    """
    fields: dict[str, FieldData] = {}
    _collect_fields(markdown, render, fields)
    return fields


def parse_segment_fields(segments: Iterable[str], render: Renderer) -> dict[str, FieldData]:
    """Resolve fields of one scope made of separate text segments.

    A field cannot reach across a segment boundary; first occurrence wins
    across all segments.
    """
    fields: dict[str, FieldData] = {}
    for segment in segments:
        _collect_fields(segment, render, fields)
    return fields

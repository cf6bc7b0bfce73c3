"""Extract paragraphs, images, links and lists from rendered nodes."""

import hashlib
import html as html_lib
import itertools
from dataclasses import dataclass, field

from bs4 import Tag

from ..model import ContentElement
from .html import (
    LIST_TAGS,
    find_all_or_self,
    html_to_text,
    is_heading,
    outermost,
    serialize,
    strip_tags,
)


@dataclass
class ExtractedContent:
    """Direct content of one block."""
    html: str = ""
    text: str = ""
    images: list[ContentElement] = field(default_factory=list)
    links: list[ContentElement] = field(default_factory=list)
    lists: list[ContentElement] = field(default_factory=list)
    paragraphs: list[ContentElement] = field(default_factory=list)


def _markup_hash(markup: str) -> str:
    return hashlib.md5(markup.encode('utf-8')).hexdigest()


class ContentExtractor:
    """
    Turns sibling nodes into deduplicated content elements.

    Every element gets a ``uid`` from this extractor's counter, so the same
    element can be recognized when block contents are aggregated upward.
    """

    def __init__(self):
        self._uids = itertools.count(1)

    def _element(self, text: str, html: str, data: dict) -> ContentElement:
        return ContentElement(text=text, html=html, data=data, uid=next(self._uids))

    def extract(self, nodes: list[Tag]) -> ExtractedContent:
        html_parts: list[str] = []
        result = ExtractedContent()

        seen_images: set[int] = set()
        seen_links: set[tuple[str, str]] = set()
        seen_lists: set[str] = set()
        seen_paragraphs: set[str] = set()

        for node in nodes:
            html_parts.append(serialize(node))

            # Headings belong to their own block
            if is_heading(node):
                continue

            for img in find_all_or_self(node, "img"):
                if id(img) in seen_images:
                    continue
                seen_images.add(id(img))
                src = img.get("src", "")
                alt = img.get("alt", "")
                result.images.append(self._element(
                    text=f"[{alt}]",
                    html=f'<img src="{html_lib.escape(src)}" alt="{html_lib.escape(alt)}">',
                    data={"src": src, "alt": alt},
                ))

            for anchor in find_all_or_self(node, "a"):
                if not anchor.has_attr("href"):
                    continue
                href = anchor["href"]
                link_html = serialize(anchor)
                link_text = anchor.get_text().strip()
                if (href, link_text) in seen_links:
                    continue
                seen_links.add((href, link_text))
                result.links.append(self._element(
                    text=link_text,
                    html=link_html,
                    data={"href": href},
                ))

            for list_node in outermost(node, LIST_TAGS):
                list_html = serialize(list_node)
                key = _markup_hash(list_html)
                if key in seen_lists:
                    continue
                seen_lists.add(key)
                items = [li.get_text().strip() for li in list_node.find_all("li")]
                result.lists.append(self._element(
                    text=strip_tags(list_html),
                    html=list_html,
                    data={"type": list_node.name, "items": items},
                ))

            for paragraph in find_all_or_self(node, "p"):
                p_html = serialize(paragraph)
                key = _markup_hash(p_html)
                if key in seen_paragraphs:
                    continue
                seen_paragraphs.add(key)
                result.paragraphs.append(self._element(
                    text=paragraph.get_text().strip(),
                    html=p_html,
                    data={},
                ))

        result.html = "".join(html_parts)
        result.text = html_to_text(result.html)
        return result

"""Build hierarchical block tree from rendered section HTML."""

import logging
import re
from typing import Callable, Optional

from bs4 import BeautifulSoup, Tag

from ..model import Block, FieldData, HeadingElement
from .extract import ContentExtractor
from .fields import parse_fields
from .html import (
    element_children,
    heading_level,
    html_to_text,
    is_heading,
    parse_fragment,
    raw_markup,
    serialize,
    strip_tags,
)
from .markers import strip_field_markers

logger = logging.getLogger(__name__)

ATX_HEADING = re.compile(r'^ {0,3}#{1,6}[ \t]+\S')
FENCE = re.compile(r'^ {0,3}(`{3,}|~{3,})')
SETEXT_UNDERLINE = re.compile(r'^ {0,3}(?:=+|-+)[ \t]*$')
# Lines that cannot be the text of a setext heading
NOT_SETEXT_TEXT = re.compile(r'^\s*(?:$|[-*+>]\s|\d+[.)]\s|<!--)')
LIST_ITEM = re.compile(r'^( {0,3}(?:[-*+]|\d{1,9}[.)]))(?:[ \t]+|$)')


def split_markdown_by_headings(
    markdown: str,
    render: Callable[[str], str],
) -> tuple[str, list[tuple[str, str]]]:
    """
    Split markdown at heading lines (ATX and single-line setext).

    Returns the text before the first heading and a list of
    (heading text, markdown up to the next heading) pairs. Heading text is
    taken from the rendered heading so it compares equal to the text of the
    rendered heading node. Lines inside fenced code are never headings, and
    neither are lines indented into the content of a list item.
    """
    preamble: list[str] = []
    blocks: list[tuple[str, list[str]]] = []
    fence: Optional[tuple[str, int]] = None
    # Content columns of the list items the current line may belong to
    list_indents: list[int] = []

    for line in markdown.split('\n'):
        nested = False
        if fence is None and line.strip():
            indent = len(line) - len(line.lstrip(' '))
            while list_indents and indent < list_indents[-1]:
                list_indents.pop()
            nested = bool(list_indents)
            item = LIST_ITEM.match(line)
            if item:
                list_indents.append(len(item.group(1)) + 1)

        fence_match = FENCE.match(line)
        if fence_match:
            marker = fence_match.group(1)
            if fence is None:
                fence = (marker[0], len(marker))
            elif marker[0] == fence[0] and len(marker) >= fence[1]:
                fence = None
        elif fence is None and not nested and ATX_HEADING.match(line):
            heading_html = render(strip_field_markers(line.strip()))
            blocks.append((strip_tags(heading_html).strip(), []))
            continue
        elif fence is None and not nested and SETEXT_UNDERLINE.match(line):
            bucket = blocks[-1][1] if blocks else preamble
            if bucket and not NOT_SETEXT_TEXT.match(bucket[-1]):
                text_line = bucket.pop()
                heading_html = render(strip_field_markers(text_line.strip()))
                blocks.append((strip_tags(heading_html).strip(), []))
                continue

        if blocks:
            blocks[-1][1].append(line)
        else:
            preamble.append(line)

    return '\n'.join(preamble), [(text, '\n'.join(lines)) for text, lines in blocks]


def _assemble(entries: list[tuple[int, Block]]) -> list[Block]:
    """
    Nest blocks by rank: each block becomes a child of the nearest
    preceding block with a lower rank.
    """
    roots: list[Block] = []
    stack: list[tuple[int, Block]] = []

    for rank, block in entries:
        while stack and stack[-1][0] >= rank:
            stack.pop()
        if stack:
            stack[-1][1].children.append(block)
        else:
            roots.append(block)
        stack.append((rank, block))

    return roots


def _aggregate(blocks: list[Block]) -> None:
    """Extend each block's html/text with its descendants' (synthetic blocks excepted)."""
    for block in blocks:
        if not block.children:
            continue
        _aggregate(block.children)
        if block.is_synthetic:
            continue
        block.html += ''.join(child.html for child in block.children)
        block.text += ''.join('\n' + child.text for child in block.children)


def flatten_tree(blocks: list[Block], depth: int = 0) -> list[tuple[Block, int]]:
    """
    Flatten tree back to list with indent depth.

    Returns list of (block, indent_depth) tuples.
    """
    result: list[tuple[Block, int]] = []
    for block in blocks:
        result.append((block, depth))
        result.extend(flatten_tree(block.children, depth + 1))
    return result


class BlockBuilder:
    """Converts a flat run of rendered nodes into nested heading blocks."""

    def __init__(self, render: Callable[[str], str], extractor: Optional[ContentExtractor] = None):
        self.render = render
        self.extractor = extractor or ContentExtractor()

    def build(self, html: str, markdown: Optional[str] = None) -> list[Block]:
        """
        Build the block tree for one section or subsection.

        Args:
            html: Rendered HTML of the section (markers already removed)
            markdown: Source markdown with field markers kept, used to
                resolve each block's fields

        Returns:
            Top-level blocks. When the first heading is below h1 the only
            root is a synthetic level-1 block with an empty heading. Content
            before a leading h1 belongs to no block.
        """
        soup = parse_fragment(html)
        nodes = element_children(soup)
        heading_positions = [i for i, node in enumerate(nodes) if is_heading(node)]

        if not heading_positions:
            if not nodes:
                return []
            return [self._block(HeadingElement(), 0, nodes, self._fields(markdown, soup))]

        if markdown is not None:
            preamble_md, markdown_blocks = split_markdown_by_headings(markdown, self.render)
        else:
            preamble_md, markdown_blocks = None, []

        first = heading_positions[0]
        preamble_nodes = nodes[:first]
        synthetic = heading_level(nodes[first]) > 1

        entries: list[tuple[int, Block]] = []
        if synthetic:
            preamble_fields = self._fields(preamble_md, soup, stop=nodes[first])
            entries.append((1, self._block(
                HeadingElement(), 1, preamble_nodes, preamble_fields,
            )))
        elif preamble_nodes:
            # Only the section keeps content ahead of a leading h1
            logger.debug("No block for %d node(s) before the first h1", len(preamble_nodes))

        cursor = 0
        for n, position in enumerate(heading_positions):
            end = heading_positions[n + 1] if n + 1 < len(heading_positions) else len(nodes)
            heading_node = nodes[position]
            content_nodes = nodes[position + 1:end]
            stop = nodes[end] if end < len(nodes) else None

            heading = HeadingElement.from_html(serialize(heading_node))
            block_markdown, cursor = self._match_markdown(heading.text, markdown_blocks, cursor)

            level = heading_level(heading_node)
            # Under a synthetic root every block sits one rank deeper
            rank = level + 1 if synthetic else level
            entries.append((rank, self._block(
                heading, level, content_nodes, self._fields(block_markdown, soup, heading_node, stop),
            )))

        roots = _assemble(entries)
        _aggregate(roots)
        return roots

    def _match_markdown(
        self,
        heading_text: str,
        markdown_blocks: list[tuple[str, str]],
        cursor: int,
    ) -> tuple[Optional[str], int]:
        """Find this heading's markdown slice at or after the cursor position."""
        for i in range(cursor, len(markdown_blocks)):
            if markdown_blocks[i][0] == heading_text:
                return markdown_blocks[i][1], i + 1
        if markdown_blocks:
            logger.debug("No markdown block for heading %r, scanning rendered HTML", heading_text)
        return None, cursor

    def _fields(
        self,
        markdown: Optional[str],
        soup: BeautifulSoup,
        start: Optional[Tag] = None,
        stop: Optional[Tag] = None,
    ) -> dict[str, FieldData]:
        """Resolve fields from the block markdown, else from the raw markup between start and stop."""
        if markdown is not None:
            return parse_fields(markdown, self.render)
        return parse_fields(raw_markup(soup, start, stop), self.render)

    def _block(
        self,
        heading: HeadingElement,
        level: int,
        nodes: list[Tag],
        fields: dict[str, FieldData],
    ) -> Block:
        extracted = self.extractor.extract(nodes)
        html = heading.html + extracted.html
        return Block(
            heading=heading,
            level=level,
            content=extracted.html,
            html=html,
            text=html_to_text(html),
            paragraphs=extracted.paragraphs,
            images=extracted.images,
            links=extracted.links,
            lists=extracted.lists,
            fields=fields,
        )

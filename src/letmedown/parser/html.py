"""Markdown rendering and HTML query helpers."""

import re
from typing import Iterable, Optional, Union

import mistune
from bs4 import BeautifulSoup, NavigableString, Tag

DEFAULT_PLUGINS = ("strikethrough", "table")

HEADING_TAGS = ("h1", "h2", "h3", "h4", "h5", "h6")
LIST_TAGS = ("ul", "ol")

# Followed by a blank line in plain text
TEXT_BLOCK_TAGS = ("p", "blockquote") + HEADING_TAGS + LIST_TAGS
# Whitespace directly inside these is layout, not content
_LAYOUT_PARENTS = ("[document]", "blockquote") + LIST_TAGS
_EXCESS_BREAKS = re.compile(r'\n{3,}')


class MarkdownRenderer:
    """Render markdown to HTML with mistune.

    Raw HTML (including comments) passes through untouched. Each instance
    owns its own mistune parser; do not share one across threads.
    """

    def __init__(self, plugins: Iterable[str] = DEFAULT_PLUGINS):
        self.plugins = list(plugins)
        self._markdown = mistune.create_markdown(escape=False, plugins=self.plugins)

    def __call__(self, markdown: str) -> str:
        if not markdown.strip():
            return ""
        return self._markdown(markdown)


def parse_fragment(html: str) -> BeautifulSoup:
    """Parse an HTML fragment (no document wrapper required)."""
    return BeautifulSoup(html, "html.parser")


def element_children(node: Union[BeautifulSoup, Tag]) -> list[Tag]:
    """Direct element children, skipping text and comment nodes."""
    return [child for child in node.children if isinstance(child, Tag)]


def is_heading(node) -> bool:
    return isinstance(node, Tag) and node.name in HEADING_TAGS


def heading_level(node: Tag) -> int:
    return int(node.name[1])


def find_all_or_self(node: Tag, names: Union[str, tuple]) -> list[Tag]:
    """The node itself when it matches ``names``, otherwise every match beneath it."""
    wanted = (names,) if isinstance(names, str) else names
    if node.name in wanted:
        return [node]
    return node.find_all(list(wanted))


def outermost(node: Tag, names: tuple) -> list[Tag]:
    """Matches at or under ``node`` that have no matching ancestor below ``node``."""
    if node.name in names:
        return [node]
    found: list[Tag] = []
    for candidate in node.find_all(list(names)):
        parent = candidate.parent
        while parent is not None and parent is not node and parent.name not in names:
            parent = parent.parent
        if parent is node:
            found.append(candidate)
    return found


def first_heading(node: Union[BeautifulSoup, Tag]) -> Optional[Tag]:
    return node.find(list(HEADING_TAGS))


def serialize(node) -> str:
    """Serialize a node (or a whole fragment) back to HTML."""
    return str(node).strip()


def raw_markup(parent, start: Optional[Tag] = None, stop: Optional[Tag] = None) -> str:
    """Markup of the children of ``parent`` after ``start`` and before ``stop``, comments included."""
    node = start.next_sibling if start is not None else next(iter(parent.children), None)
    parts: list[str] = []
    while node is not None and node is not stop:
        # str() of a Comment drops its delimiters
        parts.append(node.output_ready() if isinstance(node, NavigableString) else str(node))
        node = node.next_sibling
    return "".join(parts)


def strip_tags(html: str) -> str:
    """Visible text of an HTML fragment, entities decoded."""
    if not html:
        return ""
    return parse_fragment(html).get_text()


def html_to_text(html: str) -> str:
    """
    Convert HTML to readable text.

    Block elements are followed by a blank line and list items by a newline;
    runs of more than two newlines are collapsed.
    """
    if not html:
        return ""
    soup = parse_fragment(html)

    layout = [
        string for string in soup.find_all(string=True)
        if not string.strip() and string.parent.name in _LAYOUT_PARENTS
    ]
    for string in layout:
        string.extract()

    # Breaks go into the tree; whitespace between tags does not survive reparsing
    for tag in soup.find_all(list(TEXT_BLOCK_TAGS)):
        tag.insert_after(NavigableString("\n\n"))
    for item in soup.find_all("li"):
        item.insert_after(NavigableString("\n"))

    text = soup.get_text().strip()
    return _EXCESS_BREAKS.sub("\n\n", text)

"""Content tree produced by the parser, with read-only aggregation queries."""

import html as html_lib
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional, Union

SectionKey = Union[str, int]


@dataclass
class ContentElement:
    """A leaf content unit: paragraph, image, link, list or flattened heading."""
    text: str
    html: str
    data: dict = field(default_factory=dict)
    # Assigned at extraction time, unique within one parse
    uid: Optional[int] = None

    def __str__(self) -> str:
        return self.text

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def to_dict(self) -> dict:
        return {"text": self.text, "html": self.html, **self.data}


@dataclass(frozen=True)
class HeadingElement:
    """Heading markup and its plain text."""
    text: str = ""
    html: str = ""

    @classmethod
    def from_html(cls, heading_html: str) -> "HeadingElement":
        from .parser.html import strip_tags
        return cls(text=strip_tags(heading_html).strip(), html=heading_html)

    def __str__(self) -> str:
        return self.html

    def __bool__(self) -> bool:
        return bool(self.text)


@dataclass
class FieldData:
    """Content tagged with a field marker, with its inferred type."""
    name: str
    markdown: str
    html: str
    text: str
    type: str
    data: Union[dict, list] = field(default_factory=dict)
    _items: Optional[list] = field(default=None, init=False, repr=False, compare=False)

    def __str__(self) -> str:
        return self.text

    def get(self, key: str, default: Any = None) -> Any:
        """Read a key of dict-shaped data (e.g. ``src`` of an image field)."""
        if isinstance(self.data, dict):
            return self.data.get(key, default)
        return default

    @property
    def items(self) -> list:
        """
        Item view of multi-valued fields.

        List fields return their item records; ``images`` and ``links`` fields
        return one ContentElement per entry, built on first access.
        """
        if self.type == "list":
            return self.data
        if self.type in ("images", "links"):
            if self._items is None:
                self._items = self._to_content_elements()
            return self._items
        return []

    def _to_content_elements(self) -> list[ContentElement]:
        if self.type == "images":
            return [
                ContentElement(
                    text=img.get("alt", ""),
                    html='<img src="{}" alt="{}">'.format(
                        html_lib.escape(img["src"]), html_lib.escape(img.get("alt", ""))
                    ),
                    data=dict(img),
                )
                for img in self.data
            ]
        return [
            ContentElement(
                text=link.get("text", ""),
                html='<a href="{}">{}</a>'.format(
                    html_lib.escape(link["href"]), html_lib.escape(link.get("text", ""))
                ),
                data=dict(link),
            )
            for link in self.data
        ]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "type": self.type,
            "markdown": self.markdown,
            "html": self.html,
            "text": self.text,
            "data": self.data,
        }


def _dedupe(elements: Iterable[ContentElement]) -> list[ContentElement]:
    """Drop repeated occurrences of the same extracted element (same uid)."""
    seen: set = set()
    result: list[ContentElement] = []
    for element in elements:
        key = element.uid if element.uid is not None else id(element)
        if key not in seen:
            seen.add(key)
            result.append(element)
    return result


def _collect_headings(block: "Block", headings: list[ContentElement], seen: set) -> None:
    if block.heading.text:
        key = (block.heading.text, block.level)
        if key not in seen:
            seen.add(key)
            headings.append(ContentElement(
                text=block.heading.text,
                html=block.heading.html,
                data={"level": block.level},
            ))
    for child in block.children:
        _collect_headings(child, headings, seen)


@dataclass
class Block:
    """Content under one heading, plus its nested child blocks."""
    heading: HeadingElement
    level: int
    content: str = ""
    html: str = ""
    text: str = ""
    paragraphs: list[ContentElement] = field(default_factory=list)
    images: list[ContentElement] = field(default_factory=list)
    links: list[ContentElement] = field(default_factory=list)
    lists: list[ContentElement] = field(default_factory=list)
    fields: dict[str, FieldData] = field(default_factory=dict)
    children: list["Block"] = field(default_factory=list)

    @property
    def is_synthetic(self) -> bool:
        """True for the empty level-1 wrapper inserted above leading h2+ headings."""
        return self.level == 1 and not self.heading.text

    def field(self, name: str) -> Optional[FieldData]:
        return self.fields.get(name)

    @property
    def headings(self) -> list[ContentElement]:
        """Own heading and every descendant heading, unique by (text, level)."""
        headings: list[ContentElement] = []
        _collect_headings(self, headings, set())
        return headings

    def all_images(self) -> list[ContentElement]:
        return _dedupe(self._walk("images"))

    def all_links(self) -> list[ContentElement]:
        return _dedupe(self._walk("links"))

    def all_lists(self) -> list[ContentElement]:
        return _dedupe(self._walk("lists"))

    def all_paragraphs(self) -> list[ContentElement]:
        return _dedupe(self._walk("paragraphs"))

    def _walk(self, attr: str):
        yield from getattr(self, attr)
        for child in self.children:
            yield from child._walk(attr)

    def to_dict(self) -> dict:
        return {
            "heading": self.heading.text,
            "level": self.level,
            "text": self.text,
            "fields": {name: f.to_dict() for name, f in self.fields.items()},
            "children": [child.to_dict() for child in self.children],
        }


@dataclass
class Section:
    """A top-level document partition (or a named subsection of one)."""
    title: str
    html: str
    text: str
    block_tree: list[Block] = field(default_factory=list)
    fields: dict[str, FieldData] = field(default_factory=dict)
    subsections: dict[str, "Section"] = field(default_factory=dict)
    markdown: str = ""
    name: Optional[str] = None
    index: Optional[int] = None

    @property
    def blocks(self) -> list[Block]:
        """Top-level blocks, looking through a synthetic root."""
        if self.block_tree and self.block_tree[0].is_synthetic:
            return self.block_tree[0].children
        return self.block_tree

    def field(self, name: str) -> Optional[FieldData]:
        return self.fields.get(name)

    def subsection(self, name: str) -> Optional["Section"]:
        return self.subsections.get(name)

    @property
    def headings(self) -> list[ContentElement]:
        headings: list[ContentElement] = []
        seen: set = set()
        for block in self.block_tree:
            _collect_headings(block, headings, seen)
        return headings

    @property
    def images(self) -> list[ContentElement]:
        return _dedupe(img for block in self.block_tree for img in block.all_images())

    @property
    def links(self) -> list[ContentElement]:
        return _dedupe(link for block in self.block_tree for link in block.all_links())

    @property
    def lists(self) -> list[ContentElement]:
        return _dedupe(lst for block in self.block_tree for lst in block.all_lists())

    @property
    def paragraphs(self) -> list[ContentElement]:
        return _dedupe(p for block in self.block_tree for p in block.all_paragraphs())

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "index": self.index,
            "title": self.title,
            "text": self.text,
            "html": self.html,
            "fields": {name: f.to_dict() for name, f in self.fields.items()},
            "subsections": sorted(self.subsections),
            "blocks": [block.to_dict() for block in self.blocks],
        }


@dataclass
class Document:
    """A parsed content file.

    ``sections`` maps each section's global index, and its name when it has
    one, to the same Section object.
    """
    sections: dict[SectionKey, Section] = field(default_factory=dict)
    title: str = ""
    description: str = ""
    text: str = ""
    html: str = ""

    def section(self, key: SectionKey) -> Optional[Section]:
        return self.sections.get(key)

    def __getitem__(self, key: SectionKey) -> Section:
        return self.sections[key]

    def __contains__(self, key: object) -> bool:
        return key in self.sections

    def unique_sections(self) -> list[Section]:
        """Each section once, in index order."""
        unique: list[Section] = []
        seen: set[int] = set()
        for section in self.sections.values():
            if id(section) not in seen:
                seen.add(id(section))
                unique.append(section)
        unique.sort(key=lambda s: s.index if s.index is not None else 0)
        return unique

    @property
    def headings(self) -> list[ContentElement]:
        headings: list[ContentElement] = []
        seen: set = set()
        for section in self.unique_sections():
            for block in section.block_tree:
                _collect_headings(block, headings, seen)
        return headings

    @property
    def blocks(self) -> list[Block]:
        return [block for section in self.unique_sections() for block in section.blocks]

    @property
    def images(self) -> list[ContentElement]:
        return _dedupe(img for section in self.unique_sections() for img in section.images)

    @property
    def links(self) -> list[ContentElement]:
        return _dedupe(link for section in self.unique_sections() for link in section.links)

    @property
    def lists(self) -> list[ContentElement]:
        return _dedupe(lst for section in self.unique_sections() for lst in section.lists)

    @property
    def paragraphs(self) -> list[ContentElement]:
        return _dedupe(p for section in self.unique_sections() for p in section.paragraphs)

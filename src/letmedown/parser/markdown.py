"""Markdown parsing to extract sections, subsections, fields and blocks."""

import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from ..model import Document, Section, SectionKey
from .extract import ContentExtractor
from .fields import parse_segment_fields
from .hierarchy import BlockBuilder
from .html import (
    DEFAULT_PLUGINS,
    MarkdownRenderer,
    first_heading,
    html_to_text,
    parse_fragment,
    serialize,
)
from .markers import (
    scan_subsections,
    split_outside,
    split_sections,
    strip_field_markers,
    strip_section_markers,
    strip_subsection_markers,
)

logger = logging.getLogger(__name__)


class LetMeDown:
    """
    Loads annotated markdown files into Document trees.

    Each instance owns its renderer and content extractor. Use one instance
    per thread when parsing documents concurrently.
    """

    def __init__(self, plugins: Iterable[str] = DEFAULT_PLUGINS):
        self.render = MarkdownRenderer(plugins)
        self.extractor = ContentExtractor()
        self.builder = BlockBuilder(self.render, self.extractor)

    def load(self, file_path: Union[str, Path], encoding: str = "utf-8") -> Document:
        """
        Load and parse a markdown file.

        Raises:
            FileNotFoundError: The file does not exist
            OSError: The file could not be read
        """
        path = Path(file_path)
        if not path.is_file():
            raise FileNotFoundError(f"Markdown file not found: {file_path}")

        markdown = path.read_text(encoding=encoding)
        logger.debug("Loaded %s (%d chars)", path, len(markdown))
        return self.parse(markdown)

    def parse(self, markdown: str) -> Document:
        """
        Parse markdown text into a Document.

        Sections are stored under their global index and, when named, also
        under their name. Empty sections are skipped and take no index.
        Line endings are normalized to "\n" first.
        """
        markdown = markdown.replace("\r\n", "\n").replace("\r", "\n")
        sections: dict[SectionKey, Section] = {}
        index = 0

        for marker in split_sections(markdown):
            section_markdown = marker.content(markdown).strip()
            if not section_markdown:
                logger.debug("Skipping empty section %r", marker.name)
                continue

            section = self.parse_section(section_markdown, name=marker.name, index=index)

            if marker.name:
                if marker.name in sections:
                    logger.debug("Section name %r already used, keeping the first", marker.name)
                else:
                    sections[marker.name] = section
            sections[index] = section
            index += 1

        return Document(sections=sections)

    def parse_section(
        self,
        markdown: str,
        name: Optional[str] = None,
        index: Optional[int] = None,
        nested: bool = True,
    ) -> Section:
        """
        Parse one section's markdown.

        Args:
            markdown: Section markdown, field and subsection markers included
            name: Section or subsection name
            index: Global section index (None for subsections)
            nested: Whether to resolve subsections (False inside a subsection)
        """
        subsection_ranges = scan_subsections(markdown) if nested else []

        # Body keeps field markers for per-block field resolution
        body = strip_subsection_markers(strip_section_markers(markdown))
        html = self.render(strip_field_markers(body))

        soup = parse_fragment(html)
        heading = first_heading(soup)
        title = heading.get_text().strip() if heading is not None else ''
        content_html = serialize(soup)

        # Section-level fields never reach into (or across) a subsection
        segments = [strip_subsection_markers(s) for s in split_outside(markdown, subsection_ranges)]
        fields = parse_segment_fields(segments, self.render)

        subsections: dict[str, Section] = {}
        for marker in subsection_ranges:
            if marker.name in subsections:
                logger.debug("Subsection %r already defined, skipping later occurrence", marker.name)
                continue
            sub_markdown = strip_subsection_markers(marker.content(markdown)).strip()
            if not sub_markdown:
                logger.debug("Dropping empty subsection %r", marker.name)
                continue
            subsections[marker.name] = self.parse_section(sub_markdown, name=marker.name, nested=False)

        return Section(
            title=title,
            html=content_html,
            text=html_to_text(content_html),
            block_tree=self.builder.build(content_html, body),
            fields=fields,
            subsections=subsections,
            markdown=markdown,
            name=name,
            index=index,
        )


def load(file_path: Union[str, Path], encoding: str = "utf-8") -> Document:
    """Load a markdown file with a fresh parser."""
    return LetMeDown().load(file_path, encoding=encoding)


def parse(markdown: str) -> Document:
    """Parse markdown text with a fresh parser."""
    return LetMeDown().parse(markdown)

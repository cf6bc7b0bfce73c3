"""Tool to get the outline of a content document."""

from typing import Optional

from ..model import Section
from ..parser.hierarchy import flatten_tree
from .loader import load_document


def _block_outline(section: Section) -> list[dict]:
    return [
        {
            "heading": block.heading.text,
            "level": block.level,
            "depth": depth,
            "fields": sorted(block.fields),
        }
        for block, depth in flatten_tree(section.blocks)
    ]


def _section_outline(section: Section) -> dict:
    return {
        "title": section.title,
        "fields": sorted(section.fields),
        "image_count": len(section.images),
        "link_count": len(section.links),
        "blocks": _block_outline(section),
    }


def get_outline(path: str, root: Optional[str] = None) -> dict:
    """
    Get the structure of a document: sections, subsections, fields and blocks.

    Args:
        path: Markdown file path, relative to the content root
        root: Custom content root (defaults to LETMEDOWN_CONTENT_ROOT or cwd)

    Returns:
        Dict with one outline entry per section
    """
    document, err = load_document(path, root)
    if err:
        return err

    sections = []
    for section in document.unique_sections():
        entry = {
            "index": section.index,
            "name": section.name,
            **_section_outline(section),
            "subsections": {
                name: _section_outline(sub) for name, sub in section.subsections.items()
            },
        }
        sections.append(entry)

    return {
        "path": path,
        "section_count": len(sections),
        "sections": sections,
        "headings": [h.to_dict() for h in document.headings],
    }

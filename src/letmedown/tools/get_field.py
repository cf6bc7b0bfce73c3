"""Tool to get a single field."""

from typing import Optional

from ..parser.hierarchy import flatten_tree
from .loader import load_document, select_section


def get_field(
    path: str,
    field: str,
    section: Optional[str] = None,
    subsection: Optional[str] = None,
    block: Optional[str] = None,
    root: Optional[str] = None,
) -> dict:
    """
    Get a field from a section, a subsection, or a block.

    Args:
        path: Markdown file path, relative to the content root
        field: Field name
        section: Section name or index (defaults to the first section)
        subsection: Optional subsection name within the section
        block: Heading text of the block to read the field from; the first
            matching block in document order is used
        root: Custom content root (defaults to LETMEDOWN_CONTENT_ROOT or cwd)

    Returns:
        Dict with the field's type, markdown, html, text and data
    """
    document, err = load_document(path, root)
    if err:
        return err

    scope, err = select_section(document, section, subsection)
    if err:
        return err

    owner = scope
    if block is not None:
        owner = next(
            (b for b, _ in flatten_tree(scope.block_tree) if b.heading.text == block),
            None,
        )
        if owner is None:
            return {"error": f"Block not found: {block}"}

    found = owner.field(field)
    if found is None:
        return {"error": f"Field not found: {field}"}

    result = found.to_dict()
    if found.type in ("images", "links"):
        result["items"] = [item.to_dict() for item in found.items]
    return result

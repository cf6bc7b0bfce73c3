"""Tool to get a specific section's content."""

from typing import Optional

from .loader import load_document, select_section


def get_section(
    path: str,
    section: Optional[str] = None,
    subsection: Optional[str] = None,
    root: Optional[str] = None,
) -> dict:
    """
    Get the full content of a section or subsection.

    Args:
        path: Markdown file path, relative to the content root
        section: Section name or index (defaults to the first section)
        subsection: Optional subsection name within the section
        root: Custom content root (defaults to LETMEDOWN_CONTENT_ROOT or cwd)

    Returns:
        Dict with section content, fields, blocks and extracted elements
    """
    document, err = load_document(path, root)
    if err:
        return err

    found, err = select_section(document, section, subsection)
    if err:
        return err

    result = found.to_dict()
    result["path"] = path
    result["images"] = [img.to_dict() for img in found.images]
    result["links"] = [link.to_dict() for link in found.links]
    result["lists"] = [lst.to_dict() for lst in found.lists]
    return result

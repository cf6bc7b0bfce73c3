"""Resolve tool paths against the content root and load documents."""

import logging
import os
from pathlib import Path
from typing import Optional

from ..model import Document, Section
from ..parser.markdown import LetMeDown

logger = logging.getLogger(__name__)

DOC_EXTENSIONS = ('.md', '.markdown')


def content_root(root: Optional[str] = None) -> Path:
    """Base directory for tool paths (LETMEDOWN_CONTENT_ROOT, else the working directory)."""
    base = root or os.environ.get('LETMEDOWN_CONTENT_ROOT') or os.getcwd()
    return Path(base).resolve()


def is_within(resolved_path: Path, base_path: Path) -> bool:
    """Check that a resolved path is inside the base directory."""
    try:
        resolved_path.relative_to(base_path)
        return True
    except ValueError:
        return False


def resolve_document_path(path: str, root: Optional[str] = None) -> Path:
    """
    Resolve a markdown path relative to the content root.

    Raises:
        ValueError: The path leaves the content root or is not a markdown file
    """
    base = content_root(root)
    candidate = Path(path)
    if not candidate.is_absolute():
        candidate = base / candidate
    resolved = candidate.resolve()

    if not is_within(resolved, base):
        logger.warning("Path escapes content root, refusing: %s", path)
        raise ValueError(f"Path is outside the content root: {path}")
    if resolved.suffix.lower() not in DOC_EXTENSIONS:
        raise ValueError(f"Not a markdown file: {path}")
    return resolved


def load_document(path: str, root: Optional[str] = None) -> tuple[Optional[Document], Optional[dict]]:
    """Load a document for a tool call. Returns (document, error_dict)."""
    try:
        resolved = resolve_document_path(path, root)
        encoding = os.environ.get('LETMEDOWN_ENCODING', 'utf-8')
        return LetMeDown().load(resolved, encoding=encoding), None
    except (ValueError, OSError) as e:
        return None, {"error": str(e)}


def select_section(
    document: Document,
    section: Optional[str] = None,
    subsection: Optional[str] = None,
) -> tuple[Optional[Section], Optional[dict]]:
    """
    Look up a section by name or index, and optionally one of its subsections.

    Numeric strings fall back to the section index when no section has that name.
    """
    key = "0" if section is None else str(section)
    found = document.section(key)
    if found is None and key.isdigit():
        found = document.section(int(key))
    if found is None:
        return None, {"error": f"Section not found: {key}"}

    if subsection:
        sub = found.subsection(subsection)
        if sub is None:
            return None, {"error": f"Subsection not found: {subsection}"}
        return sub, None
    return found, None

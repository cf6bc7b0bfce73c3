"""Tool to list markdown content files under the content root."""

import logging
from pathlib import Path
from typing import Optional

from .loader import DOC_EXTENSIONS, content_root, is_within

logger = logging.getLogger(__name__)

# Directories to skip during crawling
SKIP_DIRS = {
    '.git',
    'node_modules',
    '__pycache__',
    '.venv',
    'venv',
    'dist',
    'build',
    '.pytest_cache',
    '.mypy_cache',
    '.tox',
    'vendor',
}


def discover_documents(
    base_path: str,
    max_depth: int = 5,
    include_hidden: bool = False,
    follow_symlinks: bool = False,
) -> list[str]:
    """
    Discover all markdown files in a directory.

    Args:
        base_path: Root directory to start crawling from
        max_depth: Maximum directory depth to crawl
        include_hidden: Whether to include hidden files and directories (starting with .)
        follow_symlinks: Whether to follow symbolic links (default False for safety)

    Returns:
        Sorted list of paths relative to base_path
    """
    base = Path(base_path).resolve()
    if not base.exists():
        raise ValueError(f"Path does not exist: {base_path}")
    if not base.is_dir():
        raise ValueError(f"Path is not a directory: {base_path}")

    documents: list[str] = []

    def crawl_directory(current_path: Path, current_depth: int) -> None:
        if current_depth > max_depth:
            return

        try:
            entries = list(current_path.iterdir())
        except OSError:
            logger.debug("Cannot read directory: %s", current_path)
            return

        for item in entries:
            if item.is_symlink():
                if not follow_symlinks:
                    logger.debug("Skipping symlink: %s", item)
                    continue
                if not is_within(item.resolve(), base):
                    logger.warning("Symlink escapes base directory, skipping: %s", item)
                    continue

            if item.is_file():
                if not include_hidden and item.name.startswith('.'):
                    continue
                if item.suffix.lower() in DOC_EXTENSIONS:
                    documents.append(item.relative_to(base).as_posix())
            elif item.is_dir():
                if item.name in SKIP_DIRS:
                    continue
                if not include_hidden and item.name.startswith('.'):
                    continue
                crawl_directory(item, current_depth + 1)

    crawl_directory(base, 0)

    documents.sort()
    return documents


def list_documents(
    root: Optional[str] = None,
    max_depth: int = 5,
    include_hidden: bool = False,
) -> dict:
    """
    List markdown documents available to the other tools.

    Args:
        root: Directory to search (defaults to the content root)
        max_depth: Maximum directory depth to crawl
        include_hidden: Whether to include hidden directories

    Returns:
        Dict with the root directory and relative document paths
    """
    base = content_root(root)
    try:
        documents = discover_documents(str(base), max_depth=max_depth, include_hidden=include_hidden)
    except ValueError as e:
        return {"error": str(e)}

    return {
        "root": str(base),
        "count": len(documents),
        "documents": documents,
    }

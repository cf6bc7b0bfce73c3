"""Shared test fixtures for letmedown tests."""

import pytest

from letmedown import LetMeDown
from letmedown.parser.hierarchy import BlockBuilder
from letmedown.parser.html import MarkdownRenderer
from letmedown.parser.markers import strip_field_markers


@pytest.fixture
def renderer():
    """Provide a markdown renderer."""
    return MarkdownRenderer()


@pytest.fixture
def parser():
    """Provide a fresh document parser."""
    return LetMeDown()


@pytest.fixture
def build_blocks(renderer):
    """Build a block tree from annotated markdown."""
    def build(markdown: str):
        builder = BlockBuilder(renderer)
        return builder.build(renderer(strip_field_markers(markdown)), markdown)
    return build


@pytest.fixture
def sample_markdown():
    """Return an annotated page with named, unnamed and subsectioned sections."""
    return """<!-- section:hero -->
# Welcome

<!-- tagline -->
Build sites from plain markdown.

<!-- image -->
![Hero shot](images/hero.jpg)

<!-- cta -->
[Get started](/start)

<!-- section:features -->
## Fast

Renders in milliseconds.

## Simple

<!-- bullets -->
- One
- Two

<!-- section -->
# Contact

<!-- sub:office -->
## Office

<!-- address -->
1 Main Street

<!-- /sub -->
<!-- sub:links -->
<!-- social -->
- [Twitter](https://twitter.com/example)
- [GitHub](https://github.com/example)
<!-- /sub:links -->
"""


@pytest.fixture
def content_dir(tmp_path, sample_markdown):
    """Create a content root with a few markdown files."""
    (tmp_path / "pages").mkdir()
    (tmp_path / "pages" / "home.md").write_text(sample_markdown, encoding="utf-8")
    (tmp_path / "about.markdown").write_text("# About\n\n<!-- lead -->\nWho we are.\n", encoding="utf-8")
    (tmp_path / "notes.txt").write_text("not markdown", encoding="utf-8")

    (tmp_path / ".drafts").mkdir()
    (tmp_path / ".drafts" / "draft.md").write_text("# Draft\n", encoding="utf-8")
    (tmp_path / ".hidden.md").write_text("# Hidden\n", encoding="utf-8")

    (tmp_path / "node_modules").mkdir()
    (tmp_path / "node_modules" / "readme.md").write_text("# Dependency\n", encoding="utf-8")
    return tmp_path

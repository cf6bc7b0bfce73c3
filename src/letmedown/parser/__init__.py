"""Markdown parsing utilities."""

from .markdown import LetMeDown, load, parse
from .hierarchy import BlockBuilder, flatten_tree

__all__ = ["LetMeDown", "load", "parse", "BlockBuilder", "flatten_tree"]

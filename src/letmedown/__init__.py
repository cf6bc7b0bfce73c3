"""Parse annotated markdown into sections, blocks and typed fields."""

from .model import Block, ContentElement, Document, FieldData, HeadingElement, Section
from .parser import LetMeDown, load, parse

__all__ = [
    "LetMeDown",
    "load",
    "parse",
    "Document",
    "Section",
    "Block",
    "FieldData",
    "ContentElement",
    "HeadingElement",
]

"""MCP tool implementations."""

from .list_documents import list_documents
from .get_outline import get_outline
from .get_section import get_section
from .get_field import get_field

__all__ = ["list_documents", "get_outline", "get_section", "get_field"]

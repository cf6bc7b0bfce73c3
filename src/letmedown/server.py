"""MCP server for querying annotated markdown content files."""

import asyncio
import json
import logging
import os
import sys
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from .tools.list_documents import list_documents as do_list_documents
from .tools.get_outline import get_outline as do_get_outline
from .tools.get_section import get_section as do_get_section
from .tools.get_field import get_field as do_get_field

logger = logging.getLogger(__name__)

# Create MCP server
server = Server("letmedown-mcp")


@server.list_tools()
async def list_tools() -> list[Tool]:
    """List available tools."""
    return [
        Tool(
            name="list_documents",
            description="""List markdown content files under the content root.

The content root is LETMEDOWN_CONTENT_ROOT (or the server's working
directory). All other tools take paths relative to it.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "max_depth": {
                        "type": "integer",
                        "description": "Maximum directory depth to crawl",
                        "default": 5,
                    },
                    "include_hidden": {
                        "type": "boolean",
                        "description": "Include hidden directories",
                        "default": False,
                    },
                },
            },
        ),
        Tool(
            name="get_outline",
            description="""Get the structure of a content document.

Returns every section with its index, name, title, field names,
subsections and block outline (headings with levels), plus the
document-wide heading list. Use this before reading sections or fields.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Markdown file path relative to the content root",
                    },
                },
                "required": ["path"],
            },
        ),
        Tool(
            name="get_section",
            description="""Get the full content of one section or subsection.

Returns html, text, fields, the block tree and the section's images,
links and lists.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Markdown file path relative to the content root",
                    },
                    "section": {
                        "type": "string",
                        "description": "Section name or numeric index (default: first section)",
                    },
                    "subsection": {
                        "type": "string",
                        "description": "Subsection name within the section",
                    },
                },
                "required": ["path"],
            },
        ),
        Tool(
            name="get_field",
            description="""Get a single named field with its inferred type.

Fields are read from a section, a subsection, or the first block whose
heading text matches `block`. Types: heading, list, image, images,
link, links, text.""",
            inputSchema={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "Markdown file path relative to the content root",
                    },
                    "field": {
                        "type": "string",
                        "description": "Field name",
                    },
                    "section": {
                        "type": "string",
                        "description": "Section name or numeric index (default: first section)",
                    },
                    "subsection": {
                        "type": "string",
                        "description": "Subsection name within the section",
                    },
                    "block": {
                        "type": "string",
                        "description": "Heading text of the block holding the field",
                    },
                },
                "required": ["path", "field"],
            },
        ),
    ]


@server.call_tool()
async def call_tool(name: str, arguments: dict[str, Any]) -> list[TextContent]:
    """Handle tool calls."""
    try:
        if name == "list_documents":
            result = do_list_documents(
                max_depth=arguments.get("max_depth", 5),
                include_hidden=arguments.get("include_hidden", False),
            )
        elif name == "get_outline":
            result = do_get_outline(path=arguments["path"])
        elif name == "get_section":
            result = do_get_section(
                path=arguments["path"],
                section=arguments.get("section"),
                subsection=arguments.get("subsection"),
            )
        elif name == "get_field":
            result = do_get_field(
                path=arguments["path"],
                field=arguments["field"],
                section=arguments.get("section"),
                subsection=arguments.get("subsection"),
                block=arguments.get("block"),
            )
        else:
            result = {"error": f"Unknown tool: {name}"}

        return [TextContent(type="text", text=json.dumps(result, indent=2))]

    except Exception as e:
        logger.exception("Tool %s failed", name)
        error_result = {"error": str(e)}
        return [TextContent(type="text", text=json.dumps(error_result, indent=2))]


async def run_server():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main():
    """Entry point for the MCP server."""
    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(
        level=os.environ.get("LETMEDOWN_LOG_LEVEL", "WARNING").upper(),
        stream=sys.stderr,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    asyncio.run(run_server())


if __name__ == "__main__":
    main()

"""Main MCP server exposing the document catalog over stdio."""

import asyncio
import json
import logging
from typing import Any

import mcp.server.stdio
import mcp.types as types
from mcp.server import NotificationOptions, Server
from mcp.server.models import InitializationOptions

from docs_catalog.core.catalog import create_cache, create_catalog
from docs_catalog.core.exceptions import (
    CatalogError,
    DocumentNotFoundError,
    SourceUnavailableError,
)
from docs_catalog.core.logging import setup_logging
from docs_catalog.models.config import CatalogSettings

from .tools import DocsTools

logger = logging.getLogger(__name__)

# Initialize server
server = Server("docs-catalog")

# Set by main() before the server starts handling requests
tools: DocsTools | None = None

_STRING_ARGUMENT = {"type": "string"}


@server.list_tools()
async def handle_list_tools() -> list[types.Tool]:
    """List available MCP tools."""
    return [
        types.Tool(
            name="list_docs",
            description="Lists all documentation with id, title, category, relative path and tags.",
            inputSchema={"type": "object", "properties": {}, "required": []},
        ),
        types.Tool(
            name="list_docs_by_type",
            description="Lists documentation filtered by top-level category (e.g. 'adrs', 'recommendations').",
            inputSchema={
                "type": "object",
                "properties": {
                    "category": {
                        **_STRING_ARGUMENT,
                        "description": "Category to filter by",
                    }
                },
                "required": ["category"],
            },
        ),
        types.Tool(
            name="search_docs",
            description="Searches documents by title, id and path (case-insensitive).",
            inputSchema={
                "type": "object",
                "properties": {
                    "query": {**_STRING_ARGUMENT, "description": "Search query"}
                },
                "required": ["query"],
            },
        ),
        types.Tool(
            name="search_docs_by_tag",
            description="Finds documents carrying a front-matter tag (case-insensitive).",
            inputSchema={
                "type": "object",
                "properties": {
                    "tag": {**_STRING_ARGUMENT, "description": "Tag to filter by"}
                },
                "required": ["tag"],
            },
        ),
        types.Tool(
            name="get_doc",
            description="Returns the full Markdown content of a document by id (from list_docs or search results).",
            inputSchema={
                "type": "object",
                "properties": {
                    "id": {**_STRING_ARGUMENT, "description": "Document id"}
                },
                "required": ["id"],
            },
        ),
    ]


async def dispatch_tool(
    docs_tools: DocsTools, name: str, arguments: dict[str, Any]
) -> list[types.TextContent]:
    """Run a tool and render its result or error as text content."""
    try:
        if name == "list_docs":
            result = await docs_tools.list_docs()
        elif name == "list_docs_by_type":
            result = await docs_tools.list_docs_by_type(**arguments)
        elif name == "search_docs":
            result = await docs_tools.search_docs(**arguments)
        elif name == "search_docs_by_tag":
            result = await docs_tools.search_docs_by_tag(**arguments)
        elif name == "get_doc":
            content = await docs_tools.get_doc(**arguments)
            return [types.TextContent(type="text", text=content)]
        else:
            return [
                types.TextContent(type="text", text=f"Error: Unknown tool '{name}'")
            ]

        response_text = json.dumps(result, indent=2, ensure_ascii=False)
        return [types.TextContent(type="text", text=response_text)]

    except DocumentNotFoundError as e:
        return [
            types.TextContent(
                type="text",
                text=f"Error: {e.message}. Use list_docs to see available document ids.",
            )
        ]

    except SourceUnavailableError as e:
        error_message = f"Document source unavailable: {e.message}"
        if e.status_code:
            error_message += f" (HTTP {e.status_code})"
        return [types.TextContent(type="text", text=error_message)]

    except CatalogError as e:
        return [types.TextContent(type="text", text=f"Catalog error: {e.message}")]

    except Exception as e:
        logger.error(f"Tool execution failed: {e}", exc_info=True)
        return [
            types.TextContent(
                type="text", text=f"Error: Tool execution failed - {str(e)}"
            )
        ]


@server.call_tool()
async def handle_call_tool(
    name: str, arguments: dict[str, Any]
) -> list[types.TextContent]:
    """Handle MCP tool calls."""
    if tools is None:
        return [types.TextContent(type="text", text="Error: Catalog not initialized")]
    return await dispatch_tool(tools, name, arguments or {})


async def main(settings: CatalogSettings | None = None):
    """Main entry point for the MCP server."""
    global tools

    settings = settings or CatalogSettings()
    setup_logging(settings.log_level)

    cache = await create_cache(settings)
    catalog = create_catalog(settings, cache=cache)
    tools = DocsTools(catalog)
    logger.info(f"Starting MCP server '{settings.server_name}' with {catalog!r}")

    try:
        async with mcp.server.stdio.stdio_server() as (read_stream, write_stream):
            await server.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name=settings.server_name,
                    server_version=settings.server_version,
                    capabilities=server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                ),
            )
    finally:
        aclose = getattr(catalog, "aclose", None)
        if aclose is not None:
            await aclose()
        close_cache = getattr(cache, "close", None)
        if close_cache is not None:
            await close_cache()


def cli_main():
    """Synchronous entry point for script generation."""
    asyncio.run(main())


if __name__ == "__main__":
    cli_main()

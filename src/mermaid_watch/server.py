"""MCP Server initialization and tool registration."""

from __future__ import annotations

import json
import os
from typing import Any

from dotenv import load_dotenv
from loguru import logger
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from mermaid_watch.tools import (
    extract_diagrams,
    render_diagram,
    render_page,
    validate_diagram,
)

# Load environment variables
load_dotenv()

# Tool definitions with JSON schemas
TOOLS: dict[str, dict[str, Any]] = {
    "extract_diagrams": {
        "description": "Find the code blocks in an HTML page that contain Mermaid diagram source and return the normalized source of each.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "html": {
                    "type": "string",
                    "description": "HTML page or fragment to scan",
                },
            },
            "required": ["html"],
        },
        "handler": extract_diagrams,
    },
    "validate_diagram": {
        "description": "Detect common Mermaid syntax defects (unsupported diagram type, invalid node IDs, incomplete arrows, missing connections) and return a best-effort repaired source with suggestions.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "source": {
                    "type": "string",
                    "description": "Mermaid diagram source",
                },
            },
            "required": ["source"],
        },
        "handler": validate_diagram,
    },
    "render_diagram": {
        "description": "Validate, repair and render a single Mermaid diagram to SVG using the configured renderer.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "source": {
                    "type": "string",
                    "description": "Mermaid diagram source",
                },
                "dark_mode": {
                    "type": "boolean",
                    "description": "Render with the dark theme (default: MERMAID_WATCH_DARK_MODE or light)",
                },
            },
            "required": ["source"],
        },
        "handler": render_diagram,
    },
    "render_page": {
        "description": "Render every Mermaid code block in an HTML page exactly once and return the page with the rendered diagrams inserted after their source blocks.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "html": {
                    "type": "string",
                    "description": "HTML page to process",
                },
                "dark_mode": {
                    "type": "boolean",
                    "description": "System-level dark-mode preference (default: MERMAID_WATCH_DARK_MODE)",
                },
            },
            "required": ["html"],
        },
        "handler": render_page,
    },
}


def create_server() -> Server:
    """Create and configure the MCP server."""
    server = Server("mermaid-watch")

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List all available tools."""
        return [
            Tool(
                name=name,
                description=config["description"],
                inputSchema=config["inputSchema"],
            )
            for name, config in TOOLS.items()
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: dict) -> list[TextContent]:
        """Handle tool invocations."""
        if name not in TOOLS:
            return [TextContent(type="text", text=f"Unknown tool: {name}")]

        handler = TOOLS[name]["handler"]

        try:
            logger.info(f"Executing tool: {name}")
            result = await handler(**arguments)

            # Serialize result to JSON
            if isinstance(result, dict):
                output = json.dumps(result, indent=2, default=str)
            else:
                output = str(result)

            return [TextContent(type="text", text=output)]

        except Exception as e:
            logger.error(f"Tool execution failed: {e}")
            error_msg = json.dumps({
                "error": True,
                "message": str(e),
                "tool": name,
            })
            return [TextContent(type="text", text=error_msg)]

    return server


async def run_server() -> None:
    """Run the MCP server via stdio."""
    server = create_server()

    logger.info("Starting mermaid-watch server...")

    async with stdio_server() as (read_stream, write_stream):
        await server.run(
            read_stream,
            write_stream,
            server.create_initialization_options(),
        )


def main() -> None:
    """CLI entry point."""
    import asyncio
    import sys

    # Configure logging
    log_level = os.getenv("LOG_LEVEL", "INFO")
    logger.remove()
    logger.add(
        sys.stderr,
        level=log_level,
        format="<level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    )

    asyncio.run(run_server())


if __name__ == "__main__":
    main()

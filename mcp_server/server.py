#!/usr/bin/env python3
"""MCP Server for Hunt Radar.

Exposes Product Hunt top products, Algolia search and timeframe resolution
as tools for MCP clients such as Claude Desktop.
"""

import json
import os
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from main import load_config
from services.tools import TOOL_DEFINITIONS, build_tools
from utils.logging_config import get_logger

logger = get_logger("mcp_server")

# Initialize MCP server
server = Server("hunt-radar")


def get_config() -> dict:
    """Load config.yaml from HUNT_CONFIG or the project root."""
    return load_config(os.environ.get("HUNT_CONFIG", str(PROJECT_ROOT / "config.yaml")))


@server.list_tools()
async def list_tools():
    """List available tools."""
    return [
        Tool(
            name=tool["name"],
            description=tool["description"],
            inputSchema=tool["input_schema"],
        )
        for tool in TOOL_DEFINITIONS
    ]


def format_result(name: str, result: dict) -> str:
    """Render a tool result as text for the MCP client."""
    if result.get("error"):
        return f"Error: {result['error']}"

    if name == "resolve_timeframe":
        return json.dumps(result["window"], indent=2)

    lines = []
    window = result.get("window")
    if window:
        lines.append(
            f"**Window ({window['label']}):** {window['postedAfter']} -> {window['postedBefore']}"
        )
        lines.append("")
    elif result.get("query"):
        lines.append(f"**Search:** {result['query']}")
        lines.append("")
    lines.append(result.get("table", ""))
    return "\n".join(lines)


@server.call_tool()
async def call_tool(name: str, arguments: dict):
    """Handle tool calls."""
    tools = build_tools(get_config())
    try:
        result = await tools.call(name, arguments or {})
    except ValueError as e:
        return [TextContent(type="text", text=str(e))]
    finally:
        await tools.close()

    return [TextContent(type="text", text=format_result(name, result))]


async def main():
    """Run the MCP server."""
    async with stdio_server() as (read_stream, write_stream):
        await server.run(read_stream, write_stream, server.create_initialization_options())


if __name__ == "__main__":
    import asyncio
    asyncio.run(main())

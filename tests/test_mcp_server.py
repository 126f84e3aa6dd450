"""Tests for MCP Server tools."""

import json
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

pytest.importorskip("mcp", reason="mcp package not installed")

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT / "mcp_server"))
sys.path.insert(0, str(PROJECT_ROOT / "src"))

from services.algolia import AlgoliaClient
from services.producthunt import ProductHuntClient
from services.tools import TOOL_NAMES, HuntTools
from timeframe.clock import FixedClock


@pytest.fixture
def demo_tools(mock_http, wednesday_noon_utc):
    """Tools in demo mode (no credentials) with a fixed clock."""
    return HuntTools(
        ProductHuntClient(http_client=mock_http, token=""),
        AlgoliaClient(http_client=mock_http),
        default_timezone="America/New_York",
        clock=FixedClock(wednesday_noon_utc),
    )


class TestListTools:
    async def test_lists_all_tools(self):
        from server import list_tools

        tools = await list_tools()
        assert [t.name for t in tools] == TOOL_NAMES

    async def test_schemas_are_passed_through(self):
        from server import list_tools

        tools = {t.name: t for t in await list_tools()}
        assert tools["search_products"].inputSchema["required"] == ["query"]
        assert "order" in tools["get_top_products_by_timeframe"].inputSchema["properties"]


class TestFormatResult:
    def test_error(self):
        from server import format_result

        assert format_result("search_products", {"error": "Missing query"}) == "Error: Missing query"

    def test_window_heading(self):
        from server import format_result

        text = format_result(
            "get_top_products_by_votes",
            {
                "window": {
                    "postedAfter": "2024-06-11T04:00:00Z",
                    "postedBefore": "2024-06-12T04:00:00Z",
                    "label": "yesterday",
                },
                "table": "TABLE",
            },
        )
        assert text.splitlines()[0] == (
            "**Window (yesterday):** 2024-06-11T04:00:00Z -> 2024-06-12T04:00:00Z"
        )
        assert text.endswith("TABLE")

    def test_search_heading(self):
        from server import format_result

        text = format_result("search_products", {"query": "notes", "table": "TABLE"})
        assert text == "**Search:** notes\n\nTABLE"


class TestCallTool:
    async def test_top_products_by_timeframe(self, demo_tools, mock_http):
        from server import call_tool

        with patch("server.build_tools", return_value=demo_tools):
            result = await call_tool("get_top_products_by_timeframe", {"timeframe": "this week"})

        assert len(result) == 1
        text = result[0].text
        assert "**Window (this-week):** 2024-06-10T04:00:00Z -> 2024-06-12T18:00:00Z" in text
        assert "LaunchPad Pro" in text
        mock_http.post_json.assert_not_called()

    async def test_resolve_timeframe_returns_json(self, demo_tools):
        from server import call_tool

        with patch("server.build_tools", return_value=demo_tools):
            result = await call_tool("resolve_timeframe", {"timeframe": "yesterday"})

        assert json.loads(result[0].text) == {
            "postedAfter": "2024-06-11T04:00:00Z",
            "postedBefore": "2024-06-12T04:00:00Z",
            "label": "yesterday",
        }

    async def test_unknown_timezone(self, demo_tools):
        from server import call_tool

        with patch("server.build_tools", return_value=demo_tools):
            result = await call_tool("resolve_timeframe", {"tz": "Nowhere/City"})
        assert result[0].text == "Error: Unknown timezone: Nowhere/City"

    async def test_unknown_tool(self, demo_tools):
        from server import call_tool

        with patch("server.build_tools", return_value=demo_tools):
            result = await call_tool("nonexistent_tool", {})
        assert "Unknown tool" in result[0].text

    async def test_tools_are_closed(self, demo_tools):
        from server import call_tool

        with patch("server.build_tools", return_value=demo_tools), patch.object(
            demo_tools, "close", wraps=demo_tools.close
        ) as close:
            await call_tool("search_products", {"query": "launch"})
        close.assert_called_once()


class TestGetConfig:
    def test_reads_hunt_config(self, tmp_path, monkeypatch):
        from server import get_config

        path = tmp_path / "custom.yaml"
        path.write_text("timeframe:\n  default_timezone: Asia/Tokyo\n", encoding="utf-8")
        monkeypatch.setenv("HUNT_CONFIG", str(path))
        assert get_config()["timeframe"]["default_timezone"] == "Asia/Tokyo"

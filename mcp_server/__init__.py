"""MCP server for Hunt Radar."""

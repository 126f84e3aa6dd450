"""Timeframe resolution and posts-query shaping."""

from .clock import DEFAULT_TIMEZONE, TIMEZONE_ERRORS, Clock, FixedClock
from .parser import TimeWindow, format_instant, resolve_timeframe
from .query import (
    SEARCH_LIMIT_BOUNDS,
    TOOL_LIMIT_BOUNDS,
    PostsOrder,
    build_query_params,
    clamp_limit,
    escape_cell,
    render_table,
)

__all__ = [
    "DEFAULT_TIMEZONE",
    "TIMEZONE_ERRORS",
    "Clock",
    "FixedClock",
    "TimeWindow",
    "format_instant",
    "resolve_timeframe",
    "SEARCH_LIMIT_BOUNDS",
    "TOOL_LIMIT_BOUNDS",
    "PostsOrder",
    "build_query_params",
    "clamp_limit",
    "escape_cell",
    "render_table",
]

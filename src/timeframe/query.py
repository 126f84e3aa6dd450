"""Turn resolved windows into posts-query parameters and render results."""

from enum import Enum
from typing import Any, Iterable, Optional

from timeframe.parser import TimeWindow, format_instant

# Limits accepted from agent tool calls and from direct search requests.
TOOL_LIMIT_BOUNDS = (1, 10)
SEARCH_LIMIT_BOUNDS = (1, 50)

TABLE_HEADER = "| # | Name | Tagline | Votes | Link |"
TABLE_DIVIDER = "|---|------|---------|------:|------|"
EMPTY_TABLE = "No products found."


class PostsOrder(str, Enum):
    """Sort orders accepted by the Product Hunt ``posts`` query."""

    RANKING = "RANKING"
    VOTES = "VOTES"
    NEWEST = "NEWEST"
    FEATURED_AT = "FEATURED_AT"

    @classmethod
    def parse(cls, value: Any) -> "PostsOrder":
        """Accept an enum member or a case-insensitive name; default RANKING."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return cls.RANKING


def clamp_limit(
    limit: Any,
    bounds: tuple[int, int] = TOOL_LIMIT_BOUNDS,
    default: Optional[int] = None,
) -> int:
    """Coerce ``limit`` into ``bounds``. Unparseable values use ``default``."""
    low, high = bounds
    try:
        value = int(limit)
    except (TypeError, ValueError, OverflowError):
        value = low if default is None else default
    return max(low, min(high, value))


def build_query_params(
    window: TimeWindow,
    limit: Any,
    order: Any = PostsOrder.RANKING,
    bounds: tuple[int, int] = TOOL_LIMIT_BOUNDS,
) -> dict:
    """Parameters for ``PostsRepository.fetch_posts_in_window``."""
    return {
        "postedAfter": format_instant(window.posted_after),
        "postedBefore": format_instant(window.posted_before),
        "first": clamp_limit(limit, bounds),
        "order": PostsOrder.parse(order).value,
    }


def escape_cell(value: Any) -> str:
    """Make free text safe inside a single markdown table cell."""
    if value is None:
        return ""
    text = " ".join(str(value).split())
    return text.replace("|", "\\|")


def render_table(posts: Iterable[dict]) -> str:
    """Render posts as a fixed-column rank table."""
    rows = []
    for rank, post in enumerate(posts, start=1):
        votes = post.get("votesCount")
        link = post.get("url") or post.get("website")
        rows.append(
            f"| {rank} | {escape_cell(post.get('name'))} | {escape_cell(post.get('tagline'))} "
            f"| {votes if votes is not None else '-'} | {escape_cell(link)} |"
        )
    if not rows:
        return EMPTY_TABLE
    return "\n".join([TABLE_HEADER, TABLE_DIVIDER, *rows])

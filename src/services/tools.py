"""Callable tools shared by the chat agent, the HTTP API and the MCP server."""

import json

from services.algolia import AlgoliaClient
from services.producthunt import ProductHuntClient
from timeframe.clock import DEFAULT_TIMEZONE, SYSTEM_CLOCK, TIMEZONE_ERRORS, Clock
from timeframe.parser import resolve_timeframe
from timeframe.query import (
    TOOL_LIMIT_BOUNDS,
    PostsOrder,
    clamp_limit,
    render_table,
)
from utils.async_http import AsyncHTTPClient
from utils.cache import ResponseCache
from utils.logging_config import get_logger

logger = get_logger("tools")

POST_KEYS = ("id", "name", "tagline", "url", "website", "votesCount", "thumbnail")

_TIMEFRAME_PROPERTY = {
    "type": "string",
    "description": (
        "Timeframe such as today, yesterday, this-week, last-week, this-month, "
        "last-month, YYYY-MM-DD, 'from:YYYY-MM-DD to:YYYY-MM-DD' or 'last N days'"
    ),
}
_TZ_PROPERTY = {
    "type": "string",
    "description": "IANA timezone, e.g. America/New_York",
}
_LIMIT_PROPERTY = {
    "type": "integer",
    "description": "Number of posts to return (1-10)",
    "default": 3,
}

TOOL_DEFINITIONS = [
    {
        "name": "get_top_products",
        "description": "Get the top Product Hunt posts for a given day (YYYY-MM-DD)",
        "input_schema": {
            "type": "object",
            "properties": {
                "date": {"type": "string", "description": "Day in YYYY-MM-DD format"},
                "tz": _TZ_PROPERTY,
                "limit": _LIMIT_PROPERTY,
            },
            "required": ["date"],
        },
    },
    {
        "name": "get_top_products_by_votes",
        "description": "Get the most-voted Product Hunt posts within a timeframe",
        "input_schema": {
            "type": "object",
            "properties": {
                "timeframe": _TIMEFRAME_PROPERTY,
                "tz": _TZ_PROPERTY,
                "limit": _LIMIT_PROPERTY,
            },
        },
    },
    {
        "name": "get_top_products_by_timeframe",
        "description": "Get ranked Product Hunt posts within a flexible timeframe",
        "input_schema": {
            "type": "object",
            "properties": {
                "timeframe": _TIMEFRAME_PROPERTY,
                "tz": _TZ_PROPERTY,
                "limit": _LIMIT_PROPERTY,
                "order": {
                    "type": "string",
                    "enum": [o.value for o in PostsOrder],
                    "default": PostsOrder.RANKING.value,
                },
            },
        },
    },
    {
        "name": "search_products",
        "description": "Search Product Hunt posts by keyword using Algolia",
        "input_schema": {
            "type": "object",
            "properties": {
                "query": {"type": "string", "description": "Search keywords"},
                "limit": {
                    "type": "integer",
                    "description": "Number of hits to return (1-10)",
                    "default": 10,
                },
            },
            "required": ["query"],
        },
    },
    {
        "name": "resolve_timeframe",
        "description": "Show the exact UTC window a timeframe expression resolves to",
        "input_schema": {
            "type": "object",
            "properties": {"timeframe": _TIMEFRAME_PROPERTY, "tz": _TZ_PROPERTY},
        },
    },
]

TOOL_NAMES = [tool["name"] for tool in TOOL_DEFINITIONS]


def openai_tool_specs() -> list[dict]:
    """Tool definitions in the OpenAI function-calling format."""
    return [
        {
            "type": "function",
            "function": {
                "name": tool["name"],
                "description": tool["description"],
                "parameters": tool["input_schema"],
            },
        }
        for tool in TOOL_DEFINITIONS
    ]


def slim_post(post: dict) -> dict:
    return {key: post.get(key) for key in POST_KEYS}


class HuntTools:
    """Dispatches tool calls to the Product Hunt and Algolia clients."""

    def __init__(
        self,
        producthunt: ProductHuntClient,
        algolia: AlgoliaClient,
        default_timezone: str = DEFAULT_TIMEZONE,
        limit_bounds: tuple[int, int] = TOOL_LIMIT_BOUNDS,
        clock: Clock = SYSTEM_CLOCK,
        http_client: AsyncHTTPClient = None,
    ):
        self.producthunt = producthunt
        self.algolia = algolia
        self.default_timezone = default_timezone
        self.limit_bounds = limit_bounds
        self.clock = clock
        self._http = http_client
        self._handlers = {
            "get_top_products": self._top_by_day,
            "get_top_products_by_votes": self._top_by_votes,
            "get_top_products_by_timeframe": self._top_by_timeframe,
            "search_products": self._search,
            "resolve_timeframe": self._resolve,
        }

    async def call(self, name: str, arguments: dict = None) -> dict:
        """Run tool ``name``. Unknown names raise ValueError."""
        handler = self._handlers.get(name)
        if handler is None:
            raise ValueError(f"Unknown tool: {name}")
        arguments = arguments or {}
        logger.info("Tool call %s %s", name, json.dumps(arguments, default=str))
        try:
            return await handler(arguments)
        except TIMEZONE_ERRORS as e:
            logger.warning("Tool %s rejected timezone %r: %s", name, arguments.get("tz"), e)
            return {"error": f"Unknown timezone: {arguments.get('tz')}"}

    def _tz(self, arguments: dict) -> str:
        return arguments.get("tz") or self.default_timezone

    def _limit(self, arguments: dict, default: int = 3) -> int:
        return clamp_limit(arguments.get("limit", default), self.limit_bounds, default)

    def _window_result(self, window, posts: list[dict]) -> dict:
        return {
            "window": window.to_dict(),
            "posts": [slim_post(p) for p in posts],
            "table": render_table(posts),
        }

    async def _top_by_day(self, arguments: dict) -> dict:
        date_str = str(arguments.get("date") or "")
        window = resolve_timeframe(date_str, self._tz(arguments), clock=self.clock)
        posts = await self.producthunt.fetch_posts_in_window(
            window, self._limit(arguments), PostsOrder.RANKING, self.limit_bounds
        )
        return {"date": date_str, **self._window_result(window, posts)}

    async def _top_by_votes(self, arguments: dict) -> dict:
        window = resolve_timeframe(arguments.get("timeframe"), self._tz(arguments), clock=self.clock)
        posts = await self.producthunt.fetch_posts_in_window(
            window, self._limit(arguments), PostsOrder.VOTES, self.limit_bounds
        )
        return self._window_result(window, posts)

    async def _top_by_timeframe(self, arguments: dict) -> dict:
        window = resolve_timeframe(arguments.get("timeframe"), self._tz(arguments), clock=self.clock)
        order = PostsOrder.parse(arguments.get("order", PostsOrder.RANKING))
        posts = await self.producthunt.fetch_posts_in_window(
            window, self._limit(arguments), order, self.limit_bounds
        )
        return {"order": order.value, **self._window_result(window, posts)}

    async def _search(self, arguments: dict) -> dict:
        query = str(arguments.get("query") or "").strip()
        if not query:
            return {"error": "Missing query", "hits": []}
        hits = await self.algolia.search(query, self._limit(arguments, default=10))
        return {"query": query, "hits": hits, "table": render_table(hits)}

    async def _resolve(self, arguments: dict) -> dict:
        window = resolve_timeframe(arguments.get("timeframe"), self._tz(arguments), clock=self.clock)
        return {"window": window.to_dict()}

    async def close(self):
        await self.producthunt.close()
        await self.algolia.close()
        if self._http is not None:
            await self._http.close()
            self._http = None


def build_tools(config: dict = None, clock: Clock = SYSTEM_CLOCK) -> HuntTools:
    """Create a HuntTools wired from a loaded config dict.

    Both clients share one HTTP session, owned and closed by the returned
    HuntTools.
    """
    config = config or {}
    http_client = AsyncHTTPClient()
    cache_cfg = config.get("cache", {})
    cache = None
    if cache_cfg.get("enabled", False):
        cache = ResponseCache(
            cache_cfg.get("dir", "data/cache"), cache_cfg.get("ttl", 300)
        )
    limits = config.get("limits", {})
    return HuntTools(
        ProductHuntClient(config, http_client=http_client, cache=cache),
        AlgoliaClient(config, http_client=http_client),
        default_timezone=config.get("timeframe", {}).get("default_timezone", DEFAULT_TIMEZONE),
        limit_bounds=(TOOL_LIMIT_BOUNDS[0], limits.get("tool_max", TOOL_LIMIT_BOUNDS[1])),
        clock=clock,
        http_client=http_client,
    )

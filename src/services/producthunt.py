"""Product Hunt GraphQL client.

Fetches ranked posts for a resolved ``TimeWindow``. Requires the
PRODUCTHUNT_API_TOKEN environment variable; without it the client serves
demo posts so the API and chat keep working.
"""

import os
from datetime import datetime
from typing import Optional

from services.mock_data import demo_posts
from timeframe.clock import DEFAULT_TIMEZONE, SYSTEM_CLOCK, Clock
from timeframe.parser import TimeWindow, resolve_timeframe
from timeframe.query import TOOL_LIMIT_BOUNDS, PostsOrder, build_query_params
from utils.async_http import AsyncHTTPClient
from utils.cache import ResponseCache
from utils.logging_config import get_logger

logger = get_logger("producthunt")

GRAPHQL_URL = "https://api.producthunt.com/v2/api/graphql"

POST_FIELDS = """
          id
          name
          tagline
          description
          url
          website
          votesCount
          commentsCount
          thumbnail { url }
          createdAt"""

POSTS_QUERY = """
query TopPosts($first: Int!, $order: PostsOrder!, $postedAfter: DateTime!, $postedBefore: DateTime!) {
  posts(first: $first, order: $order, postedAfter: $postedAfter, postedBefore: $postedBefore) {
    edges {
      node {%s
      }
    }
  }
}
""" % POST_FIELDS


def build_inline_query(params: dict) -> str:
    """Same posts query with the values embedded instead of passed as variables."""
    return """
query {
  posts(first: %d, order: %s, postedAfter: "%s", postedBefore: "%s") {
    edges {
      node {%s
      }
    }
  }
}
""" % (
        params["first"],
        params["order"],
        params["postedAfter"],
        params["postedBefore"],
        POST_FIELDS,
    )


def normalize_node(node: dict) -> dict:
    """Flatten a GraphQL post node into the Post shape used by callers."""
    thumbnail = node.get("thumbnail")
    return {
        "id": str(node.get("id", "")),
        "name": node.get("name", ""),
        "tagline": node.get("tagline"),
        "description": node.get("description"),
        "url": node.get("url"),
        "website": node.get("website"),
        "votesCount": node.get("votesCount"),
        "commentsCount": node.get("commentsCount"),
        "thumbnail": thumbnail.get("url") if isinstance(thumbnail, dict) else thumbnail,
        "postedAt": node.get("createdAt") or node.get("postedAt"),
    }


def _extract_edges(data: Optional[dict]) -> Optional[list]:
    """Return post edges, or None when the response is unusable."""
    if not isinstance(data, dict) or data.get("errors"):
        return None
    posts = (data.get("data") or {}).get("posts")
    if not isinstance(posts, dict):
        return None
    return posts.get("edges") or []


class ProductHuntClient:
    """PostsRepository backed by the Product Hunt v2 GraphQL API."""

    def __init__(
        self,
        config: dict = None,
        http_client: AsyncHTTPClient = None,
        cache: ResponseCache = None,
        token: str = None,
    ):
        config = config or {}
        cfg = config.get("producthunt", {})
        self.api_url = cfg.get("api_url", GRAPHQL_URL)
        self.cache_ttl = cfg.get("cache_ttl")
        self.token = token if token is not None else os.environ.get("PRODUCTHUNT_API_TOKEN", "")
        self._cache = cache
        self._http = http_client
        self._owns_http = http_client is None
        if self._owns_http:
            self._http = AsyncHTTPClient()

    @property
    def demo_mode(self) -> bool:
        return not self.token

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _graphql(self, query: str, variables: dict = None) -> Optional[dict]:
        payload = {"query": query}
        if variables is not None:
            payload["variables"] = variables
        try:
            return await self._http.post_json(self.api_url, payload, headers=self._headers())
        except Exception as e:
            logger.warning("Product Hunt request error: %s", e)
            return None

    def _cache_key(self, window: TimeWindow, params: dict) -> str:
        """Key for ``params``; windows ending at "now" share a key per TTL bucket."""
        key_params = dict(params)
        if window.open_ended and self._cache is not None:
            bucket = max(1, int(self.cache_ttl or self._cache.default_ttl))
            key_params["postedAfter"] = int(window.posted_after.timestamp()) // bucket
            key_params["postedBefore"] = int(window.posted_before.timestamp()) // bucket
            key_params["label"] = window.label
        return ResponseCache.make_key("posts", key_params)

    async def fetch_posts_in_window(
        self,
        window: TimeWindow,
        limit: int = 3,
        order: PostsOrder = PostsOrder.RANKING,
        bounds: tuple[int, int] = TOOL_LIMIT_BOUNDS,
    ) -> list[dict]:
        """Fetch up to ``limit`` posts launched inside ``window``.

        Returns an empty list on any upstream failure.
        """
        params = build_query_params(window, limit, order, bounds)
        if self.demo_mode:
            logger.info("PRODUCTHUNT_API_TOKEN not set, serving demo posts")
            return demo_posts(params["first"])

        cache_key = self._cache_key(window, params)
        if self._cache is not None:
            cached = self._cache.get(cache_key)
            if cached is not None:
                return cached

        edges = _extract_edges(await self._graphql(POSTS_QUERY, variables=params))
        if edges is None:
            logger.warning("Product Hunt query with variables failed, retrying inline")
            edges = _extract_edges(await self._graphql(build_inline_query(params)))
        if edges is None:
            logger.warning("Product Hunt query failed for window %s", window.label)
            return []

        posts = [normalize_node(edge["node"]) for edge in edges if edge.get("node")]
        logger.info(
            "Product Hunt: %d posts for %s (%s..%s, order=%s)",
            len(posts), window.label, params["postedAfter"], params["postedBefore"], params["order"],
        )
        if self._cache is not None:
            self._cache.set(cache_key, posts, self.cache_ttl)
        return posts

    async def get_top_products_by_day(
        self,
        date_str: str,
        limit: int = 3,
        tz: str = "UTC",
        bounds: tuple[int, int] = TOOL_LIMIT_BOUNDS,
    ) -> list[dict]:
        """Top posts for a single ``YYYY-MM-DD`` day in ``tz``."""
        window = resolve_timeframe(date_str, tz)
        return await self.fetch_posts_in_window(window, limit, PostsOrder.RANKING, bounds)

    async def get_top_products_by_votes(
        self,
        timeframe: str = None,
        tz: str = DEFAULT_TIMEZONE,
        limit: int = 3,
        now: datetime = None,
        clock: Clock = SYSTEM_CLOCK,
        bounds: tuple[int, int] = TOOL_LIMIT_BOUNDS,
    ) -> tuple[TimeWindow, list[dict]]:
        """Most-voted posts within a timeframe expression."""
        return await self.get_top_products_by_timeframe(
            timeframe, tz, limit, PostsOrder.VOTES, now=now, clock=clock, bounds=bounds
        )

    async def get_top_products_by_timeframe(
        self,
        timeframe: str = None,
        tz: str = DEFAULT_TIMEZONE,
        limit: int = 3,
        order: PostsOrder = PostsOrder.RANKING,
        now: datetime = None,
        clock: Clock = SYSTEM_CLOCK,
        bounds: tuple[int, int] = TOOL_LIMIT_BOUNDS,
    ) -> tuple[TimeWindow, list[dict]]:
        """Resolve ``timeframe`` and fetch ranked posts inside it."""
        window = resolve_timeframe(timeframe, tz, now=now, clock=clock)
        posts = await self.fetch_posts_in_window(window, limit, order, bounds)
        return window, posts

    async def close(self):
        if self._owns_http and self._http:
            await self._http.close()
            self._http = None

"""Algolia search over Product Hunt posts.

Requires ALGOLIA_APP_ID and ALGOLIA_SEARCH_API_KEY; ALGOLIA_INDEX_NAME
defaults to Posts_production. Without credentials the client searches the
demo posts instead.
"""

import os
from urllib.parse import quote

from services.mock_data import demo_search
from timeframe.query import SEARCH_LIMIT_BOUNDS, clamp_limit
from utils.async_http import AsyncHTTPClient
from utils.logging_config import get_logger

logger = get_logger("algolia")

DEFAULT_INDEX = "Posts_production"


def _first(hit: dict, *keys):
    for key in keys:
        value = hit.get(key)
        if value is not None:
            return value
    return None


def normalize_hit(hit: dict) -> dict:
    """Map the index's mixed field spellings onto the Post shape."""
    thumbnail = hit.get("thumbnail")
    if isinstance(thumbnail, dict):
        thumbnail = thumbnail.get("image_url") or thumbnail.get("url")
    object_id = _first(hit, "objectID", "id")
    return {
        "objectID": str(object_id) if object_id is not None else "",
        "name": hit.get("name", ""),
        "tagline": _first(hit, "tagline", "tag_line", "tagLine"),
        "description": hit.get("description"),
        "url": _first(hit, "url", "post_url"),
        "website": _first(hit, "website", "redirect_url"),
        "votesCount": _first(hit, "votesCount", "votes_count"),
        "commentsCount": _first(hit, "commentsCount", "comments_count"),
        "thumbnail": thumbnail,
        "postedAt": _first(hit, "created_at", "postedAt"),
    }


class AlgoliaClient:
    """Keyword search against the Product Hunt posts index."""

    def __init__(
        self,
        config: dict = None,
        http_client: AsyncHTTPClient = None,
        app_id: str = None,
        api_key: str = None,
        index_name: str = None,
    ):
        config = config or {}
        cfg = config.get("algolia", {})
        self.app_id = app_id if app_id is not None else os.environ.get("ALGOLIA_APP_ID", "")
        self.api_key = api_key if api_key is not None else os.environ.get("ALGOLIA_SEARCH_API_KEY", "")
        self.index_name = (
            index_name
            or os.environ.get("ALGOLIA_INDEX_NAME")
            or cfg.get("index_name", DEFAULT_INDEX)
        )
        self.max_hits = config.get("limits", {}).get("search_max", SEARCH_LIMIT_BOUNDS[1])
        self._http = http_client
        self._owns_http = http_client is None
        if self._owns_http:
            self._http = AsyncHTTPClient()

    @property
    def demo_mode(self) -> bool:
        return not (self.app_id and self.api_key)

    @property
    def endpoint(self) -> str:
        return (
            f"https://{self.app_id}-dsn.algolia.net/1/indexes/"
            f"{quote(self.index_name, safe='')}/query"
        )

    async def search(self, query: str, limit: int = 10) -> list[dict]:
        """Search posts by keyword. Returns an empty list on failure."""
        hits_per_page = clamp_limit(limit, (SEARCH_LIMIT_BOUNDS[0], self.max_hits))
        if self.demo_mode:
            logger.info("Algolia credentials not set, searching demo posts")
            return demo_search(query, hits_per_page)

        headers = {
            "X-Algolia-Application-Id": self.app_id,
            "X-Algolia-API-Key": self.api_key,
            "Content-Type": "application/json",
        }
        try:
            data = await self._http.post_json(
                self.endpoint,
                {"query": query, "hitsPerPage": hits_per_page},
                headers=headers,
            )
        except Exception as e:
            logger.warning("Algolia search error for '%s': %s", query, e)
            return []

        if not isinstance(data, dict):
            return []

        hits = [normalize_hit(h) for h in data.get("hits", []) if isinstance(h, dict)]
        logger.info("Algolia: %d hits for '%s'", len(hits), query)
        return hits

    async def close(self):
        if self._owns_http and self._http:
            await self._http.close()
            self._http = None

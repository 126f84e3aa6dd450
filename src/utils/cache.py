"""File-based TTL cache for upstream API responses."""

import hashlib
import json
import time
from pathlib import Path
from typing import Any, Optional

from utils.logging_config import get_logger

logger = get_logger("cache")


class ResponseCache:
    """Stores JSON-serializable responses as files under ``cache_dir``.

    Keys are derived from a namespace plus the request parameters, so two
    requests for the same window, limit and order share one entry.
    """

    def __init__(
        self,
        cache_dir: str = "data/cache",
        default_ttl: int = 300,
        sweep_interval: Optional[int] = None,
    ):
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)
        self.default_ttl = default_ttl
        self.sweep_interval = sweep_interval
        self._last_sweep = time.time()

    @staticmethod
    def make_key(namespace: str, params: dict) -> str:
        """Build a stable cache key from a namespace and request params."""
        return f"{namespace}:{json.dumps(params, sort_keys=True, default=str)}"

    def _path_for(self, key: str) -> Path:
        key_hash = hashlib.sha256(key.encode("utf-8")).hexdigest()[:32]
        return self.cache_dir / f"{key_hash}.json"

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None when missing or expired."""
        path = self._path_for(key)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                entry = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.warning("Cache read error for %s: %s", key, e)
            return None

        if time.time() > entry.get("expires_at", 0):
            path.unlink(missing_ok=True)
            return None

        logger.debug("Cache hit: %s", key)
        return entry.get("value")

    def set(self, key: str, value: Any, ttl: Optional[int] = None) -> None:
        """Store ``value`` under ``key`` for ``ttl`` seconds."""
        ttl = self.default_ttl if ttl is None else ttl
        entry = {
            "key": key,
            "value": value,
            "expires_at": time.time() + ttl,
        }
        try:
            with open(self._path_for(key), "w", encoding="utf-8") as f:
                json.dump(entry, f, ensure_ascii=False)
        except (OSError, TypeError) as e:
            logger.warning("Cache write error for %s: %s", key, e)

        now = time.time()
        interval = self.default_ttl if self.sweep_interval is None else self.sweep_interval
        if now - self._last_sweep >= interval:
            self._last_sweep = now
            self.clear_expired()

    def clear(self) -> int:
        """Delete every entry. Returns the number of files removed."""
        count = 0
        for path in self.cache_dir.glob("*.json"):
            path.unlink(missing_ok=True)
            count += 1
        return count

    def clear_expired(self) -> int:
        """Delete expired and unreadable entries. Returns the number removed."""
        count = 0
        now = time.time()
        for path in self.cache_dir.glob("*.json"):
            try:
                with open(path, "r", encoding="utf-8") as f:
                    expires_at = json.load(f).get("expires_at", 0)
            except (json.JSONDecodeError, OSError, AttributeError):
                expires_at = 0
            if now > expires_at:
                path.unlink(missing_ok=True)
                count += 1
        if count:
            logger.debug("Swept %d expired cache entries", count)
        return count

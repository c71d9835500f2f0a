import json
import logging
import time
from threading import Lock
from typing import Any, Callable, Dict, Optional, Tuple

from storefront.core.config import settings

logger = logging.getLogger(__name__)


def make_key(resource: str, options: Optional[Dict[str, Any]] = None) -> str:
    """resource + serialized query options, e.g. 'products:{"limit": 4}'."""
    if not options:
        return resource
    return f"{resource}:{json.dumps(options, sort_keys=True, default=str)}"


class TTLCache:
    """
    In-memory cache in front of the remote catalog.

    Entries are fresh for `ttl_seconds` after they were stored. When a
    refresh fails the expired value is served instead; with nothing cached
    the caller gets `default_factory()`.

    A fetch that returns None (not found) is passed through but never
    stored, and it drops whatever was cached under that key.
    """

    def __init__(
        self,
        ttl_seconds: Optional[float] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.ttl_seconds = settings.CACHE_TTL_SECONDS if ttl_seconds is None else ttl_seconds
        self._clock = clock
        # key -> (value, stored_at)
        self._entries: Dict[str, Tuple[Any, float]] = {}
        self._lock = Lock()
        self._stats = {"hits": 0, "misses": 0, "stale_hits": 0, "fetch_errors": 0}

    def _count(self, name: str) -> None:
        with self._lock:
            self._stats[name] += 1

    def peek(self, key: str) -> Optional[Tuple[Any, bool]]:
        """(value, is_fresh) for a stored entry, without fetching."""
        with self._lock:
            entry = self._entries.get(key)
        if entry is None:
            return None
        value, stored_at = entry
        return value, self._clock() - stored_at < self.ttl_seconds

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            self._entries[key] = (value, self._clock())

    def get(
        self,
        key: str,
        fetch: Callable[[], Any],
        default_factory: Callable[[], Any] = list,
    ) -> Any:
        cached = self.peek(key)
        if cached is not None and cached[1]:
            self._count("hits")
            logger.debug("Cache hit for %s", key)
            return cached[0]

        self._count("misses")
        try:
            value = fetch()
        except Exception as exc:
            self._count("fetch_errors")
            if cached is not None:
                self._count("stale_hits")
                logger.warning("Refreshing %s failed (%s); serving stale data", key, exc)
                return cached[0]
            logger.warning("Fetching %s failed (%s); nothing cached", key, exc)
            return default_factory()

        if value is None:
            with self._lock:
                self._entries.pop(key, None)
            return None

        self.set(key, value)
        return value

    def invalidate(self, key: Optional[str] = None) -> None:
        with self._lock:
            if key is None:
                self._entries.clear()
            else:
                self._entries.pop(key, None)
        logger.info("Cache invalidated: %s", key or "all entries")

    def clear(self) -> None:
        self.invalidate()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def stats(self) -> Dict[str, int]:
        with self._lock:
            stats = dict(self._stats)
            stats["entries"] = len(self._entries)
        return stats


# process-wide cache used by the catalog service
catalog_cache = TTLCache()

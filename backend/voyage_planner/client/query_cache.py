"""In-process cache of fetched lists (vessels, unit types, voyages).

One instance is shared by every screen of a client session and passed in
explicitly.  Entries are filled lazily on first ``get`` and only dropped
by an explicit ``invalidate`` (there is no TTL or polling).
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable

logger = logging.getLogger(__name__)

_MISSING = object()


class QueryCache:
    def __init__(self):
        self._entries: dict[str, Any] = {}
        self._locks: dict[str, asyncio.Lock] = {}

    async def get(self, key: str, fetcher: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value for ``key``, fetching it on a miss.

        Concurrent misses for the same key share one fetch.  A failed
        fetch caches nothing and re-raises.
        """
        value = self._entries.get(key, _MISSING)
        if value is not _MISSING:
            logger.debug(f"Query cache HIT: {key}")
            return value

        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            value = self._entries.get(key, _MISSING)
            if value is not _MISSING:
                return value

            logger.debug(f"Query cache MISS: {key}")
            value = await fetcher()
            self._entries[key] = value
            return value

    def peek(self, key: str, default: Any = None) -> Any:
        return self._entries.get(key, default)

    def invalidate(self, key: str) -> bool:
        """Drop ``key``; the next ``get`` re-fetches.  Returns True if it was cached."""
        removed = self._entries.pop(key, _MISSING) is not _MISSING
        if removed:
            logger.info(f"Query cache invalidated: {key}")
        return removed

    def clear(self) -> None:
        self._entries.clear()

"""
Client-side query cache with optimistic mutations.

Each key ("todos", "categories") has a fetcher that returns the
authoritative server state. A mutation is applied to the cached value
first, then sent to the server; afterwards the key is always re-fetched,
whether the request succeeded or failed. The cached value can therefore
only diverge from the server until the mutation settles.
"""

import time
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeVar

from ..core.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

Fetcher = Callable[[], Awaitable[Any]]


@dataclass
class CacheEntry:
    fetcher: Fetcher
    data: Any = None
    fetched_at: float | None = None  # None: never fetched or invalidated


class QueryCache:
    """
    Keyed cache of server lists.

    Args:
        stale_after: seconds after which get() goes back to the server
        clock: monotonic time source (tests pass a fake one)
    """

    def __init__(self, stale_after: float = 30.0, clock: Callable[[], float] = time.monotonic):
        self.stale_after = stale_after
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

    def register(self, key: str, fetcher: Fetcher) -> None:
        self._entries[key] = CacheEntry(fetcher=fetcher)

    def _entry(self, key: str) -> CacheEntry:
        try:
            return self._entries[key]
        except KeyError:
            raise KeyError(f"Unknown cache key: {key!r}") from None

    def peek(self, key: str) -> Any:
        """Cached value without touching the server (None if never fetched)."""
        return self._entry(key).data

    def set(self, key: str, data: Any) -> None:
        """Local write. Does not refresh the entry's freshness."""
        self._entry(key).data = data

    def is_stale(self, key: str) -> bool:
        entry = self._entry(key)
        if entry.fetched_at is None:
            return True
        return self._clock() - entry.fetched_at >= self.stale_after

    async def get(self, key: str) -> Any:
        """Cached value, fetched first if missing, stale or invalidated."""
        if self.is_stale(key):
            return await self.refetch(key)
        return self._entry(key).data

    async def refetch(self, key: str) -> Any:
        entry = self._entry(key)
        entry.data = await entry.fetcher()
        entry.fetched_at = self._clock()
        return entry.data

    def invalidate(self, key: str) -> None:
        """Next get() goes to the server. The cached value stays readable."""
        self._entry(key).fetched_at = None

    def invalidate_all(self) -> None:
        for entry in self._entries.values():
            entry.fetched_at = None

    async def mutate(
        self,
        key: str,
        optimistic: Callable[[Any], Any] | None,
        request: Callable[[], Awaitable[T]],
        also: Iterable[str] = (),
    ) -> T:
        """
        Optimistic mutation.

        1. cache[key] = optimistic(cache[key])   (skipped when optimistic is None)
        2. await request()
        3. re-fetch key and every key in `also`, on success and on failure

        The request's exception is re-raised after step 3.
        """
        keys = [key, *also]

        if optimistic is not None:
            self.set(key, optimistic(self.peek(key)))

        try:
            result = await request()
        except Exception:
            await self._reconcile(keys)
            raise

        await self._reconcile(keys)
        return result

    async def _reconcile(self, keys: list[str]) -> None:
        for key in keys:
            try:
                await self.refetch(key)
            except Exception:
                # Keep the local value for display; the next get() retries the fetch
                logger.warning("Cache re-fetch failed", extra={"key": key}, exc_info=True)
                self.invalidate(key)

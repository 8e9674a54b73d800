"""
Dashboard Hook
Dashboard stats with a keyed TTL cache and background revalidation.

Cache keys are the canonical JSON of the set filters ("default" when no
filter is set). A fresh entry short-circuits the network call entirely.
The revalidation task periodically refreshes the active key once its
entry goes stale, without flipping `is_loading`.
"""

import asyncio
import logging
import time
from typing import Any, Callable, Dict, Optional, Tuple

from ..models import DashboardStats, filter_key
from .base import ResourceHook

logger = logging.getLogger(__name__)

DEFAULT_TTL = 5 * 60


class DashboardCache:
    """
    Filter-keyed cache of dashboard payloads.

    Usage:
        cache = DashboardCache(ttl=300)
        cache.set(key, stats)
        cache.get(key)  # None once older than ttl
    """

    def __init__(self, ttl: float = DEFAULT_TTL, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self.clock = clock
        self._entries: Dict[str, Tuple[Any, float]] = {}

    def get(self, key: str) -> Optional[Any]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        data, stored_at = entry
        if self.clock() - stored_at >= self.ttl:
            del self._entries[key]
            return None
        return data

    def set(self, key: str, data: Any) -> None:
        self._entries[key] = (data, self.clock())

    def is_fresh(self, key: str) -> bool:
        return self.get(key) is not None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class DashboardHook(ResourceHook[DashboardStats]):
    error_message = "Failed to load dashboard data"

    def __init__(self, client, filters=None, cache: Optional[DashboardCache] = None):
        super().__init__(client.get_dashboard_stats, filters)
        self.cache = cache if cache is not None else DashboardCache()
        self.last_fetch: Optional[float] = None
        self._revalidation: Optional[asyncio.Task] = None

    # =========================================================================
    # Loading
    # =========================================================================

    def load(self, filters=None, force: bool = False) -> Optional[asyncio.Task]:
        """
        Serve from cache when fresh, otherwise fetch.

        Returns the request task, or None on a cache hit.
        """
        if filters is not None:
            self.filters = filters
        self._cancel()

        if not force:
            cached = self.cache.get(filter_key(self.filters))
            if cached is not None:
                self.data = cached
                self.error = None
                self.is_loading = False
                return None

        return self._start(self.filters)

    def mount(self) -> Optional[asyncio.Task]:
        return self.load()

    def refetch(self, filters=None) -> Optional[asyncio.Task]:
        return self.load(filters, force=True)

    def transform(self, result) -> DashboardStats:
        return DashboardStats.from_dict(result)

    def _on_success(self, filters, data: DashboardStats) -> None:
        self.cache.set(filter_key(filters), data)
        self.last_fetch = self.cache.clock()

    # =========================================================================
    # Staleness
    # =========================================================================

    @property
    def should_refresh(self) -> bool:
        return not self.cache.is_fresh(filter_key(self.filters))

    def clear_cache(self) -> None:
        self.cache.clear()

    def start_revalidation(self, interval: Optional[float] = None) -> asyncio.Task:
        """Refresh the active filter key in the background when it goes stale"""
        self.stop_revalidation()
        interval = interval if interval is not None else self.cache.ttl
        self._revalidation = asyncio.get_running_loop().create_task(self._revalidate(interval))
        return self._revalidation

    def stop_revalidation(self) -> None:
        if self._revalidation is not None and not self._revalidation.done():
            self._revalidation.cancel()
        self._revalidation = None

    async def _revalidate(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            if self.should_refresh and not self.is_fetching:
                logger.debug("Dashboard cache stale for %s, refreshing", filter_key(self.filters))
                self._start(self.filters, silent=True)

    def close(self) -> None:
        self.stop_revalidation()
        super().close()

"""
Resource Hooks
Request/response/error/loading state for one backend resource.

Each hook owns at most one in-flight request, an asyncio.Task. Starting a
new request cancels the previous task first, and a cancelled task never
touches hook state, so a slow earlier response cannot overwrite a later
one. Fetch failures become a readable `error`; previous `data` is kept.
"""

import asyncio
import inspect
import logging
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


async def call(fn: Callable, *args) -> Any:
    """Await a coroutine function, or run a blocking one in a worker thread"""
    if inspect.iscoroutinefunction(fn):
        return await fn(*args)
    return await asyncio.to_thread(fn, *args)


class ResourceHook(Generic[T]):
    """
    Base hook.

    Usage:
        hook = OrdersHook(client, OrdersFilters(status="new"))
        hook.mount()
        await hook.wait()
        hook.data, hook.error

        hook.refetch(OrdersFilters(status="delivered"))
    """

    error_message = "Failed to load data"

    def __init__(self, fetch: Callable[[Any], Any], filters=None):
        self._fetch = fetch
        self.filters = filters
        self.data: Optional[T] = None
        self.error: Optional[str] = None
        self.is_loading = True
        self._task: Optional[asyncio.Task] = None

    # =========================================================================
    # Public API
    # =========================================================================

    def mount(self) -> Optional[asyncio.Task]:
        """Start the initial load. Must be called inside a running loop."""
        return self.refetch()

    def refetch(self, filters=None) -> Optional[asyncio.Task]:
        """Cancel any in-flight request and start a new one"""
        if filters is not None:
            self.filters = filters
        return self._start(self.filters)

    async def wait(self) -> None:
        """Wait for the current request, if any, to settle"""
        task = self._task
        if task is None:
            return
        try:
            await asyncio.shield(task)
        except asyncio.CancelledError:
            if not task.cancelled():
                raise

    def close(self) -> None:
        """Cancel the in-flight request"""
        self._cancel()

    @property
    def is_fetching(self) -> bool:
        return self._task is not None and not self._task.done()

    # =========================================================================
    # Request Lifecycle
    # =========================================================================

    def _start(self, filters, silent: bool = False) -> asyncio.Task:
        self._cancel()
        if not silent:
            self.is_loading = True
        task = asyncio.get_running_loop().create_task(self._run(filters))
        self._task = task
        return task

    def _cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def _run(self, filters) -> None:
        try:
            result = await call(self._fetch, filters)
            data = self.transform(result)
        except asyncio.CancelledError:
            # Superseded or closed: leave state to the newer request
            raise
        except Exception:
            logger.exception("%s failed", type(self).__name__)
            self.error = self.error_message
        else:
            self.data = data
            self.error = None
            self._on_success(filters, data)
        finally:
            if self._task is asyncio.current_task():
                self.is_loading = False
                self._task = None

    def transform(self, result: Any) -> T:
        return result

    def _on_success(self, filters, data: T) -> None:
        pass

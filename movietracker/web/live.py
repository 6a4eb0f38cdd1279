"""Live queries: store reads that re-emit whenever their result changes."""

import asyncio
import logging
import threading
from typing import Any, AsyncIterator, Callable, Optional

from movietracker.web.database import Database

logger = logging.getLogger(__name__)

_UNSET = object()


class Subscription:
    """Handle for one subscriber of a live query. Close it to stop updates."""

    def __init__(
        self,
        live_query: "LiveQuery",
        on_next: Callable[[Any], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self._live_query = live_query
        self._on_next = on_next
        self._on_error = on_error
        self._last: Any = _UNSET
        self._lock = threading.Lock()
        self.closed = False

    def _refresh(self) -> None:
        """Re-run the query and emit if the snapshot changed."""
        if self.closed:
            return

        try:
            snapshot = self._live_query.get()
        except Exception as e:
            if self._on_error is None:
                raise
            self._on_error(e)
            return

        with self._lock:
            if self.closed or snapshot == self._last:
                return
            self._last = snapshot
        self._on_next(snapshot)

    def close(self) -> None:
        if not self.closed:
            self.closed = True
            self._live_query.database.remove_listener(self._refresh)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class LiveQuery:
    """A store read bound to the store's change notifications.

    Subscribers get the current snapshot right away and a new one after every
    committed write that changes the result. Identical consecutive snapshots
    are not re-emitted.
    """

    def __init__(self, database: Database, query: Callable[[], Any], name: str = "query"):
        self.database = database
        self.query = query
        self.name = name

    def get(self) -> Any:
        """Run the query once."""
        return self.query()

    def subscribe(
        self,
        on_next: Callable[[Any], None],
        on_error: Optional[Callable[[Exception], None]] = None,
    ) -> Subscription:
        subscription = Subscription(self, on_next, on_error)
        self.database.add_listener(subscription._refresh)
        try:
            subscription._refresh()
        except Exception:
            subscription.close()
            raise
        logger.debug(f"Subscribed to live {self.name}")
        return subscription

    async def stream(self) -> AsyncIterator[Any]:
        """Yield snapshots as they change, for use from a running event loop.

        A storage error is raised out of the iteration.
        """
        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()

        def deliver(item: Any) -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(queue.put_nowait, item)

        subscription = self.subscribe(deliver, on_error=deliver)
        try:
            while True:
                item = await queue.get()
                if isinstance(item, Exception):
                    raise item
                yield item
        finally:
            subscription.close()

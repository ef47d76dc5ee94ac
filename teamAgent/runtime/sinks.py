"""Fire-and-forget delivery to caller-supplied callbacks."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import Any, Callable, Optional, Set

LOGGER = logging.getLogger(__name__)


class SinkDispatcher:
    """Calls sinks without awaiting them.

    Coroutine results are scheduled on the running loop; exceptions from a
    sink are logged and never reach the caller.
    """

    def __init__(self) -> None:
        self._pending: Set[asyncio.Future] = set()

    def notify(self, sink: Optional[Callable[[Any], Any]], payload: Any) -> None:
        if sink is None:
            return
        try:
            result = sink(payload)
        except Exception as e:  # noqa: BLE001
            LOGGER.warning(f"Sink {getattr(sink, '__name__', sink)!r} failed: {type(e).__name__}: {e}")
            return
        if inspect.isawaitable(result):
            future = asyncio.ensure_future(result)
            self._pending.add(future)
            future.add_done_callback(self._done)

    def _done(self, future: asyncio.Future) -> None:
        self._pending.discard(future)
        if not future.cancelled() and future.exception() is not None:
            LOGGER.warning(f"Async sink failed: {future.exception()!r}")

    async def drain(self) -> None:
        """Wait for scheduled coroutine sinks. Used by tests and shutdown."""

        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

"""In-process event emitter used to wire the board, the issue tracker and the sources."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import StrEnum
from typing import Any

logger = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[Any]]


class EventType(StrEnum):
    """Types of events that can be emitted."""

    OPENED = "opened"
    UPDATED = "updated"
    CLOSED = "closed"


class EventEmitter:
    """Dispatches events to async handlers, one task per handler call.

    Handlers registered for an event are invoked in registration order. Each
    call runs as its own task so that a slow handler never delays the emitter,
    and a failing handler is logged without affecting other handlers or later
    events.
    """

    def __init__(self, name: str = "events") -> None:
        self.name = name
        self._handlers: dict[EventType, list[Handler]] = {}
        self._pending: set[asyncio.Task[Any]] = set()

    def on(self, event: EventType, handler: Handler) -> None:
        """Register a handler for an event."""
        self._handlers.setdefault(event, []).append(handler)

    def off(self, event: EventType, handler: Handler) -> None:
        """Unregister a handler. Unknown handlers are ignored."""
        handlers = self._handlers.get(event, [])
        if handler in handlers:
            handlers.remove(handler)

    def handler_count(self, event: EventType) -> int:
        """Get the number of handlers registered for an event."""
        return len(self._handlers.get(event, []))

    def emit(self, event: EventType, *args: Any) -> list[asyncio.Task[Any]]:
        """Emit an event to all registered handlers.

        Must be called from within a running event loop.

        Returns:
            The tasks running the handlers.
        """
        tasks = []
        for handler in list(self._handlers.get(event, [])):
            task = asyncio.create_task(handler(*args))
            self._pending.add(task)
            task.add_done_callback(self._finished)
            tasks.append(task)
        logger.debug("%s: emitted %s to %d handler(s)", self.name, event, len(tasks))
        return tasks

    def _finished(self, task: asyncio.Task[Any]) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("%s: event handler failed: %s", self.name, exc, exc_info=exc)

    @property
    def pending_count(self) -> int:
        """Get the number of handler tasks still running."""
        return len(self._pending)

    async def wait_idle(self) -> None:
        """Wait until no handler tasks are pending.

        Handlers may emit further events while running, so this loops until
        the pending set stays empty.
        """
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def close(self) -> None:
        """Cancel pending handler tasks and drop all handlers."""
        for task in list(self._pending):
            task.cancel()
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)
        self._handlers.clear()

"""Base class for components that react to board and tracker events."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tweetboard.board.exceptions import NotFoundError

if TYPE_CHECKING:
    from tweetboard.board import Board, Column
    from tweetboard.config import TweetboardConfig
    from tweetboard.events import EventEmitter, EventType, Handler


class Source:
    """Keeps track of its event subscriptions so it can be stopped cleanly."""

    def __init__(self, board: Board, config: TweetboardConfig) -> None:
        self.board = board
        self.config = config
        self._subscriptions: list[tuple[EventEmitter, EventType, Handler]] = []

    @property
    def started(self) -> bool:
        return bool(self._subscriptions)

    def _subscribe(self, events: EventEmitter, event: EventType, handler: Handler) -> None:
        events.on(event, handler)
        self._subscriptions.append((events, event, handler))

    async def stop(self) -> None:
        """Unregister all event handlers."""
        for events, event, handler in self._subscriptions:
            events.off(event, handler)
        self._subscriptions.clear()

    async def get_column(self, name: str) -> Column:
        """Get a column by logical name.

        Raises:
            NotFoundError: If no such column is configured.
        """
        columns = await self.board.columns()
        if name not in columns:
            raise NotFoundError(f"Column '{name}' is not on the board")
        return columns[name]

    async def managed_columns(self) -> list[Column]:
        """Columns whose cards follow the issue lifecycle."""
        columns = await self.board.columns()
        return [columns[name] for name in self.config.managed_columns if name in columns]

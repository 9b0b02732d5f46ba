"""Issue sync - Mirrors the issue lifecycle onto card placement."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import TYPE_CHECKING, Protocol

from tweetboard.events import EventEmitter, EventType
from tweetboard.sources.base import Source

if TYPE_CHECKING:
    from tweetboard.board import Board, Card, Column, Issue
    from tweetboard.config import TweetboardConfig

logger = logging.getLogger(__name__)


class IssueTracker(Protocol):
    """What the issue sync needs from the issue tracker."""

    events: EventEmitter

    @property
    def first_run(self) -> bool:
        """Whether the initial issue load is still in progress."""
        ...

    async def open_issues(self) -> list[Issue]:
        """Issues open at startup. Resolves once."""
        ...

    async def closed_issues(self) -> list[Issue]:
        """Issues closed recently before startup. Resolves once."""
        ...


class IssueSyncSource(Source):
    """Keeps the cards of managed columns in line with their issues.

    - opened: refresh the issue's card wherever it is, or add a card to the
      default column.
    - updated: refresh and re-validate the card if it is in a managed column.
    - closed: remove the card if it is in a managed column.

    Events for the same issue are handled one at a time in delivery order.
    """

    def __init__(self, board: Board, tracker: IssueTracker, config: TweetboardConfig) -> None:
        super().__init__(board, config)
        self.tracker = tracker
        self._locks: dict[int, asyncio.Lock] = {}
        self._lock_users: dict[int, int] = {}
        self._reconcile_task: asyncio.Task[None] | None = None

    def start(self, events: EventEmitter | None = None) -> asyncio.Task[None]:
        """Subscribe to issue events and run the startup reconciliation.

        Args:
            events: Emitter delivering issue events. Defaults to the tracker's.

        Returns:
            The reconciliation task.
        """
        events = events if events is not None else self.tracker.events
        self._subscribe(events, EventType.OPENED, self._on_opened)
        self._subscribe(events, EventType.UPDATED, self._on_updated)
        self._subscribe(events, EventType.CLOSED, self._on_closed)
        self._reconcile_task = asyncio.create_task(self.reconcile())
        return self._reconcile_task

    async def stop(self) -> None:
        await super().stop()
        if self._reconcile_task is not None and not self._reconcile_task.done():
            self._reconcile_task.cancel()
            try:
                await self._reconcile_task
            except asyncio.CancelledError:
                pass
        self._reconcile_task = None

    @asynccontextmanager
    async def _serialized(self, issue_number: int) -> AsyncIterator[None]:
        """Run one handler at a time per issue; the lock is dropped once unused."""
        lock = self._locks.setdefault(issue_number, asyncio.Lock())
        self._lock_users[issue_number] = self._lock_users.get(issue_number, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._lock_users[issue_number] -= 1
            if not self._lock_users[issue_number]:
                del self._lock_users[issue_number]
                del self._locks[issue_number]

    async def _on_opened(self, issue: Issue) -> None:
        async with self._serialized(issue.number):
            try:
                await self.add_issue(issue, self.tracker.first_run)
            except Exception:
                logger.exception("Handling opened issue #%s failed", issue.number)

    async def _on_updated(self, issue: Issue) -> None:
        async with self._serialized(issue.number):
            try:
                await self.handle_updated(issue)
            except Exception:
                logger.exception("Handling updated issue #%s failed", issue.number)

    async def _on_closed(self, issue: Issue) -> None:
        async with self._serialized(issue.number):
            try:
                await self.handle_closed(issue)
            except Exception:
                logger.exception("Handling closed issue #%s failed", issue.number)

    async def find_column(self, issue: Issue) -> Column | None:
        """Get the managed column holding a card for the issue."""
        for column in await self.managed_columns():
            if await column.has_issue(issue.number):
                return column
        return None

    async def add_issue(self, issue: Issue, first_run: bool) -> Card | None:
        """Refresh the issue's card, or add one to the default column.

        A closed issue without a card is left alone.

        Args:
            issue: Issue to add.
            first_run: Initial backlog load.

        Returns:
            The card, or None for a closed issue without a card.
        """
        card = await self.board.find_card(issue.number)
        if card is not None and card.column is not None:
            return await self.board.add_card(issue, card.column, first_run)
        if issue.is_closed:
            return None
        target = await self.get_column(self.config.default_column)
        return await self.board.add_card(issue, target, first_run)

    async def handle_updated(self, issue: Issue) -> Card | None:
        column = await self.find_column(issue)
        if column is None:
            return None
        return await self.board.add_card(issue, column)

    async def handle_closed(self, issue: Issue) -> Card | None:
        column = await self.find_column(issue)
        if column is None:
            return None
        card = await column.get_card(issue.number)
        if card is not None:
            await self.board.remove_card(card)
        return card

    async def reconcile(self) -> None:
        """Load the backlog, then drop cards of issues closed while we were away."""
        try:
            open_issues = await self.tracker.open_issues()
        except Exception:
            logger.exception("Loading open issues failed")
            return
        for issue in open_issues:
            async with self._serialized(issue.number):
                try:
                    await self.add_issue(issue, first_run=True)
                except Exception:
                    logger.exception("Adding issue #%s failed", issue.number)

        try:
            closed_issues = await self.tracker.closed_issues()
        except Exception:
            logger.exception("Loading closed issues failed")
            return
        removed = 0
        for issue in closed_issues:
            async with self._serialized(issue.number):
                try:
                    if await self.handle_closed(issue) is not None:
                        removed += 1
                except Exception:
                    logger.exception("Removing closed issue #%s failed", issue.number)

        logger.info(
            "Startup sync done: %d open issue(s), %d closed card(s) removed",
            len(open_issues),
            removed,
        )

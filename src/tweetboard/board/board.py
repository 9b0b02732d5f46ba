"""Board - Provisioning of the project board and card placement."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from tweetboard.board.card import Card
from tweetboard.board.column import Column
from tweetboard.board.exceptions import BoardError, NotFoundError
from tweetboard.events import EventEmitter, EventType

if TYPE_CHECKING:
    from tweetboard.board.models import Issue
    from tweetboard.board.provider import BoardProvider
    from tweetboard.config import TweetboardConfig

logger = logging.getLogger(__name__)

_EDGE_POSITIONS = ("first", "last")


class Board:
    """Abstraction over the GitHub project used as the tweet queue.

    The Board is the only component that provisions columns and moves cards.
    After every change to a card set it emits ``EventType.UPDATED`` on
    ``self.events`` so the sources can react.
    """

    def __init__(
        self,
        client: BoardProvider,
        config: TweetboardConfig,
        events: EventEmitter | None = None,
    ) -> None:
        """Initialize the Board.

        Nothing is fetched until ``setup`` runs, see ``start``.

        Args:
            client: Board provider client.
            config: Deployment configuration.
            events: Emitter for board events. A new one is created if omitted.
        """
        self.client = client
        self.config = config
        self.events = events if events is not None else EventEmitter("board")
        self.id: int | None = None
        self._columns: dict[str, Column | None] = dict.fromkeys(config.columns)
        self._issues: dict[int, Issue] = {}
        self._ready = asyncio.Event()
        self._setup_lock = asyncio.Lock()
        # Serializes card placement changes with provider resyncs
        self._cards_lock = asyncio.Lock()
        self._setup_task: asyncio.Task[bool] | None = None
        self._needs_arrange = False

    @property
    def is_ready(self) -> bool:
        """Whether setup has completed, without asking the provider."""
        return self._ready.is_set()

    def unresolved_columns(self) -> list[str]:
        """Logical names that have no Column yet."""
        return [name for name, column in self._columns.items() if column is None]

    async def get_board_id(self) -> int:
        """Get the ID of the project.

        Raises:
            NotFoundError: No project with the configured name exists.
            ProviderError: The project list could not be fetched.
        """
        if self.id is None:
            boards = await self.client.list_boards()
            board = next((b for b in boards if b.name == self.config.project_name), None)
            if board is None:
                raise NotFoundError(
                    f"Project '{self.config.project_name}' not found in "
                    f"{self.config.owner}/{self.config.repo}"
                )
            self.id = board.id
        return self.id

    async def board_exists(self) -> bool:
        """Check whether the project can be found on the provider."""
        try:
            await self.get_board_id()
        except BoardError:
            return False
        return True

    async def missing_columns(self) -> list[str]:
        """Get the configured columns that don't exist on the board yet.

        Columns that exist on the board but have no Column instance are wired
        up on the way.
        """
        unresolved = self.unresolved_columns()
        if not unresolved:
            return []

        board_id = await self.get_board_id()
        existing = await self.client.list_columns(board_id)
        for match in existing:
            name = self.config.logical_name(match.name)
            if name in unresolved and self._columns.get(name) is None:
                self._columns[name] = Column(self.client, match.id, name, self.config)
        return [name for name in unresolved if self._columns.get(name) is None]

    async def columns_exist(self) -> bool:
        """Check whether every configured column exists on the board."""
        return not await self.missing_columns()

    async def ready(self) -> bool:
        """Check whether the board and all configured columns exist."""
        if not await self.board_exists():
            return False
        try:
            return await self.columns_exist()
        except BoardError:
            return False

    async def _ensure_board(self) -> None:
        try:
            await self.get_board_id()
        except NotFoundError:
            await self.create_board()

    async def create_board(self) -> None:
        logger.info("Creating project %s", self.config.project_name)
        board = await self.client.create_board(self.config.project_name, self.config.project_body)
        self.id = board.id

    async def create_column(self, name: str) -> Column:
        column = await Column.create(self.client, await self.get_board_id(), name, self.config)
        self._columns[name] = column
        return column

    async def arrange_columns(self) -> None:
        """Move the input columns to the left and the output columns to the right."""
        for name, position in self.config.column_order.items():
            column = self._columns.get(name)
            if column is None:
                continue
            if position not in _EDGE_POSITIONS:
                target = self._columns.get(position)
                if target is None:
                    logger.warning("Can't place %s after missing column %s", name, position)
                    continue
                position = f"after:{target.id}"
            await column.move(position)

    async def setup(self) -> bool:
        """Create the project and the required columns.

        Every step re-checks the provider, so a failed setup can simply be run
        again.

        Returns:
            True if the board is ready afterwards.
        """
        async with self._setup_lock:
            try:
                await self._ensure_board()
                missing = await self.missing_columns()
                for name in missing:
                    await self.create_column(name)

                if missing:
                    self._needs_arrange = True
                if self._needs_arrange:
                    await self.arrange_columns()
                    self._needs_arrange = False
            except BoardError as e:
                logger.error("Board setup failed: %s", e)
                return False
            except Exception:
                logger.exception("Board setup failed unexpectedly")
                return False

            if self.unresolved_columns():
                return False
            if not self._ready.is_set():
                logger.info("Board %s is ready (id=%s)", self.config.project_name, self.id)
                self._ready.set()
            return True

    def start(self) -> asyncio.Task[bool]:
        """Run ``setup`` in the background. Must be called from a running loop."""
        if self._setup_task is None or self._setup_task.done():
            self._setup_task = asyncio.create_task(self.setup())
        return self._setup_task

    async def close(self) -> None:
        """Cancel a running setup and drop pending event handlers."""
        if self._setup_task is not None and not self._setup_task.done():
            self._setup_task.cancel()
            try:
                await self._setup_task
            except asyncio.CancelledError:
                pass
        self._setup_task = None
        await self.events.close()

    async def columns(self) -> dict[str, Column]:
        """Get the columns by logical name. Waits until setup has completed."""
        await self._ready.wait()
        return {name: column for name, column in self._columns.items() if column is not None}

    async def column_ids(self) -> dict[str, int]:
        """Get the provider column IDs by logical name."""
        return {name: column.id for name, column in (await self.columns()).items()}

    async def find_card(self, issue_number: int, names: list[str] | None = None) -> Card | None:
        """Find the card for an issue, optionally only in the given columns."""
        for name, column in (await self.columns()).items():
            if names is not None and name not in names:
                continue
            card = await column.get_card(issue_number)
            if card is not None:
                return card
        return None

    def notify_updated(self) -> None:
        """Tell listeners that the board content changed."""
        self.events.emit(EventType.UPDATED)

    async def add_card(self, issue: Issue, column: Column, first_run: bool = False) -> Card:
        """Create or refresh the card for an issue.

        If the issue already has a card anywhere on the board, that card is
        refreshed where it is.

        Args:
            issue: The issue the card shows.
            column: Column for a new card.
            first_run: Initial backlog load; no update is announced.
        """
        self._issues[issue.number] = issue
        async with self._cards_lock:
            card = await self.find_card(issue.number)
            if card is not None:
                card.update(issue)
                logger.debug("Refreshed card for issue #%s in %s", issue.number, card.column)
            else:
                card = Card(issue.number, issue=issue, tweeted_label=self.config.tweeted_label)
                await column.add_card(card, issue)

        if not first_run:
            self.notify_updated()
        return card

    async def move_card(self, card: Card, column: Column) -> None:
        """Move a card to another column."""
        async with self._cards_lock:
            source = card.column
            if source is column:
                return
            if card.card_id is not None:
                await self.client.move_card(card.card_id, column.id)
            if source is not None:
                source.release(card)
            column.adopt(card)
        logger.info("Moved card for issue #%s to %s", card.issue_number, column.name)
        self.notify_updated()

    async def remove_card(self, card: Card) -> None:
        async with self._cards_lock:
            if card.column is None:
                return
            await card.column.remove_card(card)
        self._issues.pop(card.issue_number, None)
        self.notify_updated()

    async def card_tweeted(self, card: Card, url: str) -> None:
        """Mark a card as published and record it on the provider.

        The card is marked locally before the provider call, so a failing
        annotation never makes the card eligible again.
        """
        card.mark_published(url)
        logger.info("Card for issue #%s tweeted: %s", card.issue_number, url)
        try:
            if card.card_id is not None and card.issue is not None:
                await self.client.annotate_card(
                    card.card_id, card.issue, url, self.config.tweeted_label
                )
        finally:
            self.notify_updated()

    async def sync_cards(self) -> bool:
        """Re-read every column from the provider and reconcile card placement.

        Cards moved on the provider keep their state and follow the move.

        Returns:
            True if anything changed. An update is announced in that case.
        """
        if not self._ready.is_set():
            return False
        async with self._cards_lock:
            changed = await self._resync()
        if changed:
            logger.info("Board changed on the provider, cards resynced")
            self.notify_updated()
        return changed

    async def _resync(self) -> bool:
        columns = await self.columns()
        listings = {name: await column.fetch_cards() for name, column in columns.items()}

        # No awaits below this point: the swap is atomic for other tasks
        known = {
            card.issue_number: card
            for column in columns.values()
            for card in column.cards.values()
        }
        seen: set[int] = set()
        changed = False
        placement: dict[str, list[Card]] = {}
        for name, column in columns.items():
            cards = []
            for entry in listings[name]:
                number = entry.issue_number
                if number is None:
                    continue
                if number in seen:
                    logger.warning("Issue #%s has more than one card, ignoring extra", number)
                    continue
                seen.add(number)
                card = known.pop(number, None)
                if card is None:
                    card = Card(
                        number,
                        entry.id,
                        issue=self._issues.get(number),
                        tweeted_label=self.config.tweeted_label,
                    )
                    changed = True
                elif card.column is not column or card.card_id != entry.id:
                    changed = True
                card.card_id = entry.id
                cards.append(card)
            placement[name] = cards

        for card in known.values():
            card.column = None
            changed = True
        for name, cards in placement.items():
            columns[name].replace_cards(cards)
        return changed

    def snapshot(self) -> dict[str, Any]:
        """Describe the board state for the status endpoint."""
        return {
            "ready": self._ready.is_set(),
            "board_id": self.id,
            "columns": [
                column.snapshot() for column in self._columns.values() if column is not None
            ],
        }

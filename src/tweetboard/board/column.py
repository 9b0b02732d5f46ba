"""Column - One provider column and the cards it holds."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from tweetboard.board.card import Card
from tweetboard.board.exceptions import ProviderError
from tweetboard.board.models import ColumnSnapshot, Issue

if TYPE_CHECKING:
    from tweetboard.board.provider import BoardProvider, ProviderCard
    from tweetboard.config import TweetboardConfig

logger = logging.getLogger(__name__)


class Column:
    """A provider column bound to a logical column name.

    The card set is fetched from the provider on first use and afterwards
    kept current by the board's own mutations and by ``Board.sync_cards``.
    """

    def __init__(
        self,
        client: BoardProvider,
        column_id: int,
        name: str,
        config: TweetboardConfig,
    ) -> None:
        """Initialize a Column.

        Args:
            client: Board provider client.
            column_id: Provider ID of the column.
            name: Logical column name (e.g., "ideas", "toTweet").
            config: Deployment configuration.
        """
        self.client = client
        self.id = column_id
        self.name = name
        self.config = config
        self._cards: dict[int, Card] = {}
        self._loaded = False
        self._load_lock = asyncio.Lock()

    def __repr__(self) -> str:
        return f"<Column(id={self.id!r}, name={self.name!r}, cards={len(self._cards)})>"

    @property
    def display_name(self) -> str:
        return self.config.columns[self.name]

    @property
    def is_outbound(self) -> bool:
        return self.name == self.config.outbound_column

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def cards(self) -> dict[int, Card]:
        """Cards by issue number, in insertion order. Empty until loaded."""
        return self._cards

    @classmethod
    async def create(
        cls,
        client: BoardProvider,
        board_id: int,
        name: str,
        config: TweetboardConfig,
    ) -> Column:
        """Create the provider column for a logical name.

        Raises:
            ProviderError: If the provider refuses to create the column.
        """
        display_name = config.columns[name]
        logger.info("Creating column %s (%s)", name, display_name)
        created = await client.create_column(board_id, display_name)
        column = cls(client, created.id, name, config)
        # A fresh column has no cards
        column._loaded = True
        return column

    async def fetch_cards(self) -> list[ProviderCard]:
        """Fetch the provider's card list for this column."""
        return await self.client.list_cards(self.id)

    async def ensure_loaded(self) -> None:
        """Load the card set from the provider once."""
        if self._loaded:
            return
        async with self._load_lock:
            if self._loaded:
                return
            listing = await self.fetch_cards()
            self.replace_cards(
                [
                    Card(c.issue_number, c.id, tweeted_label=self.config.tweeted_label)
                    for c in listing
                    if c.issue_number is not None
                ]
            )
            logger.debug("Loaded %d card(s) in column %s", len(self._cards), self.name)

    def replace_cards(self, cards: list[Card]) -> None:
        """Replace the local card set."""
        self._cards = {}
        for card in cards:
            self.adopt(card)
        self._loaded = True

    def adopt(self, card: Card) -> None:
        """Attach a card to this column. No provider call."""
        card.column = self
        self._cards[card.issue_number] = card

    def release(self, card: Card) -> None:
        """Detach a card from this column. No provider call."""
        if self._cards.get(card.issue_number) is card:
            del self._cards[card.issue_number]
        if card.column is self:
            card.column = None

    async def has_issue(self, issue_number: int) -> bool:
        await self.ensure_loaded()
        return issue_number in self._cards

    async def get_card(self, issue_number: int) -> Card | None:
        await self.ensure_loaded()
        return self._cards.get(issue_number)

    async def add_card(self, card: Card, issue: Issue) -> Card:
        """Create the provider card for an issue and attach the card here."""
        await self.ensure_loaded()
        created = await self.client.create_card(self.id, issue)
        card.card_id = created.id
        self.adopt(card)
        logger.info("Added card for issue #%s to column %s", card.issue_number, self.name)
        return card

    async def remove_card(self, card: Card) -> None:
        """Delete a card from the provider, then from this column.

        Raises:
            ProviderError: If the provider call fails. The card stays.
        """
        if card.card_id is not None:
            await self.client.delete_card(card.card_id)
        self.release(card)
        logger.info("Removed card for issue #%s from column %s", card.issue_number, self.name)

    async def move(self, position: str) -> bool:
        """Move the column to "first", "last" or "after:<column id>".

        Placement after another column is advisory: a provider failure is
        logged and reported as False.

        Raises:
            ProviderError: If a "first" or "last" move fails.
        """
        try:
            await self.client.move_column(self.id, position)
        except ProviderError as e:
            if not position.startswith("after:"):
                raise
            logger.warning("Could not move column %s to %s: %s", self.name, position, e)
            return False
        logger.debug("Moved column %s to %s", self.name, position)
        return True

    def snapshot(self) -> ColumnSnapshot:
        return ColumnSnapshot(
            name=self.name,
            display_name=self.display_name,
            column_id=self.id,
            cards=[card.snapshot() for card in self._cards.values()],
        )

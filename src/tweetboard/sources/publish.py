"""Publishing - Tweets the cards that reach the outbound column."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Protocol

from tweetboard.events import EventEmitter, EventType
from tweetboard.sources.base import Source

if TYPE_CHECKING:
    from tweetboard.board import Board, Card
    from tweetboard.config import TweetboardConfig

logger = logging.getLogger(__name__)


class Publisher(Protocol):
    """Interface for the publishing client."""

    async def post(self, text: str, reply_to: str | None = None) -> str:
        """Post a tweet, optionally as a reply. Returns the tweet URL."""
        ...

    async def repost(self, target_id: str) -> str:
        """Retweet a status. Returns the URL of the retweeted status."""
        ...


class PublishSource(Source):
    """Publishes every eligible card of the outbound column on board updates.

    Updates can arrive while an earlier round is still publishing. A card is
    claimed with ``Card.begin_publishing`` before its publish call is made, so
    overlapping rounds never publish the same card twice.
    """

    def __init__(self, board: Board, publisher: Publisher, config: TweetboardConfig) -> None:
        super().__init__(board, config)
        self.publisher = publisher

    def start(self, events: EventEmitter | None = None) -> None:
        """Subscribe to board updates.

        Args:
            events: Emitter delivering board events. Defaults to the board's.
        """
        events = events if events is not None else self.board.events
        self._subscribe(events, EventType.UPDATED, self._on_updated)

    async def _on_updated(self) -> None:
        try:
            await self.publish_eligible()
        except Exception:
            logger.exception("Publishing round failed")

    async def publish_eligible(self) -> list[Card]:
        """Publish all eligible cards of the outbound column concurrently.

        Returns:
            The cards published in this round.
        """
        outbound = await self.get_column(self.config.outbound_column)
        await outbound.ensure_loaded()

        # Claiming must not suspend, see class docstring
        claimed = [
            card
            for card in list(outbound.cards.values())
            if card.can_tweet and card.begin_publishing()
        ]
        if not claimed:
            return []

        logger.info("Publishing %d card(s)", len(claimed))
        results = await asyncio.gather(*(self._publish(card) for card in claimed))
        return [card for card, published in zip(claimed, results, strict=True) if published]

    async def _publish(self, card: Card) -> bool:
        content = card.content
        if content is None:
            card.abort_publishing()
            return False

        try:
            if content.is_retweet:
                url = await self.publisher.repost(content.tweet_to_retweet or "")
            else:
                url = await self.publisher.post(content.tweet, content.reply_to)
        except Exception:
            card.abort_publishing()
            logger.exception("Tweeting card for issue #%s failed", card.issue_number)
            return False

        try:
            await self.board.card_tweeted(card, url)
        except Exception:
            logger.exception(
                "Card for issue #%s was tweeted as %s but could not be marked",
                card.issue_number,
                url,
            )
        return True

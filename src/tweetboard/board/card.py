"""Card - Publishable content wrapping one tracked issue."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tweetboard.board.content import parse_content
from tweetboard.board.exceptions import ValidationError
from tweetboard.board.models import CardSnapshot, Issue, PublishState, TweetContent

if TYPE_CHECKING:
    from tweetboard.board.column import Column

logger = logging.getLogger(__name__)


class Card:
    """A card on the board, tied to one issue.

    A card known only from the provider's card list has no issue yet; it
    can't be published until the issue is loaded with ``update``.
    """

    def __init__(
        self,
        issue_number: int,
        card_id: int | None = None,
        issue: Issue | None = None,
        tweeted_label: str = "tweeted",
    ) -> None:
        self.issue_number = issue_number
        self.card_id = card_id
        self.tweeted_label = tweeted_label
        self.issue: Issue | None = None
        self.content: TweetContent | None = None
        self.valid = False
        self.error: str | None = None
        self.publish_state = PublishState.PENDING
        self.url: str | None = None
        self.column: Column | None = None
        if issue is not None:
            self.update(issue)

    def __repr__(self) -> str:
        column = self.column.name if self.column else None
        return (
            f"<Card(issue={self.issue_number!r}, column={column!r}, "
            f"state={self.publish_state.value!r})>"
        )

    def update(self, issue: Issue) -> None:
        """Refresh the card from the current issue."""
        if issue.number != self.issue_number:
            raise ValueError(f"Issue #{issue.number} does not belong to card #{self.issue_number}")
        self.issue = issue
        if self.tweeted_label in issue.labels and self.publish_state == PublishState.PENDING:
            self.publish_state = PublishState.PUBLISHED
        self.check_validity()

    def check_validity(self) -> bool:
        """Re-derive content and validity from the issue."""
        if self.issue is None:
            self.content = None
            self.valid = False
            self.error = "Issue not loaded"
            return False
        try:
            self.content = parse_content(self.issue)
        except ValidationError as e:
            if self.valid or self.error != str(e):
                logger.info("Card #%s is invalid: %s", self.issue_number, e)
            self.content = None
            self.valid = False
            self.error = str(e)
        else:
            self.valid = True
            self.error = None
        return self.valid

    @property
    def published(self) -> bool:
        return self.publish_state == PublishState.PUBLISHED

    @property
    def can_tweet(self) -> bool:
        """Valid, not yet published or publishing, and in the outbound column."""
        return (
            self.valid
            and self.publish_state == PublishState.PENDING
            and self.column is not None
            and self.column.is_outbound
        )

    def begin_publishing(self) -> bool:
        """Claim the card for publishing.

        Returns:
            True if the card moved from pending to publishing, False if it was
            already being published or is published.
        """
        if self.publish_state != PublishState.PENDING:
            return False
        self.publish_state = PublishState.PUBLISHING
        return True

    def abort_publishing(self) -> None:
        """Release a claim after the publish call failed."""
        if self.publish_state == PublishState.PUBLISHING:
            self.publish_state = PublishState.PENDING

    def mark_published(self, url: str) -> None:
        self.publish_state = PublishState.PUBLISHED
        self.url = url

    def snapshot(self) -> CardSnapshot:
        return CardSnapshot(
            issue_number=self.issue_number,
            card_id=self.card_id,
            column=self.column.name if self.column else None,
            title=self.issue.title if self.issue else "",
            kind=self.content.kind.value if self.content else "",
            valid=self.valid,
            publish_state=self.publish_state.value,
            url=self.url,
            error=self.error,
        )

"""Data models for the board."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class IssueState(StrEnum):
    """State of a tracked issue."""

    OPEN = "open"
    CLOSED = "closed"


class TweetKind(StrEnum):
    """What publishing a card does."""

    PLAIN = "plain"
    REPLY = "reply"
    RETWEET = "retweet"


class PublishState(StrEnum):
    """Publish progress of a card."""

    PENDING = "pending"
    PUBLISHING = "publishing"
    PUBLISHED = "published"


@dataclass(frozen=True)
class Issue:
    """A GitHub issue as seen by the board."""

    number: int
    id: int  # REST id, used to link a card to the issue
    title: str
    body: str = ""
    state: IssueState = IssueState.OPEN
    labels: tuple[str, ...] = ()
    html_url: str = ""
    updated_at: str = ""

    @property
    def is_closed(self) -> bool:
        return self.state == IssueState.CLOSED


@dataclass(frozen=True)
class TweetContent:
    """Publishable payload derived from an issue.

    Attributes:
        kind: Plain tweet, reply or retweet.
        text: Tweet text, empty for retweets.
        target_id: Status ID replied to or retweeted.
    """

    kind: TweetKind = TweetKind.PLAIN
    text: str = ""
    target_id: str | None = None

    @property
    def is_retweet(self) -> bool:
        return self.kind == TweetKind.RETWEET

    @property
    def is_reply(self) -> bool:
        return self.kind == TweetKind.REPLY

    @property
    def tweet(self) -> str:
        return self.text

    @property
    def reply_to(self) -> str | None:
        return self.target_id if self.is_reply else None

    @property
    def tweet_to_retweet(self) -> str | None:
        return self.target_id if self.is_retweet else None


@dataclass
class CardSnapshot:
    """Serializable view of a card."""

    issue_number: int
    card_id: int | None
    column: str | None
    title: str
    kind: str
    valid: bool
    publish_state: str
    url: str | None = None
    error: str | None = None


@dataclass
class ColumnSnapshot:
    """Serializable view of a column and its cards."""

    name: str
    display_name: str
    column_id: int
    cards: list[CardSnapshot] = field(default_factory=list)

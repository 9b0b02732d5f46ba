"""Board - Project board, columns and cards for the tweet queue."""

from tweetboard.board.board import Board
from tweetboard.board.card import Card
from tweetboard.board.column import Column
from tweetboard.board.content import parse_content
from tweetboard.board.exceptions import (
    BoardError,
    NotFoundError,
    ProviderError,
    ValidationError,
)
from tweetboard.board.models import (
    CardSnapshot,
    ColumnSnapshot,
    Issue,
    IssueState,
    PublishState,
    TweetContent,
    TweetKind,
)
from tweetboard.board.provider import (
    BoardProvider,
    ProviderBoard,
    ProviderCard,
    ProviderColumn,
)

__all__ = [
    "Board",
    "BoardError",
    "BoardProvider",
    "Card",
    "CardSnapshot",
    "Column",
    "ColumnSnapshot",
    "Issue",
    "IssueState",
    "NotFoundError",
    "ProviderBoard",
    "ProviderCard",
    "ProviderColumn",
    "ProviderError",
    "PublishState",
    "TweetContent",
    "TweetKind",
    "ValidationError",
    "parse_content",
]

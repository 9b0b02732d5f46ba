"""Interface the board expects from the kanban provider."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from tweetboard.board.models import Issue


@dataclass(frozen=True)
class ProviderBoard:
    """A project board on the provider."""

    id: int
    name: str
    number: int | None = None


@dataclass(frozen=True)
class ProviderColumn:
    """A column on the provider."""

    id: int
    name: str


@dataclass(frozen=True)
class ProviderCard:
    """A card on the provider. ``issue_number`` is None for note cards."""

    id: int
    issue_number: int | None = None
    note: str | None = None


class BoardProvider(Protocol):
    """Raw board/column/card calls. Failures raise ProviderError."""

    async def list_boards(self) -> list[ProviderBoard]:
        """List the boards of the configured repository."""
        ...

    async def create_board(self, name: str, body: str) -> ProviderBoard:
        """Create a board."""
        ...

    async def list_columns(self, board_id: int) -> list[ProviderColumn]:
        """List the columns of a board, in visual order."""
        ...

    async def create_column(self, board_id: int, name: str) -> ProviderColumn:
        """Create a column at the end of a board."""
        ...

    async def move_column(self, column_id: int, position: str) -> None:
        """Move a column to "first", "last" or "after:<column id>"."""
        ...

    async def list_cards(self, column_id: int) -> list[ProviderCard]:
        """List the cards of a column."""
        ...

    async def create_card(self, column_id: int, issue: Issue) -> ProviderCard:
        """Create a card linked to an issue."""
        ...

    async def move_card(self, card_id: int, column_id: int) -> None:
        """Move a card to the top of another column."""
        ...

    async def delete_card(self, card_id: int) -> None:
        """Delete a card."""
        ...

    async def annotate_card(self, card_id: int, issue: Issue, url: str, label: str) -> None:
        """Record on the provider that the card's issue was published at ``url``."""
        ...

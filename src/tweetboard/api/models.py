"""Pydantic models for REST API."""

from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict

T = TypeVar("T")


class APIResponse(BaseModel, Generic[T]):
    """Standard API response wrapper."""

    data: T | None = None
    error: str | None = None


class CardResponse(BaseModel):
    """Response model for a card."""

    model_config = ConfigDict(from_attributes=True)

    issue_number: int
    card_id: int | None
    column: str | None
    title: str
    kind: str
    valid: bool
    publish_state: str
    url: str | None
    error: str | None


class ColumnResponse(BaseModel):
    """Response model for a column and its cards."""

    model_config = ConfigDict(from_attributes=True)

    name: str
    display_name: str
    column_id: int
    cards: list[CardResponse]


class BoardResponse(BaseModel):
    """Response model for the board."""

    ready: bool
    board_id: int | None
    columns: list[ColumnResponse]


def board_to_response(snapshot: dict[str, Any]) -> BoardResponse:
    """Convert a board snapshot to BoardResponse."""
    return BoardResponse(
        ready=snapshot["ready"],
        board_id=snapshot["board_id"],
        columns=[ColumnResponse.model_validate(c) for c in snapshot["columns"]],
    )


class SyncResponse(BaseModel):
    """Response model for a manual sync."""

    issue_events: int
    board_changed: bool


class SetupResponse(BaseModel):
    """Response model for a setup run."""

    ready: bool
    missing_columns: list[str]

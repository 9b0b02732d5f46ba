"""Configuration for a tweetboard deployment."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

# Column display names on the board, keyed by logical name
DEFAULT_COLUMNS = {
    "ideas": "Ideas",
    "reactions": "Needs Reaction",
    "events": "Events",
    "toTweet": "To Tweet",
    "tweeted": "Tweeted",
}

# Visual placement per logical column: "first", "last", or the logical name
# of the column it should follow. Applied in declaration order.
DEFAULT_COLUMN_ORDER = {
    "toTweet": "last",
    "tweeted": "last",
    "events": "first",
    "reactions": "first",
    "ideas": "first",
}

_PLACEMENTS = ("first", "last")


class TweetboardConfig(BaseModel):
    """Settings for the board, the issue sync and the publisher."""

    owner: str = Field(..., min_length=1)
    repo: str = Field(..., min_length=1)
    project_name: str = Field(default="Tweets", min_length=1)
    project_body: str = "Twitter Content Queue"
    columns: dict[str, str] = Field(default_factory=dict, validate_default=True)
    column_order: dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_COLUMN_ORDER))
    default_column: str = "ideas"
    outbound_column: str = "toTweet"
    unmanaged_columns: list[str] = Field(default_factory=lambda: ["tweeted"])
    tweeted_label: str = "tweeted"
    poll_interval: float = Field(default=60.0, gt=0)
    closed_lookback_days: int = Field(default=14, ge=0)

    @field_validator("columns", mode="after")
    @classmethod
    def _merge_default_columns(cls, value: dict[str, str]) -> dict[str, str]:
        return {**DEFAULT_COLUMNS, **value}

    @model_validator(mode="after")
    def _check_column_names(self) -> TweetboardConfig:
        for name in (self.default_column, self.outbound_column, *self.unmanaged_columns):
            if name not in self.columns:
                raise ValueError(f"Unknown column '{name}'")
        for name, position in self.column_order.items():
            if position not in _PLACEMENTS and position not in self.columns:
                raise ValueError(f"Column '{name}' placed after unknown column '{position}'")
        display_names = list(self.columns.values())
        if len(set(display_names)) != len(display_names):
            raise ValueError("Two columns share a display name")
        return self

    @property
    def managed_columns(self) -> list[str]:
        """Logical names whose cards follow the issue lifecycle."""
        return [name for name in self.columns if name not in self.unmanaged_columns]

    def logical_name(self, display_name: str) -> str | None:
        """Map a board column name back to its logical name."""
        for name, display in self.columns.items():
            if display == display_name:
                return name
        return None


def load_config(path: str | Path) -> TweetboardConfig:
    """Load configuration from a JSON file."""
    return TweetboardConfig.model_validate_json(Path(path).read_text(encoding="utf-8"))


def get_github_token() -> str:
    """Get GitHub token from environment or gh CLI."""
    token = os.environ.get("GITHUB_TOKEN")
    if token:
        return token
    try:
        result = subprocess.run(
            ["gh", "auth", "token"],
            capture_output=True,
            text=True,
            check=True,
        )
        return result.stdout.strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        return ""

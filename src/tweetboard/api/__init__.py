"""REST API for tweetboard."""

from tweetboard.api.app import app, create_app
from tweetboard.api.models import (
    APIResponse,
    BoardResponse,
    CardResponse,
    ColumnResponse,
)

__all__ = [
    "APIResponse",
    "BoardResponse",
    "CardResponse",
    "ColumnResponse",
    "app",
    "create_app",
]

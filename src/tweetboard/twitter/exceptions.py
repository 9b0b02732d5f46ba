"""Custom exceptions for the Twitter client."""


class TwitterError(Exception):
    """Base exception for Twitter client errors."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DuplicateTweetError(TwitterError):
    """Twitter rejected the tweet as a duplicate."""

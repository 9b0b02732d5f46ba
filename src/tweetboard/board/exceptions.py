"""Custom exceptions for the board."""


class BoardError(Exception):
    """Base exception for board errors."""


class NotFoundError(BoardError):
    """Board, column or card does not exist."""


class ProviderError(BoardError):
    """A call to the board provider failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ValidationError(BoardError):
    """Card content can't be published."""

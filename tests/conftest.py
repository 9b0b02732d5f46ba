"""Shared pytest fixtures and configuration."""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from fakes import FakeProvider, FakePublisher

from tweetboard.board import Board
from tweetboard.config import TweetboardConfig


# Register custom markers
def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for test categorization."""
    config.addinivalue_line("markers", "unit: fast tests with no external dependencies")
    config.addinivalue_line("markers", "integration: component interaction tests")


@pytest.fixture
def config() -> TweetboardConfig:
    """Configuration with the default columns."""
    return TweetboardConfig(owner="owner", repo="repo", project_name="Tweets")


@pytest.fixture
def provider() -> FakeProvider:
    """Empty in-memory board provider."""
    return FakeProvider()


@pytest.fixture
def publisher() -> FakePublisher:
    return FakePublisher()


@pytest_asyncio.fixture
async def board(provider: FakeProvider, config: TweetboardConfig) -> AsyncGenerator[Board, None]:
    """A board that has completed setup against the fake provider."""
    board = Board(provider, config)
    assert await board.setup()
    yield board
    await board.close()

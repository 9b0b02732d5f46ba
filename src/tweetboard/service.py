"""Service - Wires the board, the issue tracker and the sources together."""

from __future__ import annotations

import asyncio
import logging
import os
from typing import TYPE_CHECKING, Any

from tweetboard.board import Board, BoardError
from tweetboard.config import get_github_token
from tweetboard.github import GitHubIssueTracker, GitHubProjectsClient
from tweetboard.sources import IssueSyncSource, PublishSource
from tweetboard.twitter import TwitterClient

if TYPE_CHECKING:
    from tweetboard.board import BoardProvider
    from tweetboard.config import TweetboardConfig
    from tweetboard.sources import Publisher

logger = logging.getLogger(__name__)


class Service:
    """A running tweetboard: board setup, issue polling and publishing.

    ``start`` wires the sources, kicks off board setup and polls the issue
    tracker and the board every ``config.poll_interval`` seconds.
    """

    def __init__(
        self,
        config: TweetboardConfig,
        board_client: BoardProvider,
        tracker: GitHubIssueTracker,
        publisher: Publisher,
    ) -> None:
        self.config = config
        self.board_client = board_client
        self.tracker = tracker
        self.publisher = publisher
        self.board = Board(board_client, config)
        self.issue_sync = IssueSyncSource(self.board, tracker, config)
        self.publish = PublishSource(self.board, publisher, config)
        self._poll_task: asyncio.Task[None] | None = None

    @classmethod
    def from_env(cls, config: TweetboardConfig) -> Service:
        """Build a service with real clients, reading tokens from the environment.

        Raises:
            RuntimeError: If a token is missing.
        """
        github_token = get_github_token()
        if not github_token:
            raise RuntimeError("GitHub token not configured")
        twitter_token = os.environ.get("TWITTER_ACCESS_TOKEN", "")
        twitter_user = os.environ.get("TWITTER_USER_ID", "")
        if not twitter_token or not twitter_user:
            raise RuntimeError("TWITTER_ACCESS_TOKEN and TWITTER_USER_ID are required")

        return cls(
            config,
            board_client=GitHubProjectsClient(config.owner, config.repo, github_token),
            tracker=GitHubIssueTracker(
                config.owner,
                config.repo,
                github_token,
                closed_lookback_days=config.closed_lookback_days,
            ),
            publisher=TwitterClient(twitter_token, twitter_user),
        )

    @property
    def running(self) -> bool:
        return self._poll_task is not None and not self._poll_task.done()

    async def start(self) -> None:
        """Wire the sources and start setup and polling."""
        self.publish.start()
        self.issue_sync.start()
        self.board.start()
        self._poll_task = asyncio.create_task(self._poll_loop())
        logger.info("Service started for %s/%s", self.config.owner, self.config.repo)

    async def sync_once(self) -> dict[str, Any]:
        """Poll the issue tracker and resync the board once.

        A board whose setup failed is set up again first.
        """
        if not self.board.is_ready:
            await self.board.setup()
        events = await self.tracker.poll()
        changed = await self.board.sync_cards()
        return {"issue_events": events, "board_changed": changed}

    async def _poll_loop(self) -> None:
        while True:
            try:
                await self.sync_once()
            except BoardError as e:
                logger.error("Sync failed: %s", e)
            except Exception:
                logger.exception("Sync failed unexpectedly")
            await asyncio.sleep(self.config.poll_interval)

    async def stop(self) -> None:
        """Stop polling, unwire the sources and close the clients."""
        if self._poll_task is not None:
            self._poll_task.cancel()
            try:
                await self._poll_task
            except asyncio.CancelledError:
                pass
            self._poll_task = None
        await self.issue_sync.stop()
        await self.publish.stop()
        await self.tracker.events.close()
        await self.board.close()
        for client in (self.board_client, self.tracker, self.publisher):
            close = getattr(client, "close", None)
            if close is not None:
                await close()
        logger.info("Service stopped")

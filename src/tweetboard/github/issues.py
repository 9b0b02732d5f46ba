"""GitHub issues as the source of issue lifecycle events."""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime, timedelta
from typing import Any

import httpx

from tweetboard.board.models import Issue, IssueState
from tweetboard.events import EventEmitter, EventType
from tweetboard.github.client import GITHUB_API_URL, GitHubClient

logger = logging.getLogger(__name__)


def issue_from_json(data: dict[str, Any]) -> Issue:
    """Convert a REST issue object."""
    return Issue(
        number=data["number"],
        id=data["id"],
        title=data.get("title") or "",
        body=data.get("body") or "",
        state=IssueState(data.get("state", "open")),
        labels=tuple(label["name"] for label in data.get("labels", [])),
        html_url=data.get("html_url", ""),
        updated_at=data.get("updated_at", ""),
    )


def _timestamp(moment: datetime) -> str:
    return moment.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


class GitHubIssueTracker(GitHubClient):
    """Polls the repository's issues and emits lifecycle events.

    The first successful poll only records the open and recently closed
    issues, available through ``open_issues`` and ``closed_issues``. Later
    polls diff against what is known and emit ``opened`` (new or reopened),
    ``updated`` and ``closed`` with the issue as argument.
    """

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        closed_lookback_days: int = 14,
        events: EventEmitter | None = None,
        base_url: str = GITHUB_API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        super().__init__(owner, repo, token, base_url=base_url, transport=transport)
        self.closed_lookback_days = closed_lookback_days
        self.events = events if events is not None else EventEmitter("issues")
        self._known: dict[int, Issue] = {}
        self._since: str | None = None
        self._open: list[Issue] = []
        self._closed: list[Issue] = []
        self._loaded = asyncio.Event()

    @property
    def first_run(self) -> bool:
        return not self._loaded.is_set()

    async def open_issues(self) -> list[Issue]:
        await self._loaded.wait()
        return list(self._open)

    async def closed_issues(self) -> list[Issue]:
        await self._loaded.wait()
        return list(self._closed)

    def known_issue(self, number: int) -> Issue | None:
        return self._known.get(number)

    async def _list_issues(self, **params: Any) -> list[Issue]:
        data = await self._get_all(f"{self.repo_path}/issues", params)
        return [issue_from_json(item) for item in data if "pull_request" not in item]

    async def poll(self) -> int:
        """Fetch issue changes.

        Returns:
            Number of events emitted.

        Raises:
            ProviderError: If the issues could not be fetched.
        """
        if not self._loaded.is_set():
            await self._load()
            return 0

        issues = await self._list_issues(
            state="all", since=self._since, sort="updated", direction="asc"
        )
        emitted = 0
        for issue in issues:
            previous = self.known_issue(issue.number)
            # "since" is inclusive, so the last seen issue comes back
            if previous is not None and previous.updated_at == issue.updated_at:
                continue
            self._known[issue.number] = issue
            self._advance(issue.updated_at)
            event = self._classify(previous, issue)
            if event is not None:
                self.events.emit(event, issue)
                emitted += 1
        if emitted:
            logger.info("Emitted %d issue event(s)", emitted)
        return emitted

    async def _load(self) -> None:
        started = datetime.now(UTC)
        cutoff = started - timedelta(days=self.closed_lookback_days)
        open_issues = await self._list_issues(state="open")
        closed_issues = await self._list_issues(state="closed", since=_timestamp(cutoff))

        self._since = _timestamp(started)
        for issue in (*open_issues, *closed_issues):
            self._known[issue.number] = issue
            self._advance(issue.updated_at)
        self._open = open_issues
        self._closed = closed_issues
        logger.info(
            "Loaded %d open and %d recently closed issue(s)", len(open_issues), len(closed_issues)
        )
        self._loaded.set()

    def _advance(self, updated_at: str) -> None:
        if updated_at and (self._since is None or updated_at > self._since):
            self._since = updated_at

    @staticmethod
    def _classify(previous: Issue | None, issue: Issue) -> EventType | None:
        if issue.is_closed:
            if previous is not None and previous.is_closed:
                return None
            return EventType.CLOSED
        if previous is None or previous.is_closed:
            return EventType.OPENED
        return EventType.UPDATED

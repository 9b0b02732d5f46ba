"""GitHub classic projects as the board provider."""

from __future__ import annotations

import logging
import re
from typing import Any

from tweetboard.board.models import Issue
from tweetboard.board.provider import ProviderBoard, ProviderCard, ProviderColumn
from tweetboard.github.client import GitHubClient

logger = logging.getLogger(__name__)

_ISSUE_URL_RE = re.compile(r"/issues/(\d+)$")


def _card_from_json(data: dict[str, Any]) -> ProviderCard:
    issue_number = None
    match = _ISSUE_URL_RE.search(data.get("content_url") or "")
    if match is not None:
        issue_number = int(match.group(1))
    return ProviderCard(id=data["id"], issue_number=issue_number, note=data.get("note"))


class GitHubProjectsClient(GitHubClient):
    """Board provider backed by the project boards of a repository."""

    async def list_boards(self) -> list[ProviderBoard]:
        data = await self._get_all(f"{self.repo_path}/projects", {"state": "open"})
        return [ProviderBoard(id=p["id"], name=p["name"], number=p.get("number")) for p in data]

    async def create_board(self, name: str, body: str) -> ProviderBoard:
        response = await self._request(
            "POST",
            f"{self.repo_path}/projects",
            expected=(201,),
            json={"name": name, "body": body},
        )
        data = response.json()
        logger.info("Created project %s (id=%s)", name, data["id"])
        return ProviderBoard(id=data["id"], name=data["name"], number=data.get("number"))

    async def list_columns(self, board_id: int) -> list[ProviderColumn]:
        data = await self._get_all(f"/projects/{board_id}/columns")
        return [ProviderColumn(id=c["id"], name=c["name"]) for c in data]

    async def create_column(self, board_id: int, name: str) -> ProviderColumn:
        response = await self._request(
            "POST",
            f"/projects/{board_id}/columns",
            expected=(201,),
            json={"name": name},
        )
        data = response.json()
        return ProviderColumn(id=data["id"], name=data["name"])

    async def move_column(self, column_id: int, position: str) -> None:
        await self._request(
            "POST",
            f"/projects/columns/{column_id}/moves",
            expected=(201,),
            json={"position": position},
        )

    async def list_cards(self, column_id: int) -> list[ProviderCard]:
        data = await self._get_all(
            f"/projects/columns/{column_id}/cards", {"archived_state": "not_archived"}
        )
        return [_card_from_json(c) for c in data]

    async def create_card(self, column_id: int, issue: Issue) -> ProviderCard:
        response = await self._request(
            "POST",
            f"/projects/columns/{column_id}/cards",
            expected=(201,),
            json={"content_id": issue.id, "content_type": "Issue"},
        )
        card = _card_from_json(response.json())
        if card.issue_number is None:
            card = ProviderCard(id=card.id, issue_number=issue.number)
        return card

    async def move_card(self, card_id: int, column_id: int) -> None:
        await self._request(
            "POST",
            f"/projects/columns/cards/{card_id}/moves",
            expected=(201,),
            json={"position": "top", "column_id": column_id},
        )

    async def delete_card(self, card_id: int) -> None:
        await self._request("DELETE", f"/projects/columns/cards/{card_id}", expected=(204,))

    async def annotate_card(self, card_id: int, issue: Issue, url: str, label: str) -> None:
        """Comment the tweet URL on the issue and label it as tweeted."""
        await self._request(
            "POST",
            f"{self.repo_path}/issues/{issue.number}/comments",
            expected=(201,),
            json={"body": f"Tweeted: {url}"},
        )
        await self._request(
            "POST",
            f"{self.repo_path}/issues/{issue.number}/labels",
            json={"labels": [label]},
        )
        logger.debug("Annotated card %s (issue #%s) with %s", card_id, issue.number, url)

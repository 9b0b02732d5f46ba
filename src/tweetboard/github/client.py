"""Shared async HTTP plumbing for the GitHub REST API."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from tweetboard.board.exceptions import NotFoundError, ProviderError
from tweetboard.logging import sanitize_for_log

logger = logging.getLogger(__name__)

GITHUB_API_URL = "https://api.github.com"


class GitHubClient:
    """Base for GitHub REST clients bound to one repository."""

    def __init__(
        self,
        owner: str,
        repo: str,
        token: str,
        base_url: str = GITHUB_API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            owner: Repository owner.
            repo: Repository name.
            token: GitHub token with repo and project scope.
            base_url: GitHub API base URL (for testing/enterprise).
            transport: httpx transport override (for testing).
        """
        self.owner = owner
        self.repo = repo
        self.token = token
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client for the GitHub API."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                },
                timeout=30.0,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        url: str,
        expected: tuple[int, ...] = (200,),
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request and check the status code.

        Raises:
            NotFoundError: On 404.
            ProviderError: On any other unexpected status or a transport error.
        """
        try:
            response = await self.client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            raise ProviderError(f"{method} {url} failed: {sanitize_for_log(str(e))}") from e

        if response.status_code in expected:
            return response
        message = f"{method} {url} failed: {response.status_code} - {response.text}"
        logger.debug("%s", sanitize_for_log(message))
        if response.status_code == 404:
            raise NotFoundError(message)
        raise ProviderError(message, status_code=response.status_code)

    async def _get_all(self, url: str, params: dict[str, Any] | None = None) -> list[Any]:
        """GET every page of a list endpoint."""
        items: list[Any] = []
        next_url: str | None = url
        next_params: dict[str, Any] | None = {"per_page": 100, **(params or {})}
        while next_url is not None:
            response = await self._request("GET", next_url, params=next_params)
            items.extend(response.json())
            next_url = response.links.get("next", {}).get("url")
            # The next link carries the query string already
            next_params = None
        return items

"""TwitterClient - Posts tweets and retweets through the Twitter API v2."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from tweetboard.logging import sanitize_for_log
from tweetboard.twitter.exceptions import DuplicateTweetError, TwitterError

logger = logging.getLogger(__name__)

TWITTER_API_URL = "https://api.twitter.com/2"
STATUS_URL = "https://twitter.com/i/web/status/{id}"


class TwitterClient:
    """Publishing client for one Twitter account.

    Uses an OAuth 2.0 user access token with tweet.write scope.
    """

    def __init__(
        self,
        token: str,
        user_id: str,
        base_url: str = TWITTER_API_URL,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize Twitter client.

        Args:
            token: OAuth 2.0 user access token
            user_id: Numeric ID of the account (needed for retweets)
            base_url: API base URL (for testing)
            transport: httpx transport override (for testing)
        """
        self.token = token
        self.user_id = user_id
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def client(self) -> httpx.AsyncClient:
        """Get or create HTTP client for the Twitter API."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={"Authorization": f"Bearer {self.token}"},
                timeout=30.0,
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self.client.post(url, json=payload)
        except httpx.HTTPError as e:
            raise TwitterError(f"POST {url} failed: {sanitize_for_log(str(e))}") from e

        if response.status_code not in (200, 201):
            message = f"POST {url} failed: {response.status_code} - {response.text}"
            if response.status_code == 403 and "duplicate" in response.text.lower():
                raise DuplicateTweetError(message, status_code=403)
            raise TwitterError(message, status_code=response.status_code)

        data: dict[str, Any] = response.json()
        return dict(data.get("data") or {})

    async def post(self, text: str, reply_to: str | None = None) -> str:
        """Post a tweet.

        Args:
            text: Tweet text
            reply_to: Status ID to reply to

        Returns:
            URL of the new tweet

        Raises:
            TwitterError: If the tweet could not be posted
        """
        payload: dict[str, Any] = {"text": text}
        if reply_to:
            payload["reply"] = {"in_reply_to_tweet_id": reply_to}
        data = await self._post("/tweets", payload)
        tweet_id = data.get("id")
        if not tweet_id:
            raise TwitterError(f"Tweet response has no ID: {data}")
        url = STATUS_URL.format(id=tweet_id)
        logger.info("Posted tweet %s", url)
        return url

    async def repost(self, target_id: str) -> str:
        """Retweet a status.

        Returns:
            URL of the retweeted status

        Raises:
            TwitterError: If the retweet failed
        """
        data = await self._post(f"/users/{self.user_id}/retweets", {"tweet_id": target_id})
        if not data.get("retweeted"):
            raise TwitterError(f"Status {target_id} was not retweeted")
        url = STATUS_URL.format(id=target_id)
        logger.info("Retweeted %s", url)
        return url

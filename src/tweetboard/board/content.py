"""Derive tweet content from an issue.

The issue body is the tweet. A first line of ``retweet: <status>`` turns the
card into a retweet, ``reply-to: <status>`` into a reply with the rest of the
body as text. ``<status>`` is a status URL or a bare status ID.
"""

from __future__ import annotations

import re

from tweetboard.board.exceptions import ValidationError
from tweetboard.board.models import Issue, TweetContent, TweetKind

MAX_TWEET_LENGTH = 280
URL_LENGTH = 23  # t.co wraps every link to this length

_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_DIRECTIVE_RE = re.compile(r"^(retweet|rt|reply-to|reply)\s*:\s*(\S+)\s*$", re.IGNORECASE)
_STATUS_URL_RE = re.compile(
    r"^https?://(?:(?:www|mobile)\.)?(?:twitter|x)\.com/[^/]+/status(?:es)?/(\d+)"
)
_URL_RE = re.compile(r"https?://\S+")


def parse_status_id(ref: str) -> str:
    """Extract a status ID from a status URL or bare ID.

    Raises:
        ValidationError: If the reference is neither.
    """
    if ref.isdigit():
        return ref
    match = _STATUS_URL_RE.match(ref)
    if match is None:
        raise ValidationError(f"Not a tweet reference: {ref}")
    return match.group(1)


def tweet_length(text: str) -> int:
    """Length of a tweet as counted by Twitter, every URL weighing the same."""
    urls = _URL_RE.findall(text)
    return len(_URL_RE.sub("", text)) + URL_LENGTH * len(urls)


def parse_content(issue: Issue) -> TweetContent:
    """Build the tweet content for an issue.

    Raises:
        ValidationError: If the issue does not describe a publishable tweet.
    """
    body = _COMMENT_RE.sub("", issue.body or "").strip()
    if not body:
        body = issue.title.strip()

    lines = body.splitlines()
    match = _DIRECTIVE_RE.match(lines[0]) if lines else None
    if match is not None:
        directive, ref = match.group(1).lower(), match.group(2)
        target = parse_status_id(ref)
        if directive in ("retweet", "rt"):
            return TweetContent(kind=TweetKind.RETWEET, target_id=target)
        text = "\n".join(lines[1:]).strip()
        _check_text(text)
        return TweetContent(kind=TweetKind.REPLY, text=text, target_id=target)

    _check_text(body)
    return TweetContent(kind=TweetKind.PLAIN, text=body)


def _check_text(text: str) -> None:
    if not text:
        raise ValidationError("Tweet is empty")
    length = tweet_length(text)
    if length > MAX_TWEET_LENGTH:
        raise ValidationError(f"Tweet is {length} characters long, max is {MAX_TWEET_LENGTH}")

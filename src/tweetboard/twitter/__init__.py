"""Twitter - Publishing client."""

from tweetboard.twitter.client import TwitterClient
from tweetboard.twitter.exceptions import DuplicateTweetError, TwitterError

__all__ = [
    "DuplicateTweetError",
    "TwitterClient",
    "TwitterError",
]

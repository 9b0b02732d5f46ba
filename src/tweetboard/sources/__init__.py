"""Sources - Components driving the board from issues and publishing from it."""

from tweetboard.sources.base import Source
from tweetboard.sources.issues import IssueSyncSource, IssueTracker
from tweetboard.sources.publish import Publisher, PublishSource

__all__ = [
    "IssueSyncSource",
    "IssueTracker",
    "PublishSource",
    "Publisher",
    "Source",
]

"""GitHub - Project board provider and issue tracker."""

from tweetboard.github.client import GITHUB_API_URL, GitHubClient
from tweetboard.github.issues import GitHubIssueTracker, issue_from_json
from tweetboard.github.projects import GitHubProjectsClient

__all__ = [
    "GITHUB_API_URL",
    "GitHubClient",
    "GitHubIssueTracker",
    "GitHubProjectsClient",
    "issue_from_json",
]

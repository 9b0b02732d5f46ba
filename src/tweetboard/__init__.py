"""tweetboard - GitHub issues on a project board, tweeted from the outbound column."""

__version__ = "0.1.0"


def get_version() -> str:
    """Return the package version."""
    return __version__

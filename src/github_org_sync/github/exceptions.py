"""GitHub client exceptions.

Every failure surfaced by ``GitHubClient`` is one of these, so the
retrying executor can classify it without knowing about githubkit or httpx.
"""

from datetime import datetime


class GitHubClientError(Exception):
    """Base exception for GitHub client errors."""

    pass


class GitHubAuthenticationError(GitHubClientError):
    """Raised when authentication or authorization fails (401, 403).

    Fatal for the whole run; never retried.
    """

    pass


class GitHubRateLimitError(GitHubClientError):
    """Raised when the request quota is exhausted (403/429 with remaining=0)."""

    def __init__(self, message: str, reset_at: datetime | None = None) -> None:
        super().__init__(message)
        self.reset_at = reset_at


class GitHubNotFoundError(GitHubClientError):
    """Raised when a resource is not found (404)."""

    pass


class GitHubTransientError(GitHubClientError):
    """Raised for failures worth retrying: connection errors, timeouts, 5xx."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DataIntegrityError(Exception):
    """Raised for a remote record the store cannot accept (e.g. review without author).

    Recovered locally: the record is skipped and the sync continues.
    """

    def __init__(self, message: str, kind: str, identifier: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.identifier = identifier

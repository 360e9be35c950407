"""Pydantic schemas for GitHub Org Sync.

Typed views of GitHub API payloads consumed by the sync.
"""

from .github_api import (
    GitHubSchema,
    PullRequestDetail,
    PullRequestSummary,
    RepositorySummary,
    ReviewSummary,
    UserSummary,
)

__all__ = [
    "GitHubSchema",
    "PullRequestDetail",
    "PullRequestSummary",
    "RepositorySummary",
    "ReviewSummary",
    "UserSummary",
]

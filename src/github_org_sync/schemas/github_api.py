"""Pydantic schemas for parsing GitHub API responses.

Each fetched entity is reduced to the handful of fields the sync consumes,
so nothing downstream depends on the wire shape of githubkit models.
See: https://docs.github.com/en/rest
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class GitHubSchema(BaseModel):
    """Base for API payload schemas: unknown fields are ignored."""

    model_config = ConfigDict(extra="ignore")


class UserSummary(GitHubSchema):
    """GitHub user object from API responses."""

    id: int = Field(description="GitHub user ID")
    login: str = Field(description="GitHub username")
    avatar_url: str | None = Field(default=None, description="Avatar image URL")
    html_url: str | None = Field(default=None, description="Profile URL")
    type: str = Field(default="User", description="User type (User, Bot, Organization)")

    def to_fields(self) -> dict[str, Any]:
        """Mutable columns for the users table."""
        return {
            "login": self.login,
            "avatar_url": self.avatar_url,
            "html_url": self.html_url,
            "user_type": self.type,
        }


class RepositorySummary(GitHubSchema):
    """Repository object from GET /orgs/{org}/repos."""

    id: int = Field(description="GitHub repository ID")
    name: str = Field(description="Repository name")
    full_name: str = Field(description="owner/name")
    html_url: str = Field(description="Repository URL")
    private: bool = Field(default=False, description="Whether the repository is private")
    archived: bool = Field(default=False, description="Whether the repository is archived")
    updated_at: datetime = Field(description="Last update timestamp")

    def to_fields(self) -> dict[str, Any]:
        """Mutable columns for the repositories table."""
        return {
            "name": self.name,
            "full_name": self.full_name,
            "url": self.html_url,
            "private": self.private,
            "archived": self.archived,
        }


class PullRequestSummary(GitHubSchema):
    """Pull request object from GET /repos/{owner}/{repo}/pulls.

    The list endpoint omits stats; see PullRequestDetail.
    """

    id: int = Field(description="GitHub pull request ID")
    number: int = Field(description="PR number")
    title: str = Field(description="PR title")
    state: str = Field(description="PR state (open, closed)")
    user: UserSummary | None = Field(default=None, description="PR author")
    created_at: datetime | None = Field(default=None, description="When PR was created")
    updated_at: datetime = Field(description="Last update timestamp")
    closed_at: datetime | None = Field(default=None, description="When PR was closed")
    merged_at: datetime | None = Field(default=None, description="When PR was merged")


class PullRequestDetail(PullRequestSummary):
    """Pull request object from GET /repos/{owner}/{repo}/pulls/{number}."""

    additions: int = Field(default=0, description="Lines added")
    deletions: int = Field(default=0, description="Lines deleted")
    changed_files: int = Field(default=0, description="Number of files changed")
    commits: int = Field(default=0, description="Number of commits")

    def to_fields(self) -> dict[str, Any]:
        """Mutable columns for the pull_requests table (cursor excluded)."""
        return {
            "number": self.number,
            "title": self.title,
            "state": self.state,
            "author_login": self.user.login if self.user else None,
            "pr_updated_at": self.updated_at,
            "closed_at": self.closed_at,
            "merged_at": self.merged_at,
            "additions": self.additions,
            "deletions": self.deletions,
            "changed_files": self.changed_files,
            "commits_count": self.commits,
        }


class ReviewSummary(GitHubSchema):
    """Review object from GET /repos/{owner}/{repo}/pulls/{number}/reviews.

    ``user`` is null for reviews left by deleted accounts.
    """

    id: int = Field(description="Review ID")
    user: UserSummary | None = Field(default=None, description="Reviewer")
    state: str = Field(description="APPROVED, CHANGES_REQUESTED, COMMENTED, ...")
    submitted_at: datetime | None = Field(default=None, description="When review was submitted")

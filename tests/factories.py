"""Factory functions for creating test data.

This module provides factory functions for:
- GitHub API payload dicts (repositories, pull requests, reviews, users)
- The matching Pydantic schemas
- Quota snapshots

Design principles:
- Factories provide sensible defaults that can be overridden
- Payload factories return dicts shaped like the REST API responses
"""

from datetime import UTC, datetime, timedelta
from typing import Any

from github_org_sync.github.rate_limit import QuotaSnapshot
from github_org_sync.schemas import (
    PullRequestDetail,
    PullRequestSummary,
    RepositorySummary,
    ReviewSummary,
    UserSummary,
)
from tests.conftest import NOW, T1_ISO, T2_ISO


def _iso(value: datetime | str) -> str:
    if isinstance(value, str):
        return value
    return value.astimezone(UTC).strftime("%Y-%m-%dT%H:%M:%SZ")


# -----------------------------------------------------------------------------
# Payload Factories
# -----------------------------------------------------------------------------
def make_github_user(
    id: int = 1001,
    login: str = "octocat",
    **overrides: Any,
) -> dict[str, Any]:
    """Create a GitHub user payload."""
    data: dict[str, Any] = {
        "id": id,
        "login": login,
        "avatar_url": f"https://avatars.githubusercontent.com/u/{id}",
        "html_url": f"https://github.com/{login}",
        "type": "User",
    }
    data.update(overrides)
    return data


def make_github_repo(
    id: int = 101,
    name: str = "next.js",
    *,
    org: str = "vercel",
    updated_at: datetime | str = T2_ISO,
    **overrides: Any,
) -> dict[str, Any]:
    """Create a repository payload as returned by GET /orgs/{org}/repos."""
    data: dict[str, Any] = {
        "id": id,
        "name": name,
        "full_name": f"{org}/{name}",
        "html_url": f"https://github.com/{org}/{name}",
        "private": False,
        "archived": False,
        "updated_at": _iso(updated_at),
    }
    data.update(overrides)
    return data


def make_github_pr(
    id: int = 5001,
    number: int = 1,
    *,
    updated_at: datetime | str = T2_ISO,
    **overrides: Any,
) -> dict[str, Any]:
    """Create a pull request payload with detail stats; pass ``user=None`` for no author."""
    data: dict[str, Any] = {
        "id": id,
        "number": number,
        "title": f"Change number {number}",
        "state": "open",
        "user": make_github_user(),
        "created_at": T1_ISO,
        "updated_at": _iso(updated_at),
        "closed_at": None,
        "merged_at": None,
        "additions": 10,
        "deletions": 2,
        "changed_files": 3,
        "commits": 1,
    }
    data.update(overrides)
    return data


def make_github_review(
    id: int = 9001,
    *,
    state: str = "APPROVED",
    submitted_at: datetime | str = T2_ISO,
    **overrides: Any,
) -> dict[str, Any]:
    """Create a review payload; pass ``user=None`` for a deleted account."""
    data: dict[str, Any] = {
        "id": id,
        "user": make_github_user(id=2002, login="reviewer"),
        "state": state,
        "submitted_at": _iso(submitted_at),
    }
    data.update(overrides)
    return data


# -----------------------------------------------------------------------------
# Schema Factories
# -----------------------------------------------------------------------------
def make_user(**kwargs: Any) -> UserSummary:
    return UserSummary.model_validate(make_github_user(**kwargs))


def make_repo(**kwargs: Any) -> RepositorySummary:
    return RepositorySummary.model_validate(make_github_repo(**kwargs))


def make_pr_summary(**kwargs: Any) -> PullRequestSummary:
    return PullRequestSummary.model_validate(make_github_pr(**kwargs))


def make_pr_detail(**kwargs: Any) -> PullRequestDetail:
    return PullRequestDetail.model_validate(make_github_pr(**kwargs))


def make_review(**kwargs: Any) -> ReviewSummary:
    return ReviewSummary.model_validate(make_github_review(**kwargs))


def make_quota(
    remaining: int = 5000,
    limit: int = 5000,
    reset_in: float = 3600.0,
    *,
    now: datetime = NOW,
) -> QuotaSnapshot:
    """Create a quota snapshot resetting ``reset_in`` seconds after ``now``."""
    return QuotaSnapshot(
        limit=limit,
        remaining=remaining,
        reset_at=now + timedelta(seconds=reset_in),
    )

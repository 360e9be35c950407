"""Async GitHub API client wrapper using githubkit.

This module provides a typed async interface to the handful of REST
endpoints the sync needs: organization repositories, pull requests,
reviews and the free quota query. githubkit's own retry is disabled;
retry policy lives in the RetryingExecutor.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from datetime import UTC, datetime, timedelta
from typing import Any, Literal

from githubkit import GitHub
from githubkit.exception import RequestError, RequestFailed, RequestTimeout
from pydantic import ValidationError

from github_org_sync.logging import get_logger
from github_org_sync.schemas.github_api import (
    PullRequestDetail,
    PullRequestSummary,
    RepositorySummary,
    ReviewSummary,
)

from .exceptions import (
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubTransientError,
)
from .rate_limit.schemas import QuotaSnapshot

logger = get_logger(__name__)

PRState = Literal["open", "closed", "all"]

_GITHUBKIT_ERRORS = (RequestFailed, RequestTimeout, RequestError)


def split_full_name(full_name: str) -> tuple[str, str]:
    """Split ``owner/repo`` into its parts.

    Raises:
        ValueError: If full_name is not of the form owner/repo
    """
    owner, sep, repo = full_name.partition("/")
    if not sep or not owner or not repo or "/" in repo:
        raise ValueError(f"Invalid repository name: {full_name!r} (expected owner/repo)")
    return owner, repo


class GitHubClient:
    """Async GitHub API client for organization sync.

    Usage:
        async with GitHubClient(settings.github_token) as client:
            repos = await client.list_organization_repositories("vercel")
            for repo in repos:
                print(repo.full_name)
    """

    def __init__(self, token: str, *, per_page: int = 100) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub PAT sent as a static bearer token
            per_page: Page size for paginated endpoints (max 100)

        Raises:
            GitHubAuthenticationError: If the token is empty.
        """
        if not token:
            raise GitHubAuthenticationError(
                "GitHub token required. Set GITHUB_TOKEN environment variable."
            )
        self._token = token
        self._per_page = per_page
        self._client: GitHub[Any] | None = None

    @property
    def _github(self) -> GitHub[Any]:
        """Get or create the githubkit client instance."""
        if self._client is None:
            self._client = GitHub(self._token, auto_retry=False)
        return self._client

    async def close(self) -> None:
        """Drop the underlying githubkit client."""
        if self._client is not None:
            self._client = None

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        await self.close()

    # -------------------------------------------------------------------------
    # Quota
    # -------------------------------------------------------------------------
    async def get_quota(self) -> QuotaSnapshot:
        """Fetch the core request quota (does not count against it)."""
        try:
            resp = await self._github.rest.rate_limit.async_get()
            return QuotaSnapshot.from_api_response(resp.parsed_data.model_dump())
        except _GITHUBKIT_ERRORS as e:
            raise self._handle_error(e) from e

    # -------------------------------------------------------------------------
    # Repositories
    # -------------------------------------------------------------------------
    async def list_organization_repositories(
        self,
        org: str,
        *,
        since: datetime | None = None,
    ) -> list[RepositorySummary]:
        """List public repositories of an organization.

        The endpoint has no server-side time filter, so ``since`` is applied
        here: only repositories updated strictly after it are returned.

        Args:
            org: Organization login
            since: Optional cutoff

        Returns:
            List of RepositorySummary objects
        """
        try:
            repos: list[RepositorySummary] = []

            repo_data: Any
            async for repo_data in self._github.paginate(
                self._github.rest.repos.async_list_for_org,
                org=org,
                type="public",
                per_page=self._per_page,
            ):
                try:
                    repo = RepositorySummary.model_validate(repo_data.model_dump())
                except ValidationError as e:
                    logger.debug("Skipping unparseable repository in {}: {}", org, e)
                    continue
                if since is not None and repo.updated_at <= since:
                    continue
                repos.append(repo)

            return repos
        except _GITHUBKIT_ERRORS as e:
            raise self._handle_error(e, resource=f"organization {org}") from e

    # -------------------------------------------------------------------------
    # Pull Requests
    # -------------------------------------------------------------------------
    async def iter_pull_requests(
        self,
        full_name: str,
        *,
        state: PRState = "all",
        since: datetime | None = None,
    ) -> AsyncIterator[PullRequestSummary]:
        """Iterate over pull requests, most recently updated first.

        With ``since``, pagination stops at the first PR updated before the
        cutoff, so untouched history is never fetched.

        Yields:
            PullRequestSummary objects (list payload, no stats)
        """
        owner, repo = split_full_name(full_name)
        try:
            pr_data: Any
            async for pr_data in self._github.paginate(
                self._github.rest.pulls.async_list,
                owner=owner,
                repo=repo,
                state=state,
                sort="updated",
                direction="desc",
                per_page=self._per_page,
            ):
                try:
                    pr = PullRequestSummary.model_validate(pr_data.model_dump())
                except ValidationError as e:
                    logger.debug("Skipping unparseable PR in {}: {}", full_name, e)
                    continue
                if since is not None and pr.updated_at < since:
                    break
                yield pr
        except _GITHUBKIT_ERRORS as e:
            raise self._handle_error(e, resource=f"repository {full_name}") from e

    async def list_pull_requests(
        self,
        full_name: str,
        *,
        state: PRState = "all",
        since: datetime | None = None,
    ) -> list[PullRequestSummary]:
        """List pull requests for a repository (see iter_pull_requests)."""
        return [
            pr async for pr in self.iter_pull_requests(full_name, state=state, since=since)
        ]

    async def get_pull_request(self, full_name: str, number: int) -> PullRequestDetail:
        """Get full details for a single pull request.

        Raises:
            GitHubNotFoundError: If PR doesn't exist
        """
        owner, repo = split_full_name(full_name)
        try:
            resp = await self._github.rest.pulls.async_get(
                owner=owner,
                repo=repo,
                pull_number=number,
            )
            return PullRequestDetail.model_validate(resp.parsed_data.model_dump())
        except _GITHUBKIT_ERRORS as e:
            raise self._handle_error(e, resource=f"PR #{number} in {full_name}") from e

    async def list_reviews(self, full_name: str, number: int) -> list[ReviewSummary]:
        """Get reviews for a pull request."""
        owner, repo = split_full_name(full_name)
        try:
            reviews: list[ReviewSummary] = []

            review_data: Any
            async for review_data in self._github.paginate(
                self._github.rest.pulls.async_list_reviews,
                owner=owner,
                repo=repo,
                pull_number=number,
                per_page=self._per_page,
            ):
                payload = review_data.model_dump()
                try:
                    reviews.append(ReviewSummary.model_validate(payload))
                except ValidationError as e:
                    logger.warning(
                        "Skipping unparseable review {} on PR #{} in {}: {}",
                        payload.get("id", "?"),
                        number,
                        full_name,
                        e,
                    )
                    continue

            return reviews
        except _GITHUBKIT_ERRORS as e:
            raise self._handle_error(e, resource=f"PR #{number} in {full_name}") from e

    # -------------------------------------------------------------------------
    # Error Handling
    # -------------------------------------------------------------------------
    def _handle_error(
        self,
        error: RequestFailed | RequestTimeout | RequestError,
        resource: str = "resource",
    ) -> GitHubClientError:
        """Convert githubkit exceptions to our custom exceptions.

        RequestFailed and RequestTimeout both subclass RequestError, so the
        HTTP response case is checked first.
        """
        if not isinstance(error, RequestFailed):
            if isinstance(error, RequestTimeout):
                return GitHubTransientError(f"Request timed out: {error}")
            return GitHubTransientError(f"Connection failed: {error}")

        status = error.response.status_code
        headers = error.response.headers

        if status == 401:
            return GitHubAuthenticationError("Invalid GitHub token")
        elif status in (403, 429):
            rate_error = self._rate_limit_error(headers)
            if rate_error is not None:
                return rate_error
            if status == 429:
                return GitHubTransientError("Too many requests", status_code=status)
            return GitHubAuthenticationError(f"Access forbidden: {error}")
        elif status == 404:
            return GitHubNotFoundError(f"{resource} not found")
        elif status >= 500:
            return GitHubTransientError(
                f"GitHub API error ({status}): {error}", status_code=status
            )
        else:
            return GitHubClientError(f"GitHub API error ({status}): {error}")

    @staticmethod
    def _rate_limit_error(headers: Any) -> GitHubRateLimitError | None:
        """Build a rate limit error from response headers, if they indicate one."""
        if headers.get("x-ratelimit-remaining") == "0":
            reset_ts = int(headers.get("x-ratelimit-reset", "0"))
            reset_at = datetime.fromtimestamp(reset_ts, tz=UTC) if reset_ts else None
            return GitHubRateLimitError("GitHub rate limit exceeded", reset_at=reset_at)

        retry_after = headers.get("retry-after")
        if retry_after is not None and retry_after.isdigit():
            reset_at = datetime.now(UTC) + timedelta(seconds=int(retry_after))
            return GitHubRateLimitError("GitHub secondary rate limit exceeded", reset_at=reset_at)

        return None

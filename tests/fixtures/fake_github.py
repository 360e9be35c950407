"""In-memory stand-in for GitHubClient.

Serves one organization from plain dicts, applies the same ``since`` filters
as the real client and counts every call, so sync tests can assert what was
(and was not) fetched.
"""

from collections import Counter
from datetime import datetime
from typing import Any

from github_org_sync.github.exceptions import GitHubNotFoundError
from github_org_sync.github.rate_limit import QuotaSnapshot
from github_org_sync.schemas import (
    PullRequestDetail,
    PullRequestSummary,
    RepositorySummary,
    ReviewSummary,
)
from tests.factories import make_quota


class FakeGitHubClient:
    """Organization fixture with per-method call counters and injectable errors.

    Usage:
        fake = FakeGitHubClient("vercel")
        fake.add_repo(make_github_repo(id=1, name="a"))
        fake.add_pr("vercel/a", make_github_pr(id=10, number=1))
        fake.fail("get_pull_request", GitHubTransientError("boom"), times=2)
    """

    def __init__(self, org: str = "vercel", quota: QuotaSnapshot | None = None) -> None:
        self.org = org
        self.quota = quota or make_quota()
        self.repos: dict[str, dict[str, Any]] = {}
        self.prs: dict[str, dict[int, dict[str, Any]]] = {}
        self.reviews: dict[tuple[str, int], list[dict[str, Any]]] = {}
        self.calls: Counter[str] = Counter()
        self.call_args: list[tuple[str, tuple[Any, ...]]] = []
        self._failures: dict[str, list[BaseException]] = {}

    # -------------------------------------------------------------------------
    # Fixture setup
    # -------------------------------------------------------------------------
    def add_repo(self, payload: dict[str, Any]) -> None:
        self.repos[payload["full_name"]] = payload
        self.prs.setdefault(payload["full_name"], {})

    def add_pr(
        self,
        full_name: str,
        payload: dict[str, Any],
        reviews: list[dict[str, Any]] | None = None,
    ) -> None:
        self.prs.setdefault(full_name, {})[payload["number"]] = payload
        self.reviews[(full_name, payload["number"])] = reviews or []

    def fail(self, method: str, error: BaseException, times: int = 1) -> None:
        """Make the next ``times`` calls of ``method`` raise ``error``."""
        self._failures.setdefault(method, []).extend([error] * times)

    def _record(self, method: str, *args: Any) -> None:
        self.calls[method] += 1
        self.call_args.append((method, args))
        pending = self._failures.get(method)
        if pending:
            raise pending.pop(0)

    # -------------------------------------------------------------------------
    # GitHubClient surface
    # -------------------------------------------------------------------------
    async def get_quota(self) -> QuotaSnapshot:
        self.calls["get_quota"] += 1
        return self.quota

    async def list_organization_repositories(
        self, org: str, *, since: datetime | None = None
    ) -> list[RepositorySummary]:
        self._record("list_organization_repositories", org, since)
        repos = [RepositorySummary.model_validate(r) for r in self.repos.values()]
        if since is not None:
            repos = [r for r in repos if r.updated_at > since]
        return repos

    async def list_pull_requests(
        self,
        full_name: str,
        *,
        state: str = "all",
        since: datetime | None = None,
    ) -> list[PullRequestSummary]:
        self._record("list_pull_requests", full_name, since)
        if full_name not in self.repos:
            raise GitHubNotFoundError(f"repository {full_name} not found")
        prs = [PullRequestSummary.model_validate(p) for p in self.prs[full_name].values()]
        prs.sort(key=lambda p: p.updated_at, reverse=True)
        if since is not None:
            prs = [p for p in prs if p.updated_at >= since]
        return prs

    async def get_pull_request(self, full_name: str, number: int) -> PullRequestDetail:
        self._record("get_pull_request", full_name, number)
        try:
            return PullRequestDetail.model_validate(self.prs[full_name][number])
        except KeyError:
            raise GitHubNotFoundError(f"PR #{number} in {full_name} not found") from None

    async def list_reviews(self, full_name: str, number: int) -> list[ReviewSummary]:
        self._record("list_reviews", full_name, number)
        return [ReviewSummary.model_validate(r) for r in self.reviews.get((full_name, number), [])]


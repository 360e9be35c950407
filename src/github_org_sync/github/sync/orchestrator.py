"""Sync Orchestrator - organization -> repositories -> pull requests -> reviews/users.

Walks the organization incrementally. Every remote call goes through the
RetryingExecutor (and so the RateGovernor); detail, review and user lookups
go through the ResponseCache; every write goes through the
PersistenceGateway. Cursors are advanced only after the entity and all of
its children were processed, so an interrupted run resumes where it failed.

Skip rules:
    repository  stored, has a cursor, and remote updated_at <= cursor
                (its own fields are left alone; its PRs are still walked)
    pull request stored, has a cursor, and remote updated_at <= stored
                pr_updated_at (no detail or review request is made)
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any, TypeVar

from github_org_sync.db.gateway import EntityKind
from github_org_sync.db.models import as_utc
from github_org_sync.github.cache import (
    pull_request_key,
    repos_key,
    reviews_key,
    user_key,
)
from github_org_sync.github.exceptions import DataIntegrityError, GitHubNotFoundError
from github_org_sync.github.executor import CallResult, ErrorKind, classify_error
from github_org_sync.logging import bind_entity, bind_pr, bind_repo, get_logger
from github_org_sync.schemas.github_api import (
    PullRequestDetail,
    PullRequestSummary,
    RepositorySummary,
    ReviewSummary,
    UserSummary,
)

from .enums import SyncMode
from .results import SyncSummary

if TYPE_CHECKING:
    from github_org_sync.db.gateway import PersistenceGateway
    from github_org_sync.db.models import PullRequest, Repository
    from github_org_sync.github.cache import ResponseCache
    from github_org_sync.github.client import GitHubClient
    from github_org_sync.github.concurrency import ConcurrencyController
    from github_org_sync.github.executor import RetryingExecutor

logger = get_logger(__name__)

T = TypeVar("T")


class SyncAbortedError(Exception):
    """Raised when the whole run must stop (authentication failure).

    Carries the partial summary once the run has unwound.
    """

    def __init__(self, message: str, summary: SyncSummary | None = None) -> None:
        super().__init__(message)
        self.summary = summary


def _utcnow() -> datetime:
    return datetime.now(UTC)


class SyncOrchestrator:
    """Synchronizes one organization into the store.

    Usage:
        controller = ConcurrencyController(enabled=True)
        governor = RateGovernor(client, lock=controller.quota_lock)
        orchestrator = SyncOrchestrator(
            client=client,
            executor=RetryingExecutor(governor),
            cache=ResponseCache(lock=controller.cache_lock),
            gateway=PersistenceGateway(session_factory, controller.write_lock),
            controller=controller,
            organization="vercel",
        )
        summary = await orchestrator.run(SyncMode.INCREMENTAL)
    """

    def __init__(
        self,
        client: GitHubClient,
        executor: RetryingExecutor,
        cache: ResponseCache,
        gateway: PersistenceGateway,
        controller: ConcurrencyController,
        organization: str,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            client: GitHub API client
            executor: Retrying executor wrapping every remote call
            cache: Response cache for listings, details, reviews and users
            gateway: Persistence gateway for all writes and lookups
            controller: Lock and fan-out strategy
            organization: Organization login to sync
            clock: Source of cursor timestamps, injectable for tests
        """
        self._client = client
        self._executor = executor
        self._cache = cache
        self._gateway = gateway
        self._controller = controller
        self._organization = organization
        self._clock = clock

        self._abort_reason: str | None = None

    # -------------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------------
    async def run(self, mode: SyncMode = SyncMode.INCREMENTAL) -> SyncSummary:
        """Run one synchronization pass.

        Returns:
            SyncSummary with per-kind counts; ``aborted`` is set when the
            repository listing itself failed

        Raises:
            SyncAbortedError: On authentication failure (summary attached)
        """
        start_time = time.monotonic()
        summary = SyncSummary(organization=self._organization, mode=mode)
        self._abort_reason = None

        logger.info("Starting {} sync of {}", mode.value, self._organization)

        try:
            await self._sync_organization(mode, summary)
        except SyncAbortedError as e:
            summary.aborted = True
            summary.abort_reason = str(e)
            summary.store_totals = await self._gateway.counts()
            summary.duration_seconds = time.monotonic() - start_time
            logger.error("Sync aborted: {}", e)
            e.summary = summary
            raise

        summary.store_totals = await self._gateway.counts()
        summary.duration_seconds = time.monotonic() - start_time

        logger.info(
            "Sync of {} finished in {:.1f}s: {} written, {} failed",
            self._organization,
            summary.duration_seconds,
            summary.total_written,
            summary.total_failed,
        )
        return summary

    # -------------------------------------------------------------------------
    # Organization level
    # -------------------------------------------------------------------------
    async def _sync_organization(self, mode: SyncMode, summary: SyncSummary) -> None:
        cutoff: datetime | None = None
        if mode is SyncMode.INCREMENTAL:
            cutoff = as_utc(await self._gateway.earliest_repository_sync())
        summary.cutoff = cutoff

        if cutoff is not None:
            logger.info("Listing repositories updated since {}", cutoff.isoformat())

        result = await self._list_repositories(cutoff)
        if not result.success:
            message = str(result.error) if result.error else "organization not found"
            logger.error("Could not list repositories of {}: {}", self._organization, message)
            summary.aborted = True
            summary.abort_reason = f"Repository listing failed: {message}"
            summary.record_failure(
                EntityKind.REPOSITORY,
                self._organization,
                result.error_kind or ErrorKind.OTHER,
                message,
                count=False,
            )
            return

        repos: list[RepositorySummary] = result.value or []
        logger.info("Found {} repositories for {}", len(repos), self._organization)

        async def worker(remote: RepositorySummary) -> None:
            if self._abort_reason is not None:
                raise SyncAbortedError(self._abort_reason)
            await self._sync_repository(remote, mode, summary)

        outcomes = await self._controller.map(repos, worker)
        for remote, outcome in zip(repos, outcomes, strict=True):
            if isinstance(outcome, SyncAbortedError):
                raise outcome
            if isinstance(outcome, BaseException):
                bind_repo(remote.full_name).error("Repository sync failed: {}", outcome)
                summary.record_failure(
                    EntityKind.REPOSITORY,
                    remote.full_name,
                    classify_error(outcome),
                    str(outcome),
                )

    async def _list_repositories(
        self, cutoff: datetime | None
    ) -> CallResult[list[RepositorySummary]]:
        description = f"repositories of {self._organization}"
        if cutoff is not None:
            # Cutoff listings are never cached: a full listing must not mask them
            return await self._call(
                lambda: self._client.list_organization_repositories(
                    self._organization, since=cutoff
                ),
                description,
            )
        return await self._cached_call(
            repos_key(self._organization),
            lambda: self._client.list_organization_repositories(self._organization),
            description,
        )

    # -------------------------------------------------------------------------
    # Repository level
    # -------------------------------------------------------------------------
    async def _sync_repository(
        self,
        remote: RepositorySummary,
        mode: SyncMode,
        summary: SyncSummary,
    ) -> None:
        log = bind_repo(remote.full_name)

        stored: Repository | None = await self._gateway.find(EntityKind.REPOSITORY, remote.id)
        cursor = as_utc(stored.last_synced_at) if stored is not None else None

        if stored is not None and cursor is not None and remote.updated_at <= cursor:
            log.info("Skipping unchanged repository")
            summary.record_skip(EntityKind.REPOSITORY)
            record = stored
        else:
            record, created = await self._gateway.upsert(
                EntityKind.REPOSITORY, remote.id, remote.to_fields()
            )
            summary.record_write(EntityKind.REPOSITORY, created)
            log.info("Saved repository")

        pr_cutoff = cursor if mode is SyncMode.INCREMENTAL else None
        if not await self._sync_pull_requests(record, remote.full_name, pr_cutoff, summary):
            log.warning("Leaving repository cursor unchanged; the window is retried next run")
            return

        await self._gateway.advance_repository_cursor(remote.id, self._clock())

    # -------------------------------------------------------------------------
    # Pull request level
    # -------------------------------------------------------------------------
    async def _sync_pull_requests(
        self,
        repository: Repository,
        full_name: str,
        cutoff: datetime | None,
        summary: SyncSummary,
    ) -> bool:
        """Walk the repository's pull requests.

        Returns:
            False if the listing or any pull request failed, in which case
            the repository cursor must stay put
        """
        log = bind_repo(full_name)
        if cutoff is not None:
            log.info("Listing pull requests updated since {}", cutoff.isoformat())

        result = await self._call(
            lambda: self._client.list_pull_requests(full_name, state="all", since=cutoff),
            f"pull requests of {full_name}",
        )
        if result.is_not_found:
            log.warning("Repository disappeared before its pull requests were listed")
            return False
        if not result.success:
            log.error("Could not list pull requests: {}", result.error)
            summary.record_failure(
                EntityKind.REPOSITORY,
                full_name,
                result.error_kind or ErrorKind.OTHER,
                str(result.error),
            )
            return False

        prs: list[PullRequestSummary] = result.value or []
        log.info("Found {} pull requests", len(prs))

        complete = True
        for remote in prs:
            try:
                if not await self._sync_pull_request(repository, full_name, remote, summary):
                    complete = False
            except SyncAbortedError:
                raise
            except Exception as e:
                bind_pr(full_name, remote.number).error("Pull request sync failed: {}", e)
                summary.record_failure(
                    EntityKind.PULL_REQUEST,
                    f"{full_name}#{remote.number}",
                    classify_error(e),
                    str(e),
                )
                complete = False
        return complete

    async def _sync_pull_request(
        self,
        repository: Repository,
        full_name: str,
        remote: PullRequestSummary,
        summary: SyncSummary,
    ) -> bool:
        """Sync one pull request with its reviews and users.

        Returns:
            False if the pull request failed and its cursor was left alone
        """
        log = bind_pr(full_name, remote.number)
        identifier = f"{full_name}#{remote.number}"

        stored: PullRequest | None = await self._gateway.find(EntityKind.PULL_REQUEST, remote.id)
        if (
            stored is not None
            and stored.last_synced_at is not None
            and remote.updated_at <= as_utc(stored.pr_updated_at)  # type: ignore[operator]
        ):
            log.debug("Skipping unchanged PR: {}", remote.title)
            summary.record_skip(EntityKind.PULL_REQUEST)
            return True

        detail_result = await self._cached_call(
            pull_request_key(full_name, remote.number),
            lambda: self._client.get_pull_request(full_name, remote.number),
            f"PR {identifier}",
        )
        if not detail_result.success:
            return self._settle(detail_result, identifier, summary)

        reviews_result = await self._cached_call(
            reviews_key(full_name, remote.number),
            lambda: self._client.list_reviews(full_name, remote.number),
            f"reviews of {identifier}",
        )
        if not reviews_result.success:
            return self._settle(reviews_result, identifier, summary)

        detail: PullRequestDetail = detail_result.value  # type: ignore[assignment]
        reviews: list[ReviewSummary] = reviews_result.value or []

        try:
            # The cursor is cleared along with the new pr_updated_at and only set
            # again below, so a PR whose children fail is not skipped next run
            pr_record, created = await self._gateway.upsert(
                EntityKind.PULL_REQUEST,
                detail.id,
                {"repository_id": repository.id, **detail.to_fields(), "last_synced_at": None},
            )
            summary.record_write(EntityKind.PULL_REQUEST, created)
            log.info("Saved PR: {}", detail.title)

            await self._sync_reviews(pr_record, full_name, remote.number, reviews, summary)

            users = [detail.user] if detail.user is not None else []
            users.extend(r.user for r in reviews if r.user is not None)
            await self._store_users(users, summary)
        except Exception:
            await self._cache.invalidate(pull_request_key(full_name, remote.number))
            await self._cache.invalidate(reviews_key(full_name, remote.number))
            raise

        await self._gateway.advance_pull_request_cursor(detail.id, self._clock())
        return True

    def _settle(self, result: CallResult[Any], identifier: str, summary: SyncSummary) -> bool:
        """Record an unsuccessful PR fetch.

        A vanished PR is a skip and does not hold back the repository
        cursor; any other failure does.
        """
        log = bind_entity(EntityKind.PULL_REQUEST.value, identifier)
        if result.is_not_found:
            log.warning("PR {} not found, skipping", identifier)
            summary.record_skip(EntityKind.PULL_REQUEST)
            return True

        log.error("Giving up on PR {}: {}", identifier, result.error)
        summary.record_failure(
            EntityKind.PULL_REQUEST,
            identifier,
            result.error_kind or ErrorKind.OTHER,
            str(result.error),
        )
        return False

    # -------------------------------------------------------------------------
    # Reviews and users
    # -------------------------------------------------------------------------
    async def _sync_reviews(
        self,
        pr_record: PullRequest,
        full_name: str,
        number: int,
        reviews: list[ReviewSummary],
        summary: SyncSummary,
    ) -> None:
        log = bind_pr(full_name, number)
        log.debug("Found {} reviews", len(reviews))

        async def worker(review: ReviewSummary) -> None:
            if review.user is None:
                raise DataIntegrityError(
                    f"Review {review.id} has no user data",
                    kind=EntityKind.REVIEW.value,
                    identifier=str(review.id),
                )
            _, created = await self._gateway.upsert(
                EntityKind.REVIEW,
                review.id,
                {
                    "pull_request_id": pr_record.id,
                    "author_login": review.user.login,
                    "state": review.state,
                    "submitted_at": review.submitted_at,
                },
            )
            summary.record_write(EntityKind.REVIEW, created)

        outcomes = await self._controller.map(
            reviews,
            worker,
            concurrent=self._controller.should_fan_out_reviews(len(reviews)),
        )
        for review, outcome in zip(reviews, outcomes, strict=True):
            if isinstance(outcome, DataIntegrityError):
                bind_entity(EntityKind.REVIEW.value, str(review.id)).warning(
                    "{}. Skipping...", outcome
                )
                summary.record_skip(EntityKind.REVIEW)
                summary.record_failure(
                    EntityKind.REVIEW,
                    f"{full_name}#{number} review {review.id}",
                    ErrorKind.DATA_INTEGRITY,
                    str(outcome),
                    count=False,
                )
            elif isinstance(outcome, BaseException):
                # Reviews are not retried on their own; fail the whole PR
                raise outcome

    async def _store_users(self, users: list[UserSummary], summary: SyncSummary) -> None:
        """Upsert each distinct user once; unchanged users already stored are skipped."""
        seen: set[int] = set()
        for user in users:
            if user.id in seen:
                continue
            seen.add(user.id)

            key = user_key(user.login)
            if await self._cache.get(key) == user:
                summary.record_skip(EntityKind.USER)
                continue

            _, created = await self._gateway.upsert(EntityKind.USER, user.id, user.to_fields())
            summary.record_write(EntityKind.USER, created)
            await self._cache.put(key, user)

    # -------------------------------------------------------------------------
    # Remote calls
    # -------------------------------------------------------------------------
    async def _call(
        self,
        call: Callable[[], Awaitable[T]],
        description: str,
    ) -> CallResult[T]:
        """Execute a remote call; authentication failure aborts the run."""
        if self._abort_reason is not None:
            raise SyncAbortedError(self._abort_reason)

        result = await self._executor.execute(call, description=description)
        if result.is_auth_failure:
            self._abort_reason = f"Authentication failed while fetching {description}"
            raise SyncAbortedError(self._abort_reason)
        return result

    async def _cached_call(
        self,
        key: str,
        call: Callable[[], Awaitable[T]],
        description: str,
    ) -> CallResult[T]:
        """Like ``_call`` but served from the cache when fresh; only successes are stored."""

        async def fetch() -> T:
            return (await self._call(call, description)).unwrap()

        try:
            value = await self._cache.get_or_fetch(key, fetch)
        except SyncAbortedError:
            raise
        except GitHubNotFoundError:
            return CallResult.not_found()
        except Exception as e:
            return CallResult.failure(classify_error(e), e)
        return CallResult.ok(value)

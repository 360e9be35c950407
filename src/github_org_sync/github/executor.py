"""Retrying executor for GitHub API calls.

Wraps each remote call in a bounded retry loop:

    quota exceeded  -> wait for reset, retry (not counted against the budget)
    not found       -> benign empty result, never retried
    auth failure    -> fatal immediately
    transient       -> sleep backoff_base ** attempt, retry up to max_retries
    anything else   -> fatal immediately

Every attempt is admitted by the RateGovernor first.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Generic, TypeVar

from github_org_sync.config import RetryConfig
from github_org_sync.logging import get_logger

from .exceptions import (
    DataIntegrityError,
    GitHubAuthenticationError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubTransientError,
)

if TYPE_CHECKING:
    from .rate_limit.governor import RateGovernor, SleepFunc

logger = get_logger(__name__)

T = TypeVar("T")


class ErrorKind(StrEnum):
    """Classification of a failed call."""

    NOT_FOUND = "not_found"
    AUTH_FAILURE = "auth_failure"
    TRANSIENT_FAILURE = "transient_failure"
    QUOTA_EXCEEDED = "quota_exceeded"
    DATA_INTEGRITY = "data_integrity"
    OTHER = "other"


def classify_error(error: BaseException) -> ErrorKind:
    """Map an exception onto the error taxonomy."""
    if isinstance(error, GitHubNotFoundError):
        return ErrorKind.NOT_FOUND
    if isinstance(error, GitHubAuthenticationError):
        return ErrorKind.AUTH_FAILURE
    if isinstance(error, GitHubRateLimitError):
        return ErrorKind.QUOTA_EXCEEDED
    if isinstance(error, GitHubTransientError):
        return ErrorKind.TRANSIENT_FAILURE
    if isinstance(error, DataIntegrityError):
        return ErrorKind.DATA_INTEGRITY
    return ErrorKind.OTHER


@dataclass
class CallResult(Generic[T]):
    """Outcome of an executed call.

    A NOT_FOUND result is not a success but carries no error either; callers
    treat it as an empty answer and move on.
    """

    success: bool
    value: T | None = None
    error_kind: ErrorKind | None = None
    error: BaseException | None = None
    attempts: int = 1

    @classmethod
    def ok(cls, value: T, attempts: int = 1) -> CallResult[T]:
        return cls(success=True, value=value, attempts=attempts)

    @classmethod
    def not_found(cls, attempts: int = 1) -> CallResult[T]:
        return cls(success=False, error_kind=ErrorKind.NOT_FOUND, attempts=attempts)

    @classmethod
    def failure(
        cls, kind: ErrorKind, error: BaseException, attempts: int = 1
    ) -> CallResult[T]:
        return cls(success=False, error_kind=kind, error=error, attempts=attempts)

    @property
    def is_not_found(self) -> bool:
        return self.error_kind is ErrorKind.NOT_FOUND

    @property
    def is_auth_failure(self) -> bool:
        return self.error_kind is ErrorKind.AUTH_FAILURE

    def unwrap(self) -> T:
        """Return the value, raising the stored error for failed calls.

        Raises:
            GitHubNotFoundError: For NOT_FOUND results
            BaseException: The original error for fatal results
        """
        if self.success:
            return self.value  # type: ignore[return-value]
        if self.error is not None:
            raise self.error
        raise GitHubNotFoundError("Resource not found")


class RetryingExecutor:
    """Runs remote calls under the rate governor with bounded retries.

    Usage:
        executor = RetryingExecutor(governor, settings.retry)
        result = await executor.execute(
            lambda: client.get_pull_request("vercel/next.js", 42),
            description="PR vercel/next.js#42",
        )
        if result.success:
            pr = result.value
    """

    def __init__(
        self,
        governor: RateGovernor,
        config: RetryConfig | None = None,
        *,
        sleep: SleepFunc = asyncio.sleep,
    ) -> None:
        self._governor = governor
        self._config = config or RetryConfig()
        self._sleep = sleep

    @property
    def governor(self) -> RateGovernor:
        return self._governor

    def backoff_delay(self, attempt: int) -> float:
        """Delay before retry number ``attempt`` (1-based): base ** attempt."""
        return float(self._config.backoff_base**attempt)

    async def execute(
        self,
        call: Callable[[], Awaitable[T]],
        *,
        description: str = "request",
    ) -> CallResult[T]:
        """Execute ``call`` with governor admission and retry policy.

        Args:
            call: Zero-argument factory producing a fresh awaitable per attempt
            description: Human-readable identity of the call, used in logs

        Returns:
            CallResult describing the outcome; never raises for API errors
        """
        attempts = 0
        retries = 0
        quota_error: GitHubRateLimitError | None = None

        while True:
            if quota_error is not None:
                try:
                    await self._governor.wait_for_reset(quota_error.reset_at)
                except Exception as e:
                    logger.error("Waiting for quota reset failed during {}: {}", description, e)
                    return CallResult.failure(classify_error(e), e, attempts=attempts)
                quota_error = None

            attempts += 1
            try:
                await self._governor.admit()
                value = await call()
                return CallResult.ok(value, attempts=attempts)

            except GitHubRateLimitError as e:
                logger.warning("Quota exceeded during {}; waiting for reset", description)
                quota_error = e

            except GitHubNotFoundError:
                logger.debug("{} not found", description)
                return CallResult.not_found(attempts=attempts)

            except GitHubAuthenticationError as e:
                logger.error("Authentication failed during {}: {}", description, e)
                return CallResult.failure(ErrorKind.AUTH_FAILURE, e, attempts=attempts)

            except GitHubTransientError as e:
                if retries >= self._config.max_retries:
                    logger.error(
                        "{} failed after {} retries: {}", description, retries, e
                    )
                    return CallResult.failure(
                        ErrorKind.TRANSIENT_FAILURE, e, attempts=attempts
                    )
                retries += 1
                delay = self.backoff_delay(retries)
                logger.warning(
                    "Transient failure on {} (retry {}/{} in {}s): {}",
                    description,
                    retries,
                    self._config.max_retries,
                    delay,
                    e,
                )
                await self._sleep(delay)

            except Exception as e:
                logger.error("Unexpected error during {}: {}", description, e)
                return CallResult.failure(classify_error(e), e, attempts=attempts)

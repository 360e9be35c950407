"""Rate governor for GitHub API calls.

Every remote call is admitted by the governor first. It refreshes the quota
snapshot with the free GET /rate_limit query and then decides:

    remaining <= 0           -> sleep until reset (whole seconds, rounded up)
    remaining < 10% of limit -> fixed short pause
    otherwise                -> proceed immediately

The decision and any pause happen under the shared quota lock, and each
admitted call reserves one unit of the locally tracked quota, so concurrent
workers cannot all read "1 remaining" and burst through the boundary.
"""

from __future__ import annotations

import asyncio
import math
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime
from typing import Any, Protocol

from github_org_sync.config import RateLimitConfig
from github_org_sync.github.concurrency import LockLike, NoOpLock
from github_org_sync.logging import get_logger

from .schemas import QuotaSnapshot, QuotaStatus

logger = get_logger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]
Clock = Callable[[], datetime]


class QuotaSource(Protocol):
    """Anything that can report the current request quota."""

    async def get_quota(self) -> QuotaSnapshot: ...


def _utcnow() -> datetime:
    return datetime.now(UTC)


class RateGovernor:
    """Decides whether and how long to pause before each API call.

    Usage:
        governor = RateGovernor(client, settings.rate_limit, lock=controller.quota_lock)
        waited = await governor.admit()
        # ... make the call ...
    """

    def __init__(
        self,
        quota_source: QuotaSource,
        config: RateLimitConfig | None = None,
        lock: LockLike | None = None,
        *,
        sleep: SleepFunc = asyncio.sleep,
        clock: Clock = _utcnow,
    ) -> None:
        """Initialize the governor.

        Args:
            quota_source: Provider of fresh quota snapshots (normally GitHubClient)
            config: Thresholds; defaults to RateLimitConfig()
            lock: Lock guarding the shared snapshot (NoOpLock in sequential mode)
            sleep: Awaitable sleep, injectable for tests
            clock: Current UTC time, injectable for tests
        """
        self._source = quota_source
        self._config = config or RateLimitConfig()
        self._lock = lock if lock is not None else NoOpLock()
        self._sleep = sleep
        self._clock = clock

        self._snapshot: QuotaSnapshot | None = None
        self._total_waited = 0.0

    @property
    def snapshot(self) -> QuotaSnapshot | None:
        """Most recent quota snapshot, including local reservations."""
        return self._snapshot

    @property
    def total_waited(self) -> float:
        """Seconds spent pausing across all admits."""
        return self._total_waited

    # -------------------------------------------------------------------------
    # Admission
    # -------------------------------------------------------------------------
    async def admit(self) -> float:
        """Refresh the quota and block as the policy requires.

        Returns:
            Seconds slept before the call may proceed (0.0 if none)
        """
        fresh = await self._source.get_quota()

        async with self._lock:
            snapshot = self._merge(fresh)
            status = snapshot.get_status(self._config.low_quota_threshold_pct)

            if status is QuotaStatus.EXHAUSTED:
                wait = math.ceil(snapshot.seconds_until_reset(self._clock()))
                # Past the reset the next refresh reports a new window
                self._snapshot = None
                if wait <= 0:
                    return 0.0
                logger.warning(
                    "Rate limit depleted! Waiting {} seconds until reset at {}",
                    wait,
                    snapshot.reset_at.isoformat(),
                )
                await self._pause(wait)
                return float(wait)

            self._snapshot = snapshot.model_copy(update={"remaining": snapshot.remaining - 1})

            if status is QuotaStatus.LOW:
                pause = self._config.low_quota_pause_seconds
                logger.warning(
                    "Running low on rate limit: {} of {} requests remaining",
                    snapshot.remaining,
                    snapshot.limit,
                )
                await self._pause(pause)
                return pause

            return 0.0

    async def wait_for_reset(self, reset_at: datetime | None = None) -> float:
        """Handle a quota-exceeded response by sleeping until the reset.

        Args:
            reset_at: Reset time reported with the error; re-queried when None

        Returns:
            Seconds slept (0.0 if the reset already passed)
        """
        if reset_at is None:
            reset_at = (await self._source.get_quota()).reset_at

        async with self._lock:
            self._snapshot = None
            wait = math.ceil(max(0.0, (reset_at - self._clock()).total_seconds()))
            if wait <= 0:
                return 0.0
            logger.warning(
                "Rate limit exceeded! Waiting {} seconds until reset at {}",
                wait,
                reset_at.isoformat(),
            )
            await self._pause(wait)
            return float(wait)

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------
    def _merge(self, fresh: QuotaSnapshot) -> QuotaSnapshot:
        """Keep local reservations when the fresh snapshot is for the same window."""
        current = self._snapshot
        if (
            current is not None
            and current.reset_at == fresh.reset_at
            and current.remaining < fresh.remaining
        ):
            return current
        return fresh

    async def _pause(self, seconds: float) -> None:
        self._total_waited += seconds
        await self._sleep(seconds)

    def to_dict(self) -> dict[str, Any]:
        """Export current state as dictionary (for logging/diagnostics)."""
        if self._snapshot is None:
            return {"snapshot": None, "total_waited": self._total_waited}

        return {
            "snapshot": {
                "limit": self._snapshot.limit,
                "remaining": self._snapshot.remaining,
                "remaining_percent": round(self._snapshot.remaining_percent, 2),
                "reset_at": self._snapshot.reset_at.isoformat(),
                "status": self._snapshot.get_status(
                    self._config.low_quota_threshold_pct
                ).value,
            },
            "total_waited": self._total_waited,
        }

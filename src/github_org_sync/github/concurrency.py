"""Concurrency strategy for the sync.

One switch selects between a bounded worker pool guarded by real locks and a
sequential run where the same locks are no-ops. Sync code always acquires the
locks and always fans out through ``map``; only the strategy changes.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from types import TracebackType
from typing import Protocol, TypeVar

from github_org_sync.logging import get_logger

logger = get_logger(__name__)

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


class LockLike(Protocol):
    """The async context manager surface shared by asyncio.Lock and NoOpLock."""

    async def __aenter__(self) -> object: ...

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> object: ...


class NoOpLock:
    """Lock that never blocks, used when the sync runs sequentially."""

    async def acquire(self) -> bool:
        return True

    def release(self) -> None:
        pass

    def locked(self) -> bool:
        return False

    async def __aenter__(self) -> NoOpLock:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        return None


class ConcurrencyController:
    """Owns the shared locks and the fan-out policy for one sync run.

    Usage:
        controller = ConcurrencyController(enabled=True, max_workers=5)
        results = await controller.map(repos, process_repository)
        for repo, result in zip(repos, results):
            if isinstance(result, BaseException):
                ...
    """

    def __init__(
        self,
        enabled: bool = False,
        max_workers: int = 5,
        review_fanout_threshold: int = 3,
        *,
        verbose: bool = False,
    ) -> None:
        """Initialize the controller.

        Args:
            enabled: Use a worker pool and real locks
            max_workers: Pool size for each fan-out point
            review_fanout_threshold: Reviews fan out only above this count
            verbose: Always fan out reviews when enabled
        """
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")

        self._enabled = enabled
        self._max_workers = max_workers
        self._review_fanout_threshold = review_fanout_threshold
        self._verbose = verbose

        self.cache_lock: LockLike = self._new_lock()
        self.quota_lock: LockLike = self._new_lock()
        self.write_lock: LockLike = self._new_lock()

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def _new_lock(self) -> LockLike:
        return asyncio.Lock() if self._enabled else NoOpLock()

    def should_fan_out_reviews(self, count: int) -> bool:
        """Whether a PR's reviews are processed by a pool."""
        if not self._enabled:
            return False
        return count > self._review_fanout_threshold or self._verbose

    async def map(
        self,
        items: Iterable[ItemT],
        worker: Callable[[ItemT], Awaitable[ResultT]],
        *,
        concurrent: bool = True,
    ) -> list[ResultT | BaseException]:
        """Run ``worker`` over ``items`` and collect results in input order.

        Exceptions raised by a worker are returned in its slot instead of
        cancelling the other workers. Each call gets its own semaphore, so
        nested fan-outs never starve each other.

        Args:
            items: Work items
            worker: Coroutine function applied to each item
            concurrent: Set False to force in-order processing for this call
        """
        items = list(items)
        if not items:
            return []

        if not (self._enabled and concurrent):
            results: list[ResultT | BaseException] = []
            for item in items:
                try:
                    results.append(await worker(item))
                except Exception as e:
                    results.append(e)
            return results

        semaphore = asyncio.Semaphore(self._max_workers)

        async def bounded(item: ItemT) -> ResultT:
            async with semaphore:
                return await worker(item)

        logger.debug("Fanning out {} items over {} workers", len(items), self._max_workers)
        gathered = await asyncio.gather(
            *(bounded(item) for item in items), return_exceptions=True
        )
        return list(gathered)

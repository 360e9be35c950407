"""In-memory TTL cache for GitHub API responses.

Entries are evicted lazily: an expired entry is removed when it is looked up,
there is no background sweeper. The lock guards only map access and is never
held across the fetch, so two workers may fetch the same key concurrently;
the last store wins.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Final, TypeVar

from github_org_sync.logging import get_logger

from .concurrency import LockLike, NoOpLock

logger = get_logger(__name__)

T = TypeVar("T")


class _Miss:
    """Sentinel type for cache misses (None is a valid cached value)."""

    _instance: _Miss | None = None

    def __new__(cls) -> _Miss:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISS"

    def __bool__(self) -> bool:
        return False


MISS: Final = _Miss()


@dataclass
class CacheEntry:
    """A stored response and the monotonic time it was stored."""

    key: str
    value: Any
    stored_at: float

    def is_fresh(self, now: float, ttl_seconds: float) -> bool:
        return now - self.stored_at < ttl_seconds


# -----------------------------------------------------------------------------
# Key helpers
# -----------------------------------------------------------------------------
def repos_key(org: str) -> str:
    return f"org:{org}:repos"


def pull_request_key(full_name: str, number: int) -> str:
    return f"repo:{full_name}:pr:{number}"


def reviews_key(full_name: str, number: int) -> str:
    return f"repo:{full_name}:pr:{number}:reviews"


def user_key(login: str) -> str:
    return f"user:{login.lower()}"


class ResponseCache:
    """TTL cache keyed by strings.

    Usage:
        cache = ResponseCache(settings.cache.ttl_seconds, lock=controller.cache_lock)
        pr = await cache.get_or_fetch(
            pull_request_key("vercel/next.js", 42),
            lambda: client.get_pull_request("vercel/next.js", 42),
        )
    """

    def __init__(
        self,
        ttl_seconds: float = 3600.0,
        lock: LockLike | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        self._ttl = ttl_seconds
        self._lock = lock if lock is not None else NoOpLock()
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}

        self._hits = 0
        self._misses = 0

    @property
    def ttl_seconds(self) -> float:
        return self._ttl

    @property
    def hits(self) -> int:
        return self._hits

    @property
    def misses(self) -> int:
        return self._misses

    def __len__(self) -> int:
        return len(self._entries)

    async def get(self, key: str) -> Any:
        """Return the cached value for ``key`` or ``MISS``."""
        async with self._lock:
            return self._lookup(key)

    async def put(self, key: str, value: Any) -> None:
        async with self._lock:
            self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())

    async def invalidate(self, key: str) -> None:
        async with self._lock:
            self._entries.pop(key, None)

    async def get_or_fetch(self, key: str, fetch: Callable[[], Awaitable[T]]) -> T:
        """Return the cached value, or fetch and store it on a miss.

        Exceptions from ``fetch`` propagate and nothing is stored.
        """
        async with self._lock:
            cached = self._lookup(key)
        if cached is not MISS:
            return cached  # type: ignore[no-any-return]

        value = await fetch()

        async with self._lock:
            self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())
        return value

    def _lookup(self, key: str) -> Any:
        """Lookup with lazy eviction; caller holds the lock."""
        entry = self._entries.get(key)
        if entry is None:
            self._misses += 1
            return MISS

        if not entry.is_fresh(self._clock(), self._ttl):
            del self._entries[key]
            self._misses += 1
            logger.debug("Cache entry expired: {}", key)
            return MISS

        self._hits += 1
        return entry.value

    def to_dict(self) -> dict[str, Any]:
        """Export cache statistics."""
        return {
            "entries": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "ttl_seconds": self._ttl,
        }

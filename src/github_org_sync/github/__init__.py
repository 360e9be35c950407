"""GitHub API access layer.

This module provides:
- GitHubClient: Async GitHub API client (githubkit)
- RateGovernor: Quota-aware admission of every call
- RetryingExecutor / CallResult: Bounded retry with error classification
- ResponseCache: TTL cache for listings, details, reviews and users
- ConcurrencyController / NoOpLock: Worker pool and lock strategy
- Sync: SyncOrchestrator, SyncSummary
"""

from .cache import MISS, CacheEntry, ResponseCache
from .client import GitHubClient
from .concurrency import ConcurrencyController, NoOpLock
from .exceptions import (
    DataIntegrityError,
    GitHubAuthenticationError,
    GitHubClientError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubTransientError,
)
from .executor import CallResult, ErrorKind, RetryingExecutor, classify_error
from .rate_limit import QuotaSnapshot, QuotaStatus, RateGovernor
from .sync import (
    EntityCounts,
    OutputFormat,
    SyncAbortedError,
    SyncMode,
    SyncOrchestrator,
    SyncSummary,
)

__all__ = [
    # Client
    "GitHubClient",
    # Exceptions
    "DataIntegrityError",
    "GitHubAuthenticationError",
    "GitHubClientError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubTransientError",
    # Access layer
    "MISS",
    "CacheEntry",
    "CallResult",
    "ConcurrencyController",
    "ErrorKind",
    "NoOpLock",
    "QuotaSnapshot",
    "QuotaStatus",
    "RateGovernor",
    "ResponseCache",
    "RetryingExecutor",
    "classify_error",
    # Sync
    "EntityCounts",
    "OutputFormat",
    "SyncAbortedError",
    "SyncMode",
    "SyncOrchestrator",
    "SyncSummary",
]

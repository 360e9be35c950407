"""Result objects for sync operations.

Structured results provide consistent interfaces for monitoring,
error handling, and CLI output.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from github_org_sync.db.gateway import EntityKind
from github_org_sync.github.executor import ErrorKind

from .enums import SyncMode


@dataclass
class EntityCounts:
    """Per-kind outcome counters for one run."""

    created: int = 0
    updated: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def written(self) -> int:
        """Records created or updated."""
        return self.created + self.updated

    def to_dict(self) -> dict[str, int]:
        return {
            "created": self.created,
            "updated": self.updated,
            "skipped": self.skipped,
            "failed": self.failed,
        }


@dataclass
class SyncError:
    """A failure recorded against one entity."""

    kind: EntityKind
    """Kind of entity that failed."""

    identifier: str
    """Human-readable identity, e.g. "vercel/next.js#42"."""

    error_kind: ErrorKind
    """Classification of the failure."""

    message: str
    """Error message."""

    def to_dict(self) -> dict[str, str]:
        return {
            "kind": self.kind.value,
            "identifier": self.identifier,
            "error_kind": self.error_kind.value,
            "message": self.message,
        }


@dataclass
class SyncSummary:
    """Outcome of a full orchestrator run."""

    organization: str
    mode: SyncMode

    counts: dict[EntityKind, EntityCounts] = field(
        default_factory=lambda: {kind: EntityCounts() for kind in EntityKind}
    )
    """Per-kind outcome counters."""

    store_totals: dict[EntityKind, int] = field(default_factory=dict)
    """Records in the store per kind at the end of the run."""

    errors: list[SyncError] = field(default_factory=list)

    cutoff: datetime | None = None
    """Organization-level listing cutoff (None on first or full runs)."""

    aborted: bool = False
    """True if the run stopped before walking every repository."""

    abort_reason: str | None = None

    duration_seconds: float = 0.0

    def record_write(self, kind: EntityKind, created: bool) -> None:
        if created:
            self.counts[kind].created += 1
        else:
            self.counts[kind].updated += 1

    def record_skip(self, kind: EntityKind) -> None:
        self.counts[kind].skipped += 1

    def record_failure(
        self,
        kind: EntityKind,
        identifier: str,
        error_kind: ErrorKind,
        message: str,
        *,
        count: bool = True,
    ) -> None:
        """Record an error; ``count=False`` keeps it out of the failed counter."""
        if count:
            self.counts[kind].failed += 1
        self.errors.append(SyncError(kind, identifier, error_kind, message))

    @property
    def total_written(self) -> int:
        """Records created or updated across all kinds."""
        return sum(c.written for c in self.counts.values())

    @property
    def total_failed(self) -> int:
        return sum(c.failed for c in self.counts.values())

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "organization": self.organization,
            "mode": self.mode.value,
            "cutoff": self.cutoff.isoformat() if self.cutoff else None,
            "aborted": self.aborted,
            "abort_reason": self.abort_reason,
            "duration_seconds": round(self.duration_seconds, 2),
            "counts": {kind.value: c.to_dict() for kind, c in self.counts.items()},
            "store_totals": {kind.value: n for kind, n in self.store_totals.items()},
            "errors": [e.to_dict() for e in self.errors],
        }

"""Pydantic schemas for GitHub API quota data.

These schemas represent the core pool from the GET /rate_limit endpoint.
"""

from datetime import UTC, datetime
from enum import StrEnum
from typing import Any, Self

from pydantic import BaseModel, Field, computed_field


class QuotaStatus(StrEnum):
    """Quota health as seen by the rate governor.

    - HEALTHY: at or above the low-quota threshold
    - LOW: below the threshold but not empty
    - EXHAUSTED: 0 remaining
    """

    HEALTHY = "healthy"
    LOW = "low"
    EXHAUSTED = "exhausted"


class QuotaSnapshot(BaseModel):
    """Point-in-time request quota for the core resource pool."""

    limit: int = Field(ge=0, description="Maximum requests allowed per window")
    remaining: int = Field(ge=0, description="Requests remaining in current window")
    reset_at: datetime = Field(description="UTC datetime when the window resets")

    @computed_field  # type: ignore[prop-decorator]
    @property
    def remaining_percent(self) -> float:
        """Percentage of quota remaining (0.0 to 100.0)."""
        if self.limit == 0:
            return 0.0
        return (self.remaining / self.limit) * 100

    def seconds_until_reset(self, now: datetime | None = None) -> float:
        """Seconds until the window resets (0 if already past)."""
        current = now or datetime.now(UTC)
        return max(0.0, (self.reset_at - current).total_seconds())

    def get_status(self, low_threshold_pct: float = 10.0) -> QuotaStatus:
        """Classify the snapshot against the low-quota threshold.

        Args:
            low_threshold_pct: % remaining below which quota counts as LOW

        Returns:
            QuotaStatus enum value
        """
        if self.remaining <= 0:
            return QuotaStatus.EXHAUSTED
        if self.remaining < self.limit * (low_threshold_pct / 100):
            return QuotaStatus.LOW
        return QuotaStatus.HEALTHY

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> Self:
        """Parse the core pool from a GitHub /rate_limit API response.

        Args:
            data: Raw API response dict with 'resources' key

        Returns:
            QuotaSnapshot instance
        """
        core = data["resources"]["core"]
        return cls(
            limit=core["limit"],
            remaining=max(0, core["remaining"]),
            reset_at=datetime.fromtimestamp(core["reset"], tz=UTC),
        )

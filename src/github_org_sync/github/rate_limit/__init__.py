"""Quota tracking for the GitHub API.

The governor admits every remote call against the latest quota snapshot,
pausing ahead of exhaustion instead of reacting to 403s.
"""

from .governor import QuotaSource, RateGovernor
from .schemas import QuotaSnapshot, QuotaStatus

__all__ = [
    "QuotaSnapshot",
    "QuotaSource",
    "QuotaStatus",
    "RateGovernor",
]

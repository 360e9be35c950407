"""Organization sync - GitHub to database synchronization.

Services:
- SyncOrchestrator: organization -> repositories -> pull requests -> reviews/users
- SyncSummary / EntityCounts: per-run outcome counters
"""

from .enums import OutputFormat, SyncMode
from .orchestrator import SyncAbortedError, SyncOrchestrator
from .results import EntityCounts, SyncError, SyncSummary

__all__ = [
    "EntityCounts",
    "OutputFormat",
    "SyncAbortedError",
    "SyncError",
    "SyncMode",
    "SyncOrchestrator",
    "SyncSummary",
]

"""Enums for sync operations."""

from enum import Enum


class SyncMode(str, Enum):
    """How much of the organization a run walks."""

    INCREMENTAL = "incremental"
    """Only repositories updated since the oldest repository cursor."""

    FULL = "full"
    """Every repository and pull request, ignoring listing cutoffs."""


class OutputFormat(str, Enum):
    """Output format for CLI commands."""

    TEXT = "text"
    """Human-readable text output."""

    JSON = "json"
    """Machine-readable JSON output."""

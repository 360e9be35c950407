"""GitHub Org Sync - incremental GitHub organization activity store."""

__version__ = "0.1.0"

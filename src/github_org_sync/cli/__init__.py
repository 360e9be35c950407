"""Command line interface for GitHub Org Sync."""

"""Test fixtures for GitHub API responses."""

"""Tests for the ghsync command surface.

Sync commands are tested twice: with ``run_sync`` mocked (option parsing and
output), and end-to-end against a temp-file database with the GitHub client
replaced by the in-memory organization.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from github_org_sync.cli.app import app
from github_org_sync.db import EntityKind
from github_org_sync.github import SyncMode, SyncSummary
from github_org_sync.github.exceptions import GitHubAuthenticationError
from github_org_sync.logging import reset_logging
from tests.factories import make_github_pr, make_github_repo, make_github_review, make_quota
from tests.fixtures.fake_github import FakeGitHubClient

runner = CliRunner()


@pytest.fixture(autouse=True)
def cli_env(tmp_path, monkeypatch):
    """Point settings at a temp database and a dummy token."""
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'cli.db'}")
    monkeypatch.setenv("GITHUB_TOKEN", "test-token")
    monkeypatch.setenv("ORGANIZATION", "vercel")
    yield tmp_path
    reset_logging()


def make_summary(**overrides) -> SyncSummary:
    summary = SyncSummary(organization="vercel", mode=SyncMode.INCREMENTAL)
    summary.store_totals = {kind: 0 for kind in EntityKind}
    for key, value in overrides.items():
        setattr(summary, key, value)
    return summary


def patch_client(target: str, client) -> MagicMock:
    """Patch a module's GitHubClient so ``async with`` yields ``client``."""
    patcher = patch(target)
    mock_class = patcher.start()
    mock_class.return_value.__aenter__ = AsyncMock(return_value=client)
    mock_class.return_value.__aexit__ = AsyncMock(return_value=None)
    return patcher


class TestApp:
    def test_version(self):
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "ghsync version" in result.output

    def test_help_lists_command_groups(self):
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        for group in ("sync", "github", "db"):
            assert group in result.output


class TestSyncRunOptions:
    def test_defaults(self):
        mock_run = AsyncMock(return_value=make_summary())
        with patch("github_org_sync.cli.sync.run_sync", new=mock_run):
            result = runner.invoke(app, ["sync", "run"])

        assert result.exit_code == 0
        assert "Sync Complete" in result.output
        settings, organization, mode, controller = mock_run.await_args.args
        assert organization == "vercel"
        assert mode is SyncMode.INCREMENTAL
        assert controller.enabled is False
        assert settings.github_token == "test-token"

    def test_overrides(self):
        mock_run = AsyncMock(return_value=make_summary())
        with patch("github_org_sync.cli.sync.run_sync", new=mock_run):
            result = runner.invoke(
                app, ["sync", "run", "--org", "python", "--full", "--concurrent", "-w", "8"]
            )

        assert result.exit_code == 0
        _, organization, mode, controller = mock_run.await_args.args
        assert organization == "python"
        assert mode is SyncMode.FULL
        assert controller.enabled is True
        assert controller.max_workers == 8

    def test_json_output(self):
        summary = make_summary()
        summary.record_write(EntityKind.REPOSITORY, created=True)
        with patch("github_org_sync.cli.sync.run_sync", new=AsyncMock(return_value=summary)):
            result = runner.invoke(app, ["sync", "run", "--format", "json"])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["counts"]["repository"]["created"] == 1

    def test_aborted_run_exits_nonzero(self):
        summary = make_summary(aborted=True, abort_reason="Authentication failed")
        with patch("github_org_sync.cli.sync.run_sync", new=AsyncMock(return_value=summary)):
            result = runner.invoke(app, ["sync", "run"])

        assert result.exit_code == 1
        assert "Sync Aborted" in result.output

    def test_unexpected_error_exits_nonzero(self):
        with patch(
            "github_org_sync.cli.sync.run_sync",
            new=AsyncMock(side_effect=GitHubAuthenticationError("GitHub token required")),
        ):
            result = runner.invoke(app, ["sync", "run"])

        assert result.exit_code == 1
        assert "Sync failed" in result.output


class TestSyncRunEndToEnd:
    @pytest.fixture
    def fake(self):
        fake = FakeGitHubClient("vercel", quota=make_quota())
        fake.add_repo(make_github_repo(id=1, name="a"))
        fake.add_pr(
            "vercel/a",
            make_github_pr(id=11, number=1),
            reviews=[make_github_review(id=21), make_github_review(id=22, user=None)],
        )
        return fake

    def test_sync_then_stats(self, fake):
        patcher = patch_client("github_org_sync.cli.sync.GitHubClient", fake)
        try:
            result = runner.invoke(app, ["sync", "run"])
        finally:
            patcher.stop()

        assert result.exit_code == 0, result.output
        assert "Sync Complete" in result.output

        stats = runner.invoke(app, ["db", "stats", "--format", "json"])
        assert stats.exit_code == 0
        assert json.loads(stats.stdout) == {
            "repository": 1,
            "pull_request": 1,
            "review": 1,
            "user": 2,
        }

    def test_auth_abort_exits_nonzero(self, fake):
        fake.fail("list_organization_repositories", GitHubAuthenticationError("bad token"))
        patcher = patch_client("github_org_sync.cli.sync.GitHubClient", fake)
        try:
            result = runner.invoke(app, ["sync", "run"])
        finally:
            patcher.stop()

        assert result.exit_code == 1
        assert "Sync Aborted" in result.output
        assert "Authentication failed" in result.output


class TestDbCommands:
    def test_init_creates_database(self, cli_env):
        result = runner.invoke(app, ["db", "init"])

        assert result.exit_code == 0
        assert (cli_env / "cli.db").exists()

    def test_stats_on_empty_store(self):
        result = runner.invoke(app, ["db", "stats"])

        assert result.exit_code == 0
        assert "Pull Request" in result.output


class TestRateLimitCommand:
    def test_shows_quota(self):
        client = MagicMock()
        client.get_quota = AsyncMock(return_value=make_quota(remaining=4000))
        patcher = patch_client("github_org_sync.cli.github.GitHubClient", client)
        try:
            result = runner.invoke(app, ["github", "rate-limit"])
        finally:
            patcher.stop()

        assert result.exit_code == 0
        assert "HEALTHY" in result.output
        assert "4000" in result.output

    def test_json(self):
        client = MagicMock()
        client.get_quota = AsyncMock(return_value=make_quota(remaining=0))
        patcher = patch_client("github_org_sync.cli.github.GitHubClient", client)
        try:
            result = runner.invoke(app, ["github", "rate-limit", "--format", "json"])
        finally:
            patcher.stop()

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["status"] == "exhausted"
        assert data["remaining"] == 0

    def test_client_error_exits_nonzero(self):
        client = MagicMock()
        client.get_quota = AsyncMock(side_effect=GitHubAuthenticationError("Invalid GitHub token"))
        patcher = patch_client("github_org_sync.cli.github.GitHubClient", client)
        try:
            result = runner.invoke(app, ["github", "rate-limit"])
        finally:
            patcher.stop()

        assert result.exit_code == 1
        assert "Invalid GitHub token" in result.output

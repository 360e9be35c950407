"""Tests for configuration settings."""

import pytest

from github_org_sync.config import (
    CacheConfig,
    RateLimitConfig,
    RetryConfig,
    Settings,
    SyncConfig,
    load_settings,
)


class TestSettings:
    """Tests for Settings class."""

    def test_settings_defaults(self):
        """Test default values are correct."""
        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite+aiosqlite:///./github_org_sync.db"
        assert settings.github_token == ""
        assert settings.organization == "vercel"
        assert settings.environment == "development"
        assert settings.log_level == "INFO"

    def test_access_layer_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.rate_limit.low_quota_threshold_pct == 10.0
        assert settings.rate_limit.low_quota_pause_seconds == 1.0
        assert settings.retry.max_retries == 3
        assert settings.retry.backoff_base == 2.0
        assert settings.cache.ttl_seconds == 3600.0
        assert settings.sync.concurrency_enabled is False
        assert settings.sync.max_workers == 5
        assert settings.sync.review_fanout_threshold == 3

    def test_settings_from_env(self, monkeypatch):
        """Test environment variables override defaults."""
        monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///./test.db")
        monkeypatch.setenv("GITHUB_TOKEN", "test_token_123")
        monkeypatch.setenv("ORGANIZATION", "python")
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")

        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite+aiosqlite:///./test.db"
        assert settings.github_token == "test_token_123"
        assert settings.organization == "python"
        assert settings.log_level == "DEBUG"

    def test_nested_settings_from_env(self, monkeypatch):
        """Nested sections use the double-underscore delimiter."""
        monkeypatch.setenv("SYNC__CONCURRENCY_ENABLED", "true")
        monkeypatch.setenv("SYNC__MAX_WORKERS", "8")
        monkeypatch.setenv("RETRY__MAX_RETRIES", "5")
        monkeypatch.setenv("CACHE__TTL_SECONDS", "60")

        settings = Settings(_env_file=None)

        assert settings.sync.concurrency_enabled is True
        assert settings.sync.max_workers == 8
        assert settings.retry.max_retries == 5
        assert settings.cache.ttl_seconds == 60.0

    def test_settings_environment_validation(self, monkeypatch):
        """Test that invalid environment value is rejected."""
        monkeypatch.setenv("ENVIRONMENT", "invalid")

        with pytest.raises(ValueError):
            Settings(_env_file=None)

    def test_settings_case_insensitive(self, monkeypatch):
        """Test that env var names are case-insensitive."""
        monkeypatch.setenv("database_url", "sqlite+aiosqlite:///./lower.db")
        monkeypatch.setenv("GITHUB_TOKEN", "upper_token")

        settings = Settings(_env_file=None)

        assert settings.database_url == "sqlite+aiosqlite:///./lower.db"
        assert settings.github_token == "upper_token"


class TestSectionValidation:
    """Bounds on the nested config sections."""

    def test_threshold_out_of_range(self):
        with pytest.raises(ValueError):
            RateLimitConfig(low_quota_threshold_pct=150.0)

    def test_negative_retries_rejected(self):
        with pytest.raises(ValueError):
            RetryConfig(max_retries=-1)

    def test_zero_ttl_rejected(self):
        with pytest.raises(ValueError):
            CacheConfig(ttl_seconds=0)

    def test_zero_workers_rejected(self):
        with pytest.raises(ValueError):
            SyncConfig(max_workers=0)


class TestLoadSettings:
    """Tests for load_settings function."""

    def test_returns_fresh_instances(self):
        """Each call builds a new Settings object (no process-wide cache)."""
        first = load_settings(_env_file=None)
        second = load_settings(_env_file=None)

        assert first is not second
        assert first == second

    def test_overrides_applied(self):
        settings = load_settings(_env_file=None, organization="python")
        assert settings.organization == "python"

"""Configuration settings for GitHub Org Sync."""

from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RateLimitConfig(BaseModel):
    """Configuration for the rate governor.

    Controls when the governor slows down ahead of quota exhaustion.
    """

    low_quota_threshold_pct: float = Field(
        default=10.0,
        ge=0.0,
        le=100.0,
        description="% remaining below which every call is paused briefly",
    )
    low_quota_pause_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Fixed pause applied while quota is low",
    )


class RetryConfig(BaseModel):
    """Configuration for retrying transient API failures."""

    max_retries: int = Field(
        default=3,
        ge=0,
        le=10,
        description="Retries after the first attempt for transient failures",
    )
    backoff_base: float = Field(
        default=2.0,
        ge=1.0,
        description="Backoff delay is backoff_base ** attempt seconds",
    )


class CacheConfig(BaseModel):
    """Configuration for the response cache."""

    ttl_seconds: float = Field(
        default=3600.0,
        gt=0.0,
        description="Seconds a cached response stays valid",
    )


class SyncConfig(BaseModel):
    """Configuration for sync behavior.

    Controls concurrency of the repository and review fan-out.
    """

    concurrency_enabled: bool = Field(
        default=False,
        description="Process repositories and reviews with a worker pool",
    )
    max_workers: int = Field(
        default=5,
        ge=1,
        le=50,
        description="Worker pool size per fan-out point",
    )
    review_fanout_threshold: int = Field(
        default=3,
        ge=0,
        description="Reviews are fanned out only when a PR has more than this many",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging behavior.

    Controls file logging, rotation, and output format.
    """

    log_file: str | None = Field(
        default=None,
        description="Optional path for file logging (enables rotation)",
    )
    rotation: str = Field(
        default="10 MB",
        description="When to rotate log file (e.g., '10 MB', '1 day')",
    )
    retention: str = Field(
        default="7 days",
        description="How long to keep rotated logs",
    )
    serialize: bool = Field(
        default=False,
        description="If True, output JSON format to file",
    )


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # --------------------------------------------------------------------------
    # Database
    # --------------------------------------------------------------------------
    database_url: str = Field(
        default="sqlite+aiosqlite:///./github_org_sync.db",
        description="Async SQLite database connection string",
    )

    # --------------------------------------------------------------------------
    # GitHub API
    # --------------------------------------------------------------------------
    github_token: str = Field(
        default="",
        description="GitHub personal access token",
    )
    organization: str = Field(
        default="vercel",
        description="GitHub organization whose public repositories are synced",
    )

    # --------------------------------------------------------------------------
    # Application
    # --------------------------------------------------------------------------
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Application environment",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    # --------------------------------------------------------------------------
    # Access layer
    # --------------------------------------------------------------------------
    rate_limit: RateLimitConfig = Field(
        default_factory=RateLimitConfig,
        description="Rate governor configuration",
    )
    retry: RetryConfig = Field(
        default_factory=RetryConfig,
        description="Transient failure retry configuration",
    )
    cache: CacheConfig = Field(
        default_factory=CacheConfig,
        description="Response cache configuration",
    )

    # --------------------------------------------------------------------------
    # Sync Configuration
    # --------------------------------------------------------------------------
    sync: SyncConfig = Field(
        default_factory=SyncConfig,
        description="Sync concurrency configuration",
    )

    # --------------------------------------------------------------------------
    # Logging Configuration
    # --------------------------------------------------------------------------
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging configuration (file output, rotation)",
    )


def load_settings(**overrides: object) -> Settings:
    """Build a fresh Settings instance.

    The CLI calls this once per invocation and hands the result (or its
    sections) to every component explicitly.
    """
    return Settings(**overrides)  # type: ignore[arg-type]

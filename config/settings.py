"""Application settings using Pydantic."""
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="JOBPULSE_",
        extra="ignore",
    )

    # Remote metadata service
    base_url: str = Field(
        default="https://www.linkedin.com",
        description="Scheme and host of the job metadata service",
    )
    query_id: str = Field(
        default="voyagerJobsDashJobPostingDetailSections.c07b0d44515bceba51a9b73c01b0cecb",
        description="GraphQL query ID for the applicant insights call",
    )
    request_timeout_seconds: float = Field(
        default=15,
        description="Timeout for each remote call",
    )
    session_token: Optional[str] = Field(
        default=None,
        description="Fallback session token when the store has none",
    )

    # Scheduling
    max_jitter_seconds: float = Field(
        default=2.0,
        description="Upper bound of the random delay before each fetch",
    )
    sweep_interval_seconds: float = Field(
        default=3.0,
        description="Seconds between periodic re-scans",
    )
    max_sweeps: int = Field(
        default=10,
        description="Number of periodic re-scans after start-up",
    )
    debounce_seconds: float = Field(
        default=0.25,
        description="Quiet period after a document change before re-scanning",
    )

    # Behaviour
    default_limit: int = Field(
        default=300,
        description="Applicant threshold used when none is stored",
    )
    retry_failed_entries: bool = Field(
        default=False,
        description="Retry listings whose metrics fetch failed on later scans",
    )

    # Paths
    store_path: Path = Field(
        default=Path.home() / ".jobpulse" / "settings.yaml",
        description="YAML file persisting the limit and session token",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Level of the jobpulse package logger")
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path for a rotating log file",
    )
    log_file_max_bytes: int = Field(default=5 * 1024 * 1024, ge=1024)
    log_file_backups: int = Field(default=3, ge=0)


# Global settings instance
settings = Settings()

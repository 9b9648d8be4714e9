"""
Embedding worker configuration settings.

Concurrency, retry policy and timer intervals for the job worker.

Dependencies: pydantic, pydantic_settings
System role: Background job processing configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkerSettings(BaseSettings):
    """Job polling, retry and stale-job recovery configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="WORKER_",
        case_sensitive=False,
        extra="ignore",
    )

    max_concurrent_jobs: int = Field(default=2, gt=0, description="Jobs processed at once")
    max_job_attempts: int = Field(default=3, gt=0, description="Attempts before dead-lettering")

    # Retry policy
    backoff_base_minutes: int = Field(
        default=2,
        gt=1,
        description="Exponential backoff base; delay is base**attempts minutes",
    )
    backoff_max_minutes: int = Field(
        default=60,
        gt=0,
        description="Upper bound for a single retry delay in minutes",
    )

    # Timers
    polling_interval_ms: int = Field(default=5000, gt=0, description="Job polling interval")
    cleanup_interval_ms: int = Field(default=300000, gt=0, description="Stale job sweep interval")
    stale_job_timeout_ms: int = Field(
        default=1800000,
        gt=0,
        description="Processing jobs older than this are considered stale",
    )

    # Priorities
    default_priority: int = Field(default=0, description="Priority for submitted documents")
    manual_priority: int = Field(default=1, description="Priority for manual reprocessing requests")

"""
Unified application settings.

Aggregates all configuration modules into a single Settings class,
constructed once per process.

Dependencies: All config modules
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from dreamcore.configs.base import BaseSettings
from dreamcore.configs.database import DatabaseSettings
from dreamcore.configs.embedding_model import EmbeddingModelSettings
from dreamcore.configs.pipeline import PipelineSettings
from dreamcore.configs.retrieval import RetrievalSettings
from dreamcore.configs.worker import WorkerSettings


class Settings(BaseSettings):
    """Unified application settings aggregating all config modules."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    pipeline: PipelineSettings = Field(default_factory=PipelineSettings)
    worker: WorkerSettings = Field(default_factory=WorkerSettings)
    retrieval: RetrievalSettings = Field(default_factory=RetrievalSettings)
    embedding_model: EmbeddingModelSettings = Field(default_factory=EmbeddingModelSettings)


@lru_cache
def get_settings() -> Settings:
    """
    Get application settings singleton.

    Returns Settings instance, cached for the process lifetime.
    Environment variables loaded once at startup.

    Returns:
        Settings: Application settings instance

    Usage:
        from dreamcore.configs import get_settings
        settings = get_settings()
    """
    return Settings()

"""
Embedding model configuration settings.

Provider settings for the production embedder.

Dependencies: pydantic, pydantic_settings
System role: Embedding provider configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class EmbeddingModelSettings(BaseSettings):
    """Google Gemini embedding provider configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EMBEDDING_MODEL_",
        case_sensitive=False,
        extra="ignore",
    )

    model: str = Field(
        default="models/gemini-embedding-001",
        description="Google Gemini embedding model ID",
    )
    dimension: int = Field(
        default=1024,
        gt=0,
        description="Output dimensionality requested from the model",
    )
    google_api_key: str | None = Field(
        default=None,
        description="API key; falls back to GOOGLE_API_KEY when unset",
    )

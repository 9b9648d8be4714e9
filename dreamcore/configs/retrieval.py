"""
Fragment retrieval configuration settings.

Thresholds and pool sizes for the three retrieval tiers. The theme
association floor and the semantic threshold are independent knobs.

Dependencies: pydantic, pydantic_settings
System role: Knowledge fragment retrieval configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RetrievalSettings(BaseSettings):
    """Knowledge fragment retrieval configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="RETRIEVAL_",
        case_sensitive=False,
        extra="ignore",
    )

    similarity_floor: float = Field(
        default=0.3,
        ge=0.0,
        le=1.0,
        description="Minimum fragment-theme association score",
    )
    association_row_limit: int = Field(
        default=200,
        gt=0,
        description="Maximum fragment-theme rows fetched per request",
    )
    candidate_pool_size: int = Field(
        default=10,
        gt=0,
        description="Fragments kept after grouping theme associations",
    )
    max_results: int = Field(default=10, gt=0, description="Fragments returned to the caller")
    semantic_threshold: float = Field(
        default=0.5,
        ge=-1.0,
        le=1.0,
        description="Minimum cosine similarity for the semantic fallback",
    )
    text_search_limit: int = Field(
        default=50,
        gt=0,
        description="Rows scanned by the keyword fallback before ranking",
    )

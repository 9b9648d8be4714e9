"""
Embedding pipeline configuration settings.

Chunking, validation, embedding batch and theme matching parameters for the
document pipeline. Token counts are estimates derived from character length
via ``chars_per_token``.

Dependencies: pydantic, pydantic_settings
System role: Document pipeline configuration
"""

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PipelineSettings(BaseSettings):
    """Settings for the chunk -> embed -> theme matching pipeline."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="EMBEDDING_PIPELINE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Validation
    min_tokens_for_embedding: int = Field(
        default=10,
        ge=1,
        description="Documents estimated below this many tokens are skipped",
    )
    supported_language_prefixes: list[str] = Field(
        default=["en"],
        description="Language code prefixes accepted for embedding; others are skipped",
    )

    # Chunking
    max_tokens_per_chunk: int = Field(
        default=1000,
        gt=0,
        description="Hard input ceiling of the embedding model",
    )
    chunk_size_tokens: int = Field(
        default=750,
        gt=0,
        description="Target chunk size when a document must be split",
    )
    overlap_tokens: int = Field(
        default=100,
        ge=0,
        description="Overlap carried between neighbouring chunks",
    )
    chars_per_token: int = Field(
        default=4,
        gt=0,
        description="Characters per token approximation constant",
    )

    # Embedding
    embedding_batch_size: int = Field(
        default=5,
        gt=0,
        description="Chunks sent to the embedder per call",
    )
    embedding_batch_delay_ms: int = Field(
        default=100,
        ge=0,
        description="Pause between embedding batches",
    )
    embedding_version: str = Field(
        default="gemini-embedding-001-v1",
        description="Model/version tag stored with every embedding record",
    )
    embedding_dimension: int | None = Field(
        default=None,
        description="Expected vector dimension; batches with other sizes are rejected",
    )

    # Theme matching
    theme_similarity_threshold: float = Field(
        default=0.6,
        ge=-1.0,
        le=1.0,
        description="Minimum cosine similarity for a theme to be associated",
    )
    max_themes_per_document: int = Field(
        default=5,
        gt=0,
        description="Maximum number of themes stored per document",
    )

    @model_validator(mode="after")
    def _check_chunk_bounds(self) -> "PipelineSettings":
        # A chunk carries its core plus up to one overlap on each side.
        if self.chunk_size_tokens + 2 * self.overlap_tokens > self.max_tokens_per_chunk:
            raise ValueError(
                "chunk_size_tokens + 2 * overlap_tokens must not exceed max_tokens_per_chunk"
            )
        if self.overlap_tokens >= self.chunk_size_tokens:
            raise ValueError("overlap_tokens must be smaller than chunk_size_tokens")
        return self

    @property
    def min_chars_for_embedding(self) -> int:
        """Minimum transcript length in characters."""
        return self.min_tokens_for_embedding * self.chars_per_token

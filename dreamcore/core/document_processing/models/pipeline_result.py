"""
Pipeline result model for document processing.

Represents the outcome of processing a document through the pipeline.

Dependencies: pydantic
System role: Return type for DocumentPipeline.process()
"""

from uuid import UUID

from pydantic import BaseModel, Field

from .theme import ThemeMatch


class PipelineResult(BaseModel):
    """Result of document processing pipeline execution."""

    document_id: UUID = Field(description="Processed document")
    chunk_count: int = Field(description="Number of chunks generated")
    embedding_count: int = Field(description="Number of chunk embeddings stored")
    themes: list[ThemeMatch] = Field(default_factory=list, description="Stored theme associations")
    processing_time_ms: float = Field(description="Total processing time in milliseconds")

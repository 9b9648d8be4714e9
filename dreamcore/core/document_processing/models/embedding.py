"""
Chunk embedding result model.

Dependencies: pydantic
System role: Output of EmbeddingTask, input of ThemeMatchingTask
"""

from pydantic import BaseModel, Field

from .chunk import Chunk


class ChunkEmbedding(BaseModel):
    """Embedding vector produced for one chunk."""

    chunk: Chunk
    vector: list[float] = Field(description="Embedding vector")
    processing_time_ms: float = Field(default=0.0, description="Latency of the producing batch")

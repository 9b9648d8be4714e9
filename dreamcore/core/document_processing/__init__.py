"""
Document embedding pipeline.

Validate -> chunk -> embed -> match themes -> persist.
"""

from .entrypoint import DocumentPipeline
from .models import CatalogTheme, Chunk, ChunkEmbedding, PipelineResult, ThemeMatch

__all__ = [
    "DocumentPipeline",
    "Chunk",
    "ChunkEmbedding",
    "CatalogTheme",
    "ThemeMatch",
    "PipelineResult",
]

"""
Models for the document pipeline.

Exports: Chunk, ChunkEmbedding, CatalogTheme, ThemeMatch, PipelineResult
"""

from .chunk import Chunk
from .embedding import ChunkEmbedding
from .pipeline_result import PipelineResult
from .theme import CatalogTheme, ThemeMatch

__all__ = [
    "Chunk",
    "ChunkEmbedding",
    "CatalogTheme",
    "ThemeMatch",
    "PipelineResult",
]

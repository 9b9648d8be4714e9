"""
Task modules for the embedding pipeline.

Exports: ValidationTask, ChunkingTask, EmbeddingTask, ThemeMatchingTask
"""

from .chunking_task import ChunkingTask
from .embedding_task import EmbeddingTask
from .theme_matching_task import ThemeMatchingTask
from .validation_task import TOO_SHORT_REASON, ValidationTask

__all__ = [
    "ValidationTask",
    "TOO_SHORT_REASON",
    "ChunkingTask",
    "EmbeddingTask",
    "ThemeMatchingTask",
]

"""
Background workers.

Exports: EmbeddingWorker, JobEventListener
"""

from dreamcore.workers.embedding_worker import EmbeddingWorker, JobEventListener

__all__ = ["EmbeddingWorker", "JobEventListener"]

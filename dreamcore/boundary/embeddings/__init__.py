"""
Embedding provider boundary.

Exports the Embedder protocol and the LangChain adapter. The Gemini
provider lives in ``dreamcore.boundary.embeddings.gemini`` and is imported
only by the worker entry point.
"""

from dreamcore.boundary.embeddings.embedder import Embedder, LangChainEmbedder

__all__ = ["Embedder", "LangChainEmbedder"]

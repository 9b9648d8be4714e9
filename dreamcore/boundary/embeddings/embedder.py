"""
Embedding capability consumed by the pipeline, the retriever and services.

The core only needs an async batched ``embed(texts) -> vectors`` call.
LangChainEmbedder adapts any langchain_core Embeddings implementation to it.

Dependencies: langchain_core
System role: Embedding provider boundary
"""

import logging
from typing import Protocol, runtime_checkable

from langchain_core.embeddings import Embeddings

logger = logging.getLogger(__name__)


@runtime_checkable
class Embedder(Protocol):
    """Batched text embedding capability."""

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """
        Embed texts.

        Args:
            texts: Texts to embed

        Returns:
            list[list[float]]: One vector per input text, in input order
        """
        ...


class LangChainEmbedder:
    """Embedder backed by a langchain_core Embeddings instance."""

    def __init__(self, embeddings: Embeddings) -> None:
        """
        Initialize adapter.

        Args:
            embeddings: Any LangChain embeddings model (Gemini, Bedrock, fake)
        """
        self._embeddings = embeddings

    @property
    def embeddings(self) -> Embeddings:
        """Underlying LangChain embeddings model."""
        return self._embeddings

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        logger.debug(
            f"{__name__}:embed - Embedding batch",
            extra={"batch_size": len(texts), "model": type(self._embeddings).__name__},
        )
        return await self._embeddings.aembed_documents(texts)

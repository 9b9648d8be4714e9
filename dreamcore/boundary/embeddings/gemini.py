"""
Google Gemini embedder with a fixed output dimensionality.

GoogleGenerativeAIEmbeddings does not apply a configured dimension to every
call, while stored chunk, theme and fragment vectors must share one. The
embedder passes ``output_dimensionality`` explicitly on each batch.

Dependencies: langchain_google_genai, langchain_core
System role: Production embedding provider
"""

import logging

from langchain_core.runnables.config import run_in_executor
from langchain_google_genai import GoogleGenerativeAIEmbeddings

from dreamcore.boundary.embeddings.embedder import LangChainEmbedder
from dreamcore.configs.embedding_model import EmbeddingModelSettings

logger = logging.getLogger(__name__)

DOCUMENT_TASK_TYPE = "RETRIEVAL_DOCUMENT"


class GeminiEmbedder(LangChainEmbedder):
    """LangChainEmbedder that pins Gemini's output dimensionality."""

    def __init__(
        self,
        embeddings: GoogleGenerativeAIEmbeddings,
        dimension: int,
        task_type: str = DOCUMENT_TASK_TYPE,
    ) -> None:
        super().__init__(embeddings)
        self.dimension = dimension
        self.task_type = task_type

    async def embed(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        # The sync client call runs in the default executor
        return await run_in_executor(
            None,
            self.embeddings.embed_documents,
            texts,
            task_type=self.task_type,
            output_dimensionality=self.dimension,
        )


def build_gemini_embedder(settings: EmbeddingModelSettings) -> GeminiEmbedder:
    """
    Build the production embedder from settings.

    Args:
        settings: Embedding model settings

    Returns:
        GeminiEmbedder: Embedder requesting settings.dimension-sized vectors
    """
    kwargs = {}
    if settings.google_api_key:
        kwargs["google_api_key"] = settings.google_api_key
    embeddings = GoogleGenerativeAIEmbeddings(model=settings.model, **kwargs)
    logger.info(
        f"{__name__}:build_gemini_embedder - Initialized with model={settings.model}, "
        f"output_dimensionality={settings.dimension}"
    )
    return GeminiEmbedder(embeddings, settings.dimension)

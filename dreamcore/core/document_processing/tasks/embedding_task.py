"""
Batched embedding generation for document chunks.

Sends chunks to the embedder in fixed-size batches with a short pause
between batches. A failing batch is logged and skipped; the step fails
only when no chunk could be embedded.

Dependencies: dreamcore.boundary.embeddings, asyncio
System role: Second stage of the embedding pipeline
"""

import asyncio
import logging
import time
from uuid import UUID

from dreamcore.boundary.embeddings import Embedder
from dreamcore.configs.pipeline import PipelineSettings
from dreamcore.core.exceptions import EmbeddingBatchError, EmbeddingError

from ..models import Chunk, ChunkEmbedding

logger = logging.getLogger(__name__)


class EmbeddingTask:
    """Generate embeddings for chunks through an Embedder."""

    def __init__(
        self,
        embedder: Embedder,
        batch_size: int = 5,
        batch_delay_ms: int = 100,
        expected_dimension: int | None = None,
    ) -> None:
        """
        Initialize embedding task.

        Args:
            embedder: Batched embedding capability
            batch_size: Chunks per embedder call
            batch_delay_ms: Pause between consecutive batches
            expected_dimension: Reject vectors of any other size (None disables)

        Raises:
            ValueError: When batch_size is not positive
        """
        if batch_size <= 0:
            raise ValueError("batch_size must be positive")

        self._embedder = embedder
        self.batch_size = batch_size
        self.batch_delay_ms = batch_delay_ms
        self.expected_dimension = expected_dimension

    @classmethod
    def from_settings(cls, embedder: Embedder, settings: PipelineSettings) -> "EmbeddingTask":
        return cls(
            embedder=embedder,
            batch_size=settings.embedding_batch_size,
            batch_delay_ms=settings.embedding_batch_delay_ms,
            expected_dimension=settings.embedding_dimension,
        )

    async def embed_chunks(
        self,
        document_id: UUID | None,
        chunks: list[Chunk],
    ) -> list[ChunkEmbedding]:
        """
        Embed chunks batch by batch.

        Args:
            document_id: Document the chunks belong to (for logging)
            chunks: Chunks to embed

        Returns:
            list[ChunkEmbedding]: Embeddings of every chunk in a successful batch,
                in chunk order

        Raises:
            EmbeddingError: When no embedding was produced
        """
        if not chunks:
            return []

        batches = [
            chunks[i : i + self.batch_size] for i in range(0, len(chunks), self.batch_size)
        ]
        results: list[ChunkEmbedding] = []
        failed_batches: list[int] = []

        for batch_index, batch in enumerate(batches):
            if batch_index > 0 and self.batch_delay_ms > 0:
                await asyncio.sleep(self.batch_delay_ms / 1000)

            try:
                results.extend(await self._embed_batch(document_id, batch_index, batch))
            except EmbeddingBatchError as e:
                failed_batches.append(batch_index)
                logger.warning(
                    f"{__name__}:embed_chunks - Batch failed, skipping: {e}",
                    extra={"document_id": str(document_id), "batch_index": batch_index},
                )

        if not results:
            raise EmbeddingError(
                "No embeddings generated",
                document_id=document_id,
                details={"failed_batches": failed_batches, "chunk_count": len(chunks)},
            )

        logger.info(
            f"{__name__}:embed_chunks - Embedded {len(results)}/{len(chunks)} chunks",
            extra={
                "document_id": str(document_id),
                "batches": len(batches),
                "failed_batches": len(failed_batches),
            },
        )
        return results

    async def _embed_batch(
        self,
        document_id: UUID | None,
        batch_index: int,
        batch: list[Chunk],
    ) -> list[ChunkEmbedding]:
        start_time = time.perf_counter()
        try:
            vectors = await self._embedder.embed([chunk.text for chunk in batch])
        except Exception as e:
            raise EmbeddingBatchError(
                f"Embedder call failed: {type(e).__name__}: {e}",
                batch_index=batch_index,
                document_id=document_id,
            ) from e
        elapsed_ms = (time.perf_counter() - start_time) * 1000

        if len(vectors) != len(batch):
            raise EmbeddingBatchError(
                f"Embedder returned {len(vectors)} vectors for {len(batch)} chunks",
                batch_index=batch_index,
                document_id=document_id,
            )
        if self.expected_dimension is not None:
            bad = [len(v) for v in vectors if len(v) != self.expected_dimension]
            if bad:
                raise EmbeddingBatchError(
                    f"Expected dimension {self.expected_dimension}, got {bad[0]}",
                    batch_index=batch_index,
                    document_id=document_id,
                )

        return [
            ChunkEmbedding(chunk=chunk, vector=list(vector), processing_time_ms=elapsed_ms)
            for chunk, vector in zip(batch, vectors)
        ]

"""
Document pipeline orchestrator.

Coordinates validation, chunking, embedding, theme matching and
persistence for one document inside a caller-owned session. The caller
commits, so the results land atomically with the job status change.

Dependencies: All task modules, dreamcore.boundary.db, dreamcore.configs
System role: Pipeline orchestration (coordinates only)
"""

import logging
import time
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dreamcore.boundary.db.CRUD import (
    DocumentCRUD,
    DocumentThemeCRUD,
    EmbeddingCRUD,
    ThemeCRUD,
)
from dreamcore.boundary.embeddings import Embedder
from dreamcore.configs.pipeline import PipelineSettings
from dreamcore.core.exceptions import DocumentNotFoundError

from .models import CatalogTheme, ChunkEmbedding, PipelineResult, ThemeMatch
from .tasks import ChunkingTask, EmbeddingTask, ThemeMatchingTask, ValidationTask

logger = logging.getLogger(__name__)


class DocumentPipeline:
    """Orchestrate document embedding: validate -> chunk -> embed -> match -> persist."""

    def __init__(
        self,
        embedder: Embedder,
        settings: PipelineSettings | None = None,
        document_crud: DocumentCRUD | None = None,
        embedding_crud: EmbeddingCRUD | None = None,
        theme_crud: ThemeCRUD | None = None,
        document_theme_crud: DocumentThemeCRUD | None = None,
    ) -> None:
        """
        Initialize pipeline with configuration.

        Args:
            embedder: Batched embedding capability
            settings: Pipeline settings (uses defaults if None)
            document_crud: Document store
            embedding_crud: Embedding store
            theme_crud: Theme catalog
            document_theme_crud: Document-theme association store
        """
        self._settings = settings or PipelineSettings()

        self._validation_task = ValidationTask.from_settings(self._settings)
        self._chunking_task = ChunkingTask.from_settings(self._settings)
        self._embedding_task = EmbeddingTask.from_settings(embedder, self._settings)
        self._theme_matching_task = ThemeMatchingTask(
            threshold=self._settings.theme_similarity_threshold,
            top_k=self._settings.max_themes_per_document,
        )

        self._document_crud = document_crud or DocumentCRUD()
        self._embedding_crud = embedding_crud or EmbeddingCRUD()
        self._theme_crud = theme_crud or ThemeCRUD()
        self._document_theme_crud = document_theme_crud or DocumentThemeCRUD()

    @property
    def settings(self) -> PipelineSettings:
        return self._settings

    async def process(self, session: AsyncSession, document_id: UUID) -> PipelineResult:
        """
        Process a document through the full pipeline.

        Args:
            session: Async database session (not committed here)
            document_id: Document to process

        Returns:
            PipelineResult: Chunk, embedding and theme counts with timing

        Raises:
            DocumentNotFoundError: Document does not exist
            DocumentValidationError: Document is not eligible for embedding
            EmbeddingError: No chunk could be embedded
        """
        start_time = time.perf_counter()

        document = await self._document_crud.get_by_id(session, document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)

        self._validation_task.validate(document.raw_text, document.language, document_id)

        chunks = self._chunking_task.chunk(document.raw_text, document_id)
        embeddings = await self._embedding_task.embed_chunks(document_id, chunks)
        await self._save_embeddings(session, document_id, embeddings)

        catalog = await self._load_catalog(session)
        matches = self._theme_matching_task.match(document_id, embeddings, catalog)
        await self._save_themes(session, document_id, matches)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"{__name__}:process - Document processed",
            extra={
                "document_id": str(document_id),
                "chunk_count": len(chunks),
                "embedding_count": len(embeddings),
                "theme_count": len(matches),
                "processing_time_ms": round(elapsed_ms, 1),
            },
        )
        return PipelineResult(
            document_id=document_id,
            chunk_count=len(chunks),
            embedding_count=len(embeddings),
            themes=matches,
            processing_time_ms=elapsed_ms,
        )

    async def _save_embeddings(
        self,
        session: AsyncSession,
        document_id: UUID,
        embeddings: list[ChunkEmbedding],
    ) -> None:
        rows = [
            {
                "document_id": document_id,
                "chunk_index": e.chunk.chunk_index,
                "chunk_text": e.chunk.text,
                "embedding": e.vector,
                "embedding_version": self._settings.embedding_version,
                "token_count": e.chunk.token_count,
                "processing_time_ms": e.processing_time_ms,
                "chunk_metadata": e.chunk.span_metadata(),
            }
            for e in embeddings
        ]
        await self._embedding_crud.upsert_many(session, rows)
        await self._embedding_crud.delete_stale(
            session, document_id, [e.chunk.chunk_index for e in embeddings]
        )

    async def _load_catalog(self, session: AsyncSession) -> list[CatalogTheme]:
        themes = await self._theme_crud.get_active_catalog(session)
        return [
            CatalogTheme(code=theme.code, label=theme.label, vector=theme.embedding)
            for theme in themes
        ]

    async def _save_themes(
        self,
        session: AsyncSession,
        document_id: UUID,
        matches: list[ThemeMatch],
    ) -> None:
        await self._document_theme_crud.replace_for_document(
            session,
            document_id,
            [
                {
                    "theme_code": m.theme_code,
                    "similarity": m.similarity,
                    "chunk_index": m.chunk_index,
                }
                for m in matches
            ],
        )

"""
Document embedding CRUD operations.

Upserts chunk embeddings keyed on (document_id, chunk_index) and prunes
indices left over from an earlier, longer run of the same document.

Dependencies: sqlalchemy, dreamcore.boundary.db.models.embedding_model
System role: Chunk embedding persistence
"""

import uuid
from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dreamcore.boundary.db.base import utcnow
from dreamcore.boundary.db.CRUD.base_crud import BaseCRUD, dialect_insert
from dreamcore.boundary.db.models.document_model import DocumentModel, DocumentStatus
from dreamcore.boundary.db.models.embedding_model import DocumentEmbeddingModel

_UPSERT_COLUMNS = (
    "chunk_text",
    "embedding",
    "embedding_version",
    "token_count",
    "processing_time_ms",
    "chunk_metadata",
    "updated_at",
)


class EmbeddingCRUD(BaseCRUD[DocumentEmbeddingModel]):
    """CRUD operations for DocumentEmbeddingModel."""

    def __init__(self) -> None:
        """Initialize EmbeddingCRUD with DocumentEmbeddingModel."""
        super().__init__(DocumentEmbeddingModel)

    async def upsert_many(
        self,
        session: AsyncSession,
        rows: Sequence[dict[str, Any]],
    ) -> int:
        """
        Insert or update embedding rows keyed on (document_id, chunk_index).

        Args:
            session: Async database session
            rows: Column values per chunk (document_id, chunk_index, chunk_text,
                embedding, embedding_version, token_count, processing_time_ms,
                chunk_metadata)

        Returns:
            int: Number of rows written
        """
        if not rows:
            return 0

        now = utcnow()
        values = [
            {"id": uuid.uuid4(), "created_at": now, "updated_at": now, **row}
            for row in rows
        ]
        stmt = dialect_insert(session, DocumentEmbeddingModel).values(values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[
                DocumentEmbeddingModel.document_id,
                DocumentEmbeddingModel.chunk_index,
            ],
            set_={col: getattr(stmt.excluded, col) for col in _UPSERT_COLUMNS},
        )
        await session.execute(stmt)
        return len(values)

    async def delete_stale(
        self,
        session: AsyncSession,
        document_id: UUID,
        keep_indices: Sequence[int],
    ) -> int:
        """
        Delete a document's embeddings whose chunk index was not just written.

        Removes indices left by an earlier, longer run and chunks whose
        batch failed in the current run.

        Args:
            session: Async database session
            document_id: Document UUID
            keep_indices: Chunk indices written by the current run

        Returns:
            int: Number of rows deleted
        """
        stmt = delete(DocumentEmbeddingModel).where(
            DocumentEmbeddingModel.document_id == document_id,
        )
        if keep_indices:
            stmt = stmt.where(DocumentEmbeddingModel.chunk_index.not_in(list(keep_indices)))
        result = await session.execute(stmt)
        return result.rowcount

    async def get_by_document(
        self,
        session: AsyncSession,
        document_id: UUID,
    ) -> Sequence[DocumentEmbeddingModel]:
        """
        Retrieve a document's embeddings ordered by chunk index.

        Args:
            session: Async database session
            document_id: Document UUID

        Returns:
            Sequence of DocumentEmbeddingModels
        """
        stmt = (
            select(DocumentEmbeddingModel)
            .where(DocumentEmbeddingModel.document_id == document_id)
            .order_by(DocumentEmbeddingModel.chunk_index)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_by_document(self, session: AsyncSession, document_id: UUID) -> int:
        """Count a document's stored embeddings."""
        stmt = select(func.count()).where(DocumentEmbeddingModel.document_id == document_id)
        result = await session.execute(stmt)
        return result.scalar_one()

    async def get_for_completed_documents(
        self,
        session: AsyncSession,
        exclude_document_id: UUID | None = None,
    ) -> Sequence[tuple[UUID, int, list[float]]]:
        """
        Retrieve (document_id, chunk_index, embedding) for completed documents.

        Args:
            session: Async database session
            exclude_document_id: Document to leave out (e.g. the query document)

        Returns:
            Sequence of (document_id, chunk_index, embedding) tuples
        """
        stmt = (
            select(
                DocumentEmbeddingModel.document_id,
                DocumentEmbeddingModel.chunk_index,
                DocumentEmbeddingModel.embedding,
            )
            .join(DocumentModel, DocumentModel.id == DocumentEmbeddingModel.document_id)
            .where(DocumentModel.status == DocumentStatus.COMPLETED)
        )
        if exclude_document_id is not None:
            stmt = stmt.where(DocumentEmbeddingModel.document_id != exclude_document_id)
        result = await session.execute(stmt)
        return [tuple(row) for row in result.all()]

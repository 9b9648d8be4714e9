"""
Document CRUD operations.

Provides Create, Read, Update, Delete operations for DocumentModel
with status transition helpers used by the embedding worker.

Dependencies: sqlalchemy, dreamcore.boundary.db.models.document_model
System role: Document persistence operations
"""

from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dreamcore.boundary.db.base import utcnow
from dreamcore.boundary.db.CRUD.base_crud import BaseCRUD
from dreamcore.boundary.db.models.document_model import DocumentModel, DocumentStatus


class DocumentCRUD(BaseCRUD[DocumentModel]):
    """
    CRUD operations for DocumentModel.

    Extends BaseCRUD with status queries and the lifecycle transitions
    driven by the worker (processing, completed, pending, failed, skipped).
    """

    def __init__(self) -> None:
        """Initialize DocumentCRUD with DocumentModel."""
        super().__init__(DocumentModel)

    async def get_by_status(
        self,
        session: AsyncSession,
        status: DocumentStatus,
        limit: int | None = None,
    ) -> Sequence[DocumentModel]:
        """
        Retrieve documents by processing status.

        Args:
            session: Async database session
            status: Document processing status to filter by
            limit: Maximum number of documents to return

        Returns:
            Sequence of DocumentModels with matching status
        """
        stmt = (
            select(DocumentModel)
            .where(DocumentModel.status == status)
            .order_by(DocumentModel.created_at)
        )
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await session.execute(stmt)
        return result.scalars().all()

    async def mark_processing(
        self,
        session: AsyncSession,
        id: UUID,
        attempt_count: int,
    ) -> DocumentModel | None:
        """
        Mark document as being processed by a worker.

        Args:
            session: Async database session
            id: Document UUID
            attempt_count: Attempt number of the claimed job

        Returns:
            Updated DocumentModel if found, None otherwise
        """
        return await self.update_by_id(
            session,
            id,
            status=DocumentStatus.PROCESSING,
            attempt_count=attempt_count,
        )

    async def mark_completed(
        self,
        session: AsyncSession,
        id: UUID,
        processed_at: datetime | None = None,
    ) -> DocumentModel | None:
        """
        Mark document as embedded and themed.

        Args:
            session: Async database session
            id: Document UUID
            processed_at: Completion timestamp (defaults to now)

        Returns:
            Updated DocumentModel if found, None otherwise
        """
        return await self.update_by_id(
            session,
            id,
            status=DocumentStatus.COMPLETED,
            processed_at=processed_at or utcnow(),
            last_error=None,
        )

    async def mark_pending(
        self,
        session: AsyncSession,
        id: UUID,
        error_message: str | None = None,
    ) -> DocumentModel | None:
        """
        Return document to pending, e.g. after a failed attempt that will be retried.

        Args:
            session: Async database session
            id: Document UUID
            error_message: Error from the failed attempt

        Returns:
            Updated DocumentModel if found, None otherwise
        """
        return await self.update_by_id(
            session,
            id,
            status=DocumentStatus.PENDING,
            last_error=error_message,
        )

    async def mark_failed(
        self,
        session: AsyncSession,
        id: UUID,
        error_message: str,
    ) -> DocumentModel | None:
        """
        Mark document as permanently failed.

        Args:
            session: Async database session
            id: Document UUID
            error_message: Final error

        Returns:
            Updated DocumentModel if found, None otherwise
        """
        return await self.update_by_id(
            session,
            id,
            status=DocumentStatus.FAILED,
            last_error=error_message,
        )

    async def mark_skipped(
        self,
        session: AsyncSession,
        id: UUID,
        reason: str,
        processed_at: datetime | None = None,
    ) -> DocumentModel | None:
        """
        Mark document as not eligible for embedding.

        Args:
            session: Async database session
            id: Document UUID
            reason: Skip reason, stored in last_error
            processed_at: Decision timestamp (defaults to now)

        Returns:
            Updated DocumentModel if found, None otherwise
        """
        return await self.update_by_id(
            session,
            id,
            status=DocumentStatus.SKIPPED,
            last_error=reason,
            processed_at=processed_at or utcnow(),
        )

    async def set_status_many(
        self,
        session: AsyncSession,
        ids: Sequence[UUID],
        status: DocumentStatus,
        error_message: str | None = None,
    ) -> int:
        """
        Set status on several documents at once (stale job recovery).

        Args:
            session: Async database session
            ids: Document UUIDs
            status: New status
            error_message: Stored in last_error

        Returns:
            int: Number of documents updated
        """
        if not ids:
            return 0
        stmt = (
            update(DocumentModel)
            .where(DocumentModel.id.in_(list(ids)))
            .values(status=status, last_error=error_message, updated_at=utcnow())
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount

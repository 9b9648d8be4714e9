"""
Document service orchestrator.

Coordinates transcript submission, manual re-processing requests, status
and theme queries, and similar-document search. Processing itself happens
in the embedding worker.

Dependencies: dreamcore.boundary.db, dreamcore.boundary.embeddings, dreamcore.core
System role: Document management orchestration
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dreamcore.application.services.job_service import JobService
from dreamcore.boundary.db.CRUD import (
    DocumentCRUD,
    DocumentThemeCRUD,
    EmbeddingCRUD,
    ThemeCRUD,
)
from dreamcore.boundary.db.models import DocumentStatus
from dreamcore.boundary.embeddings import Embedder
from dreamcore.configs.worker import WorkerSettings
from dreamcore.core.exceptions import DocumentNotFoundError, DocumentProcessingError
from dreamcore.core.vector_math import cosine_similarity
from dreamcore.models.document import (
    DocumentStatusResponse,
    DocumentThemeResponse,
    SimilarDocument,
    SubmittedDocument,
)

logger = logging.getLogger(__name__)


class DocumentService:
    """
    Document service orchestrator.

    Public methods own their transaction: they commit on success and roll
    back before re-raising on failure.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: WorkerSettings | None = None,
        embedder: Embedder | None = None,
        job_service: JobService | None = None,
        document_crud: DocumentCRUD | None = None,
        embedding_crud: EmbeddingCRUD | None = None,
        theme_crud: ThemeCRUD | None = None,
        document_theme_crud: DocumentThemeCRUD | None = None,
    ) -> None:
        """
        Initialize document service.

        Args:
            db: AsyncSession for document operations
            settings: Worker settings for priorities and attempts
            embedder: Needed only by find_similar_documents
            job_service: Optional JobService (created on db if None)
            document_crud: Document store
            embedding_crud: Embedding store
            theme_crud: Theme catalog
            document_theme_crud: Document-theme association store
        """
        self.db = db
        self._settings = settings or WorkerSettings()
        self._embedder = embedder
        self._job_service = job_service or JobService(db, self._settings)
        self._document_crud = document_crud or DocumentCRUD()
        self._embedding_crud = embedding_crud or EmbeddingCRUD()
        self._theme_crud = theme_crud or ThemeCRUD()
        self._document_theme_crud = document_theme_crud or DocumentThemeCRUD()

    async def submit_document(
        self,
        raw_text: str,
        language: str | None = None,
        priority: int | None = None,
    ) -> SubmittedDocument:
        """
        Store a transcript and enqueue its embedding job.

        The document and its job are committed together.

        Args:
            raw_text: Transcript text
            language: Optional ISO language code
            priority: Job priority (defaults to settings.default_priority)

        Returns:
            SubmittedDocument: New document and job ids
        """
        try:
            document = await self._document_crud.create(
                self.db,
                raw_text=raw_text,
                language=language,
                status=DocumentStatus.PENDING,
                attempt_count=0,
            )
            job = await self._job_service.enqueue(document.id, priority)
            await self.db.commit()
        except Exception as e:
            logger.error(f"{__name__}:submit_document - {type(e).__name__}: {e}")
            await self.db.rollback()
            raise

        logger.info(
            f"{__name__}:submit_document - Document submitted",
            extra={"document_id": str(document.id), "job_id": str(job.id)},
        )
        return SubmittedDocument(
            document_id=document.id,
            job_id=job.id,
            status=DocumentStatus.PENDING.value,
            priority=job.priority,
        )

    async def request_processing(self, document_id: UUID) -> SubmittedDocument:
        """
        Re-enqueue a document at manual priority.

        Args:
            document_id: Document UUID

        Returns:
            SubmittedDocument: Document and reset job

        Raises:
            DocumentNotFoundError: Document does not exist
            DocumentProcessingError: Document is already completed
            JobAlreadyActiveError: Document is being processed right now
        """
        try:
            document = await self._document_crud.get_by_id(self.db, document_id)
            if document is None:
                raise DocumentNotFoundError(document_id)
            if document.status == DocumentStatus.COMPLETED:
                raise DocumentProcessingError(
                    "Document already processed",
                    document_id=document_id,
                )

            job = await self._job_service.enqueue(document_id, self._settings.manual_priority)
            await self._document_crud.mark_pending(self.db, document_id, None)
            await self.db.commit()
        except Exception as e:
            logger.error(f"{__name__}:request_processing - {type(e).__name__}: {e}")
            await self.db.rollback()
            raise

        return SubmittedDocument(
            document_id=document_id,
            job_id=job.id,
            status=DocumentStatus.PENDING.value,
            priority=job.priority,
        )

    async def get_status(self, document_id: UUID) -> DocumentStatusResponse:
        """
        Get embedding status of a document.

        Embedding and theme counts are reported only for completed documents.

        Args:
            document_id: Document UUID

        Returns:
            DocumentStatusResponse: Status snapshot

        Raises:
            DocumentNotFoundError: Document does not exist
        """
        document = await self._document_crud.get_by_id(self.db, document_id)
        if document is None:
            raise DocumentNotFoundError(document_id)

        status = DocumentStatus(document.status)
        response = DocumentStatusResponse(
            document_id=document.id,
            status=status.value,
            last_error=document.last_error,
            attempt_count=document.attempt_count,
            processed_at=document.processed_at,
        )
        if status == DocumentStatus.COMPLETED:
            response.embedding_count = await self._embedding_crud.count_by_document(
                self.db, document_id
            )
            response.theme_count = await self._document_theme_crud.count_by_document(
                self.db, document_id
            )
        return response

    async def get_themes(self, document_id: UUID) -> list[DocumentThemeResponse]:
        """
        Get a document's themes, most similar first.

        Args:
            document_id: Document UUID

        Returns:
            list[DocumentThemeResponse]: Stored associations with catalog labels

        Raises:
            DocumentNotFoundError: Document does not exist
        """
        if not await self._document_crud.exists(self.db, document_id):
            raise DocumentNotFoundError(document_id)

        associations = await self._document_theme_crud.get_by_document(self.db, document_id)
        themes = await self._theme_crud.get_by_codes(
            self.db, [a.theme_code for a in associations]
        )
        labels = {theme.code: theme.label for theme in themes}
        return [
            DocumentThemeResponse(
                theme_code=a.theme_code,
                label=labels.get(a.theme_code),
                similarity=a.similarity,
                chunk_index=a.chunk_index,
            )
            for a in associations
        ]

    async def find_similar_documents(
        self,
        query_text: str,
        limit: int = 5,
        threshold: float = 0.5,
        exclude_document_id: UUID | None = None,
    ) -> list[SimilarDocument]:
        """
        Rank completed documents by their best chunk similarity to a query.

        Args:
            query_text: Free text to compare against
            limit: Maximum documents returned
            threshold: Minimum similarity
            exclude_document_id: Document to leave out

        Returns:
            list[SimilarDocument]: Most similar first

        Raises:
            ValueError: No embedder configured or empty query
        """
        if self._embedder is None:
            raise ValueError("find_similar_documents requires an embedder")
        if not query_text or not query_text.strip():
            raise ValueError("query_text cannot be empty")

        query_vector = (await self._embedder.embed([query_text]))[0]
        rows = await self._embedding_crud.get_for_completed_documents(
            self.db, exclude_document_id=exclude_document_id
        )

        best: dict[UUID, SimilarDocument] = {}
        for document_id, chunk_index, vector in rows:
            if len(vector) != len(query_vector):
                continue
            score = cosine_similarity(query_vector, vector)
            if score < threshold:
                continue
            current = best.get(document_id)
            if current is None or score > current.similarity:
                best[document_id] = SimilarDocument(
                    document_id=document_id,
                    similarity=score,
                    chunk_index=chunk_index,
                )

        ranked = sorted(best.values(), key=lambda d: (-d.similarity, str(d.document_id)))
        return ranked[:limit]

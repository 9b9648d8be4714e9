"""
Embedding job CRUD operations.

Provides the queue operations for JobModel: enqueue/reset, candidate
selection, the atomic conditional claim, guarded terminal transitions and
the stale job sweep.

Every transition is a single UPDATE guarded on the expected current status,
so concurrent workers (or a late sweep) can never move a job out of a
terminal state.

Dependencies: sqlalchemy, dreamcore.boundary.db.models.job_model
System role: Job persistence operations for the embedding worker
"""

from collections.abc import Collection
from datetime import datetime
from typing import Sequence
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from dreamcore.boundary.db.base import utcnow
from dreamcore.boundary.db.CRUD.base_crud import BaseCRUD
from dreamcore.boundary.db.models.job_model import JobModel, JobStatus

STALE_JOB_MESSAGE = "Processing timeout"


class JobCRUD(BaseCRUD[JobModel]):
    """
    CRUD operations for JobModel.

    Extends BaseCRUD with queue semantics: claim, complete, retry,
    dead-letter and stale recovery.
    """

    def __init__(self) -> None:
        """Initialize JobCRUD with JobModel."""
        super().__init__(JobModel)

    async def get_by_document_id(
        self,
        session: AsyncSession,
        document_id: UUID,
    ) -> JobModel | None:
        """
        Retrieve the job row of a document.

        Args:
            session: Async database session
            document_id: Subject document UUID

        Returns:
            JobModel if found, None otherwise
        """
        stmt = select(JobModel).where(JobModel.document_id == document_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def reset_to_pending(
        self,
        session: AsyncSession,
        id: UUID,
        priority: int,
        max_attempts: int,
        scheduled_at: datetime | None = None,
    ) -> JobModel | None:
        """
        Reset an existing job row for a fresh run.

        Refuses jobs currently in PROCESSING.

        Args:
            session: Async database session
            id: Job UUID
            priority: New priority
            max_attempts: Attempt budget for the new run
            scheduled_at: Earliest claim time (defaults to now)

        Returns:
            Updated JobModel, or None if the job is processing or missing
        """
        stmt = (
            update(JobModel)
            .where(JobModel.id == id, JobModel.status != JobStatus.PROCESSING)
            .values(
                status=JobStatus.PENDING,
                attempts=0,
                max_attempts=max_attempts,
                priority=priority,
                scheduled_at=scheduled_at or utcnow(),
                started_at=None,
                completed_at=None,
                error_message=None,
            )
            .returning(JobModel)
            .execution_options(synchronize_session="fetch", populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_claim_candidates(
        self,
        session: AsyncSession,
        limit: int,
        now: datetime | None = None,
        exclude_document_ids: Collection[UUID] = (),
    ) -> Sequence[JobModel]:
        """
        Select pending jobs that are due, highest priority first.

        Args:
            session: Async database session
            limit: Maximum number of candidates (free worker slots)
            now: Reference time (defaults to now)
            exclude_document_ids: Documents already being processed in-process

        Returns:
            Sequence of candidate JobModels ordered by priority desc, scheduled_at asc
        """
        if limit <= 0:
            return []
        stmt = (
            select(JobModel)
            .where(
                JobModel.status == JobStatus.PENDING,
                JobModel.scheduled_at <= (now or utcnow()),
                JobModel.attempts < JobModel.max_attempts,
            )
            .order_by(JobModel.priority.desc(), JobModel.scheduled_at.asc())
            .limit(limit)
        )
        if exclude_document_ids:
            stmt = stmt.where(JobModel.document_id.not_in(list(exclude_document_ids)))
        result = await session.execute(stmt)
        return result.scalars().all()

    async def claim(
        self,
        session: AsyncSession,
        id: UUID,
        now: datetime | None = None,
    ) -> JobModel | None:
        """
        Atomically claim a pending job.

        Single conditional UPDATE: only one caller can move the row from
        PENDING to PROCESSING; the attempt counter is incremented in the
        same statement.

        Args:
            session: Async database session
            id: Job UUID
            now: Claim timestamp (defaults to now)

        Returns:
            Claimed JobModel, or None if another worker claimed it first
        """
        stmt = (
            update(JobModel)
            .where(
                JobModel.id == id,
                JobModel.status == JobStatus.PENDING,
                JobModel.attempts < JobModel.max_attempts,
            )
            .values(
                status=JobStatus.PROCESSING,
                attempts=JobModel.attempts + 1,
                started_at=now or utcnow(),
            )
            .returning(JobModel)
            .execution_options(synchronize_session="fetch", populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def mark_completed(
        self,
        session: AsyncSession,
        id: UUID,
        error_message: str | None = None,
        now: datetime | None = None,
    ) -> JobModel | None:
        """
        Mark a processing job as completed.

        Args:
            session: Async database session
            id: Job UUID
            error_message: Skip reason when the document was not embedded
            now: Completion timestamp (defaults to now)

        Returns:
            Updated JobModel, or None if the job was not processing
        """
        return await self._transition_from_processing(
            session,
            id,
            status=JobStatus.COMPLETED,
            completed_at=now or utcnow(),
            error_message=error_message,
        )

    async def schedule_retry(
        self,
        session: AsyncSession,
        id: UUID,
        error_message: str,
        scheduled_at: datetime,
    ) -> JobModel | None:
        """
        Return a processing job to PENDING after a failed attempt.

        Args:
            session: Async database session
            id: Job UUID
            error_message: Error from the failed attempt
            scheduled_at: Earliest time of the next attempt

        Returns:
            Updated JobModel, or None if the job was not processing
        """
        return await self._transition_from_processing(
            session,
            id,
            status=JobStatus.PENDING,
            scheduled_at=scheduled_at,
            started_at=None,
            error_message=error_message,
        )

    async def mark_failed(
        self,
        session: AsyncSession,
        id: UUID,
        error_message: str,
        now: datetime | None = None,
    ) -> JobModel | None:
        """
        Dead-letter a processing job.

        Args:
            session: Async database session
            id: Job UUID
            error_message: Final error
            now: Completion timestamp (defaults to now)

        Returns:
            Updated JobModel, or None if the job was not processing
        """
        return await self._transition_from_processing(
            session,
            id,
            status=JobStatus.FAILED,
            completed_at=now or utcnow(),
            error_message=error_message,
        )

    async def _transition_from_processing(
        self,
        session: AsyncSession,
        id: UUID,
        **values,
    ) -> JobModel | None:
        stmt = (
            update(JobModel)
            .where(JobModel.id == id, JobModel.status == JobStatus.PROCESSING)
            .values(**values)
            .returning(JobModel)
            .execution_options(synchronize_session="fetch", populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def reset_stale(
        self,
        session: AsyncSession,
        cutoff: datetime,
        now: datetime | None = None,
    ) -> tuple[list[UUID], list[UUID]]:
        """
        Recover jobs stuck in PROCESSING since before ``cutoff``.

        Jobs with attempts left go back to PENDING (due immediately); jobs
        that already used their last attempt are dead-lettered. Guarded on
        status and started_at, so repeating the sweep is a no-op.

        Args:
            session: Async database session
            cutoff: Jobs started before this instant are stale
            now: Reference time (defaults to now)

        Returns:
            tuple: (document ids requeued, document ids dead-lettered)
        """
        now = now or utcnow()
        stale = (
            JobModel.status == JobStatus.PROCESSING,
            JobModel.started_at.is_not(None),
            JobModel.started_at < cutoff,
        )

        requeue_stmt = (
            update(JobModel)
            .where(*stale, JobModel.attempts < JobModel.max_attempts)
            .values(
                status=JobStatus.PENDING,
                started_at=None,
                scheduled_at=now,
                error_message=STALE_JOB_MESSAGE,
            )
            .returning(JobModel.document_id)
            .execution_options(synchronize_session=False)
        )
        requeued = list((await session.execute(requeue_stmt)).scalars().all())

        fail_stmt = (
            update(JobModel)
            .where(*stale, JobModel.attempts >= JobModel.max_attempts)
            .values(
                status=JobStatus.FAILED,
                completed_at=now,
                error_message=STALE_JOB_MESSAGE,
            )
            .returning(JobModel.document_id)
            .execution_options(synchronize_session=False)
        )
        failed = list((await session.execute(fail_stmt)).scalars().all())

        return requeued, failed

    async def count_by_status(self, session: AsyncSession) -> dict[JobStatus, int]:
        """
        Count jobs per status.

        Args:
            session: Async database session

        Returns:
            dict: Count for every JobStatus (zero when absent)
        """
        stmt = select(JobModel.status, func.count()).group_by(JobModel.status)
        result = await session.execute(stmt)
        counts = {status: 0 for status in JobStatus}
        for status, count in result.all():
            counts[JobStatus(status)] = count
        return counts

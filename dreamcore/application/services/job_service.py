"""
Job service orchestrator.

Implements the embedding job state machine on top of JobCRUD and
DocumentCRUD: enqueue, claim, complete, skip, retry with exponential
backoff, dead-letter and stale recovery. Document status mirrors every
job transition inside the same transaction.

Methods flush but never commit; the caller owns the transaction.

Dependencies: dreamcore.boundary.db.CRUD, dreamcore.configs
System role: Job management orchestration
"""

import logging
from collections.abc import Collection
from datetime import datetime, timedelta
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from dreamcore.boundary.db.base import utcnow
from dreamcore.boundary.db.CRUD import STALE_JOB_MESSAGE, DocumentCRUD, JobCRUD
from dreamcore.boundary.db.models import DocumentStatus, JobModel, JobStatus
from dreamcore.configs.worker import WorkerSettings
from dreamcore.core.exceptions import JobAlreadyActiveError, JobNotFoundError
from dreamcore.models.job import JobResponse, QueueStats

logger = logging.getLogger(__name__)

MAX_ERROR_LENGTH = 2000


def backoff_delay(attempts: int, base_minutes: int = 2, max_minutes: int = 60) -> timedelta:
    """
    Delay before the next attempt: min(base**attempts, max_minutes) minutes.

    Args:
        attempts: Attempts already made (>= 1 after a failure)
        base_minutes: Exponential base
        max_minutes: Upper bound in minutes

    Returns:
        timedelta: Delay to add to the failure time
    """
    return timedelta(minutes=min(base_minutes ** attempts, max_minutes))


def _truncate(message: str) -> str:
    return message if len(message) <= MAX_ERROR_LENGTH else message[:MAX_ERROR_LENGTH]


class JobService:
    """
    Job service orchestrator.

    Wraps JobCRUD with the retry policy from WorkerSettings and keeps the
    document row in step with its job.
    """

    def __init__(
        self,
        db: AsyncSession,
        settings: WorkerSettings | None = None,
        job_crud: JobCRUD | None = None,
        document_crud: DocumentCRUD | None = None,
    ) -> None:
        """
        Initialize job service.

        Args:
            db: AsyncSession for database operations
            settings: Worker settings (uses defaults if None)
            job_crud: Job store
            document_crud: Document store
        """
        self.db = db
        self._settings = settings or WorkerSettings()
        self._job_crud = job_crud or JobCRUD()
        self._document_crud = document_crud or DocumentCRUD()

    async def enqueue(self, document_id: UUID, priority: int | None = None) -> JobModel:
        """
        Create or reset the job of a document.

        Args:
            document_id: Document to process
            priority: Claim priority (defaults to settings.default_priority)

        Returns:
            JobModel: Pending job with attempts=0 due now

        Raises:
            JobAlreadyActiveError: The document's job is processing
        """
        priority = self._settings.default_priority if priority is None else priority
        existing = await self._job_crud.get_by_document_id(self.db, document_id)

        if existing is None:
            job = await self._job_crud.create(
                self.db,
                document_id=document_id,
                status=JobStatus.PENDING,
                attempts=0,
                max_attempts=self._settings.max_job_attempts,
                priority=priority,
                scheduled_at=utcnow(),
            )
        else:
            job = await self._job_crud.reset_to_pending(
                self.db,
                existing.id,
                priority=priority,
                max_attempts=self._settings.max_job_attempts,
            )
            if job is None:
                raise JobAlreadyActiveError(document_id)

        logger.info(
            f"{__name__}:enqueue - Job enqueued",
            extra={"job_id": str(job.id), "document_id": str(document_id), "priority": priority},
        )
        return job

    async def claim_jobs(
        self,
        limit: int,
        exclude_document_ids: Collection[UUID] = (),
        now: datetime | None = None,
    ) -> list[JobModel]:
        """
        Claim up to ``limit`` due jobs.

        A candidate another worker claimed first is abandoned silently.

        Args:
            limit: Free worker slots
            exclude_document_ids: Documents already active in this process
            now: Reference time (defaults to now)

        Returns:
            list[JobModel]: Jobs now PROCESSING and owned by the caller
        """
        now = now or utcnow()
        candidates = await self._job_crud.get_claim_candidates(
            self.db, limit, now=now, exclude_document_ids=exclude_document_ids
        )

        claimed = []
        for candidate in candidates:
            job = await self._job_crud.claim(self.db, candidate.id, now=now)
            if job is None:
                logger.debug(
                    f"{__name__}:claim_jobs - Job claimed elsewhere",
                    extra={"job_id": str(candidate.id)},
                )
                continue
            await self._document_crud.mark_processing(self.db, job.document_id, job.attempts)
            claimed.append(job)
        return claimed

    async def complete_job(self, job: JobModel) -> JobModel | None:
        """
        Record a successful run.

        Args:
            job: Claimed job

        Returns:
            Updated JobModel, or None if the job was no longer processing
        """
        now = utcnow()
        updated = await self._job_crud.mark_completed(self.db, job.id, now=now)
        if updated is None:
            return None
        await self._document_crud.mark_completed(self.db, job.document_id, processed_at=now)
        return updated

    async def skip_job(self, job: JobModel, reason: str) -> JobModel | None:
        """
        Record that the document is not eligible; completes the job without retry.

        Args:
            job: Claimed job
            reason: Skip reason

        Returns:
            Updated JobModel, or None if the job was no longer processing
        """
        now = utcnow()
        updated = await self._job_crud.mark_completed(
            self.db, job.id, error_message=_truncate(reason), now=now
        )
        if updated is None:
            return None
        await self._document_crud.mark_skipped(
            self.db, job.document_id, _truncate(reason), processed_at=now
        )
        return updated

    async def fail_job(self, job: JobModel, error_message: str) -> JobModel | None:
        """
        Record a failed run: retry with backoff or dead-letter.

        Attempts were incremented when the job was claimed, so ``job.attempts``
        counts the run that just failed.

        Args:
            job: Claimed job
            error_message: Failure description

        Returns:
            Updated JobModel (PENDING or FAILED), or None if the job was no
            longer processing
        """
        error_message = _truncate(error_message)
        now = utcnow()

        if job.attempts < job.max_attempts:
            next_attempt = now + backoff_delay(
                job.attempts,
                self._settings.backoff_base_minutes,
                self._settings.backoff_max_minutes,
            )
            updated = await self._job_crud.schedule_retry(
                self.db, job.id, error_message, scheduled_at=next_attempt
            )
            if updated is not None:
                await self._document_crud.mark_pending(self.db, job.document_id, error_message)
            return updated

        updated = await self._job_crud.mark_failed(self.db, job.id, error_message, now=now)
        if updated is not None:
            await self._document_crud.mark_failed(self.db, job.document_id, error_message)
        return updated

    async def sweep_stale(self, now: datetime | None = None) -> tuple[int, int]:
        """
        Recover jobs stuck in PROCESSING past the stale timeout.

        Args:
            now: Reference time (defaults to now)

        Returns:
            tuple: (jobs requeued, jobs dead-lettered)
        """
        now = now or utcnow()
        cutoff = now - timedelta(milliseconds=self._settings.stale_job_timeout_ms)
        requeued, failed = await self._job_crud.reset_stale(self.db, cutoff, now=now)

        await self._document_crud.set_status_many(
            self.db, requeued, DocumentStatus.PENDING, STALE_JOB_MESSAGE
        )
        await self._document_crud.set_status_many(
            self.db, failed, DocumentStatus.FAILED, STALE_JOB_MESSAGE
        )

        if requeued or failed:
            logger.warning(
                f"{__name__}:sweep_stale - Recovered stale jobs",
                extra={"requeued": len(requeued), "failed": len(failed)},
            )
        return len(requeued), len(failed)

    async def get_job(self, job_id: UUID) -> JobResponse:
        """
        Get job details.

        Args:
            job_id: Job UUID

        Returns:
            JobResponse: Job snapshot

        Raises:
            JobNotFoundError: If job doesn't exist
        """
        job = await self._job_crud.get_by_id(self.db, job_id)
        if job is None:
            raise JobNotFoundError(job_id)
        return _to_response(job)

    async def get_job_for_document(self, document_id: UUID) -> JobResponse | None:
        """Get the job of a document, or None if it was never enqueued."""
        job = await self._job_crud.get_by_document_id(self.db, document_id)
        return _to_response(job) if job is not None else None

    async def get_queue_stats(self) -> QueueStats:
        """
        Count jobs per status.

        Returns:
            QueueStats: Pending, processing, completed and failed counts
        """
        counts = await self._job_crud.count_by_status(self.db)
        return QueueStats(**{status.value: count for status, count in counts.items()})


def _to_response(job: JobModel) -> JobResponse:
    return JobResponse(
        id=job.id,
        document_id=job.document_id,
        status=JobStatus(job.status).value,
        attempts=job.attempts,
        max_attempts=job.max_attempts,
        priority=job.priority,
        scheduled_at=job.scheduled_at,
        started_at=job.started_at,
        completed_at=job.completed_at,
        error_message=job.error_message,
    )

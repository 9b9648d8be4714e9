"""
Embedding worker.

Polls the job table, claims due jobs up to a concurrency bound and runs
the document pipeline for each one in its own session. A second loop
periodically returns stale PROCESSING jobs to the queue.

Same-process duplicates are prevented by the in-memory set of active
document ids; across processes only the conditional claim counts.

Dependencies: asyncio, sqlalchemy, dreamcore.application, dreamcore.core
System role: Background job processing
"""

import asyncio
import logging
import time
from typing import Protocol
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dreamcore.application.services.job_service import JobService
from dreamcore.boundary.db.models import JobModel, JobStatus
from dreamcore.configs.worker import WorkerSettings
from dreamcore.core.document_processing import DocumentPipeline
from dreamcore.core.exceptions import DocumentValidationError
from dreamcore.models.job import JobOutcome, JobOutcomeStatus, WorkerStatus
from dreamcore.observability.log_utils import log_exception_with_context, log_with_context

logger = logging.getLogger(__name__)


class JobEventListener(Protocol):
    """Callbacks invoked after a job outcome has been committed."""

    async def on_job_completed(self, outcome: JobOutcome) -> None: ...

    async def on_job_skipped(self, outcome: JobOutcome) -> None: ...

    async def on_job_retry_scheduled(self, outcome: JobOutcome) -> None: ...

    async def on_job_failed(self, outcome: JobOutcome) -> None: ...


_LISTENER_METHODS = {
    JobOutcomeStatus.COMPLETED: "on_job_completed",
    JobOutcomeStatus.SKIPPED: "on_job_skipped",
    JobOutcomeStatus.RETRY_SCHEDULED: "on_job_retry_scheduled",
    JobOutcomeStatus.FAILED: "on_job_failed",
}


class EmbeddingWorker:
    """Polling job worker with bounded concurrency and stale job recovery."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        pipeline: DocumentPipeline,
        settings: WorkerSettings | None = None,
        listener: JobEventListener | None = None,
    ) -> None:
        """
        Initialize worker.

        Args:
            session_factory: Opens a session per poll, per job and per sweep
            pipeline: Document pipeline run for each claimed job
            settings: Worker settings (uses defaults if None)
            listener: Optional outcome callbacks
        """
        self._session_factory = session_factory
        self._pipeline = pipeline
        self._settings = settings or WorkerSettings()
        self._listener = listener

        self._active_document_ids: set[UUID] = set()
        self._job_tasks: set[asyncio.Task] = set()
        self._loop_tasks: list[asyncio.Task] = []
        self._stop_event = asyncio.Event()
        self._is_running = False

    @property
    def is_running(self) -> bool:
        return self._is_running

    def get_status(self) -> WorkerStatus:
        """Current running flag and job slots in use."""
        return WorkerStatus(
            is_running=self._is_running,
            active_jobs=len(self._active_document_ids),
            max_concurrent_jobs=self._settings.max_concurrent_jobs,
            active_document_ids=sorted(self._active_document_ids, key=str),
        )

    async def start(self) -> None:
        """Start the polling and sweep loops."""
        if self._is_running:
            logger.warning(f"{__name__}:start - Worker already running")
            return

        self._stop_event.clear()
        self._is_running = True
        self._loop_tasks = [
            asyncio.create_task(self._poll_loop(), name="embedding-worker-poll"),
            asyncio.create_task(self._sweep_loop(), name="embedding-worker-sweep"),
        ]
        logger.info(
            f"{__name__}:start - Worker started",
            extra={
                "max_concurrent_jobs": self._settings.max_concurrent_jobs,
                "polling_interval_ms": self._settings.polling_interval_ms,
            },
        )

    async def stop(self) -> None:
        """Stop the loops and wait for in-flight jobs to finish."""
        if not self._is_running:
            return

        self._stop_event.set()
        await asyncio.gather(*self._loop_tasks)
        self._loop_tasks = []

        if self._job_tasks:
            logger.info(
                f"{__name__}:stop - Waiting for {len(self._job_tasks)} in-flight jobs"
            )
            await asyncio.gather(*list(self._job_tasks), return_exceptions=True)

        self._is_running = False
        logger.info(f"{__name__}:stop - Worker stopped")

    async def run_once(self) -> list[JobOutcome]:
        """
        Run a single poll cycle and wait for the claimed jobs.

        Returns:
            list[JobOutcome]: Outcomes of the jobs claimed in this cycle
        """
        tasks = await self.poll_once()
        if not tasks:
            return []
        return list(await asyncio.gather(*tasks))

    async def poll_once(self) -> list[asyncio.Task]:
        """
        Claim jobs for the free slots and start them.

        Returns:
            list[asyncio.Task]: One task per claimed job, resolving to its JobOutcome
        """
        free_slots = self._settings.max_concurrent_jobs - len(self._active_document_ids)
        if free_slots <= 0:
            return []

        async with self._session_factory() as session:
            try:
                jobs = await JobService(session, self._settings).claim_jobs(
                    free_slots, exclude_document_ids=set(self._active_document_ids)
                )
                await session.commit()
            except Exception as e:
                logger.error(f"{__name__}:poll_once - {type(e).__name__}: {e}")
                await session.rollback()
                raise

        tasks = []
        for job in jobs:
            self._active_document_ids.add(job.document_id)
            task = asyncio.create_task(self._run_job(job))
            self._job_tasks.add(task)
            task.add_done_callback(self._on_job_task_done)
            tasks.append(task)

        if tasks:
            logger.info(
                f"{__name__}:poll_once - Claimed {len(tasks)} jobs",
                extra={"active_jobs": len(self._active_document_ids)},
            )
        return tasks

    async def sweep_stale(self) -> tuple[int, int]:
        """
        Return stale PROCESSING jobs to the queue.

        Returns:
            tuple: (jobs requeued, jobs dead-lettered)
        """
        async with self._session_factory() as session:
            try:
                result = await JobService(session, self._settings).sweep_stale()
                await session.commit()
            except Exception as e:
                logger.error(f"{__name__}:sweep_stale - {type(e).__name__}: {e}")
                await session.rollback()
                raise
        return result

    async def process_job(self, job: JobModel) -> JobOutcome:
        """
        Run the pipeline for a claimed job and record the outcome.

        Validation failures skip the document without retry; any other
        exception consumes the attempt and schedules a retry or dead-letters.

        Args:
            job: Job claimed by this worker

        Returns:
            JobOutcome: What happened to the job
        """
        start_time = time.perf_counter()
        chunk_count = 0
        theme_count = 0
        error: str | None = None
        next_attempt_at = None

        try:
            async with self._session_factory() as session:
                result = await self._pipeline.process(session, job.document_id)
                updated = await JobService(session, self._settings).complete_job(job)
                if updated is None:
                    await session.rollback()
                    status = JobOutcomeStatus.LOST
                else:
                    await session.commit()
                    status = JobOutcomeStatus.COMPLETED
                    chunk_count = result.chunk_count
                    theme_count = len(result.themes)

        except DocumentValidationError as e:
            error = e.reason
            async with self._session_factory() as session:
                updated = await JobService(session, self._settings).skip_job(job, e.reason)
                await session.commit()
            status = JobOutcomeStatus.SKIPPED if updated is not None else JobOutcomeStatus.LOST

        except Exception as e:
            error = f"{type(e).__name__}: {e}"
            log_exception_with_context(
                logger,
                f"{__name__}:process_job - Pipeline failed",
                e,
                job_id=job.id,
                document_id=job.document_id,
                attempts=job.attempts,
            )
            async with self._session_factory() as session:
                updated = await JobService(session, self._settings).fail_job(job, error)
                await session.commit()
            if updated is None:
                status = JobOutcomeStatus.LOST
            elif JobStatus(updated.status) == JobStatus.PENDING:
                status = JobOutcomeStatus.RETRY_SCHEDULED
                next_attempt_at = updated.scheduled_at
            else:
                status = JobOutcomeStatus.FAILED

        outcome = JobOutcome(
            job_id=job.id,
            document_id=job.document_id,
            status=status,
            attempts=job.attempts,
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
            chunk_count=chunk_count,
            theme_count=theme_count,
            error=error,
            next_attempt_at=next_attempt_at,
        )
        self._log_metrics(outcome)
        await self._notify(outcome)
        return outcome

    async def _run_job(self, job: JobModel) -> JobOutcome:
        try:
            return await self.process_job(job)
        finally:
            self._active_document_ids.discard(job.document_id)

    def _on_job_task_done(self, task: asyncio.Task) -> None:
        self._job_tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            # Job stays PROCESSING until the stale sweep picks it up
            log_exception_with_context(
                logger,
                f"{__name__}:_on_job_task_done - Failed to record job outcome",
                exc,
            )

    async def _notify(self, outcome: JobOutcome) -> None:
        if self._listener is None:
            return
        method = _LISTENER_METHODS.get(outcome.status)
        if method is None:
            return
        try:
            await getattr(self._listener, method)(outcome)
        except Exception as e:
            log_exception_with_context(
                logger,
                f"{__name__}:_notify - Listener {method} failed",
                e,
                job_id=outcome.job_id,
            )

    def _log_metrics(self, outcome: JobOutcome) -> None:
        log_with_context(
            logger,
            logging.INFO,
            f"{__name__}:process_job - METRICS",
            job_id=outcome.job_id,
            document_id=outcome.document_id,
            outcome=outcome.status.value,
            attempts=outcome.attempts,
            processing_time_ms=round(outcome.processing_time_ms, 1),
            chunk_count=outcome.chunk_count,
            theme_count=outcome.theme_count,
            error=outcome.error,
        )

    async def _poll_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await self.poll_once()
            except Exception as e:
                log_exception_with_context(logger, f"{__name__}:_poll_loop - Poll failed", e)
            await self._wait(self._settings.polling_interval_ms)

    async def _sweep_loop(self) -> None:
        while not self._stop_event.is_set():
            try:
                await self.sweep_stale()
            except Exception as e:
                log_exception_with_context(logger, f"{__name__}:_sweep_loop - Sweep failed", e)
            await self._wait(self._settings.cleanup_interval_ms)

    async def _wait(self, interval_ms: int) -> None:
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=interval_ms / 1000)
        except asyncio.TimeoutError:
            pass

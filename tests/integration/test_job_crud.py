"""
Test suite for JobCRUD database operations.

Tests the queue semantics: candidate selection, the atomic conditional
claim, guarded transitions out of PROCESSING, reset and the stale sweep.

System role: Verification of job persistence layer for the embedding worker
"""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import as_utc, seed_document
from dreamcore.boundary.db.CRUD import STALE_JOB_MESSAGE, JobCRUD
from dreamcore.boundary.db.models import JobModel, JobStatus

NOW = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def job_crud() -> JobCRUD:
    """Provide JobCRUD instance for testing."""
    return JobCRUD()


async def make_job(session: AsyncSession, **overrides) -> JobModel:
    """Insert a document and its pending job."""
    document = await seed_document(session, "I dreamt of water.")
    values = {"document_id": document.id, "scheduled_at": NOW - timedelta(minutes=1)}
    values.update(overrides)
    return await JobCRUD().create(session, **values)


class TestJobCRUDCandidates:
    """Test suite for JobCRUD.get_claim_candidates()."""

    @pytest.mark.asyncio
    async def test_candidates_should_order_by_priority_then_schedule(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test higher priority first, older schedule first within a priority."""
        # Arrange
        late = await make_job(test_async_db, scheduled_at=NOW - timedelta(minutes=1))
        early = await make_job(test_async_db, scheduled_at=NOW - timedelta(minutes=5))
        urgent = await make_job(test_async_db, priority=1)

        # Act
        candidates = await job_crud.get_claim_candidates(test_async_db, limit=10, now=NOW)

        # Assert
        assert [job.id for job in candidates] == [urgent.id, early.id, late.id]

    @pytest.mark.asyncio
    async def test_candidates_should_skip_future_exhausted_and_excluded(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test only due, non-exhausted, non-excluded pending jobs are offered."""
        # Arrange
        due = await make_job(test_async_db)
        await make_job(test_async_db, scheduled_at=NOW + timedelta(minutes=1))
        await make_job(test_async_db, attempts=3, max_attempts=3)
        excluded = await make_job(test_async_db)
        await make_job(test_async_db, status=JobStatus.COMPLETED)

        # Act
        candidates = await job_crud.get_claim_candidates(
            test_async_db, limit=10, now=NOW, exclude_document_ids={excluded.document_id}
        )

        # Assert
        assert [job.id for job in candidates] == [due.id]

    @pytest.mark.asyncio
    async def test_candidates_should_respect_limit(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test limit caps the candidates and zero returns nothing."""
        for _ in range(3):
            await make_job(test_async_db)

        assert len(await job_crud.get_claim_candidates(test_async_db, limit=2, now=NOW)) == 2
        assert await job_crud.get_claim_candidates(test_async_db, limit=0, now=NOW) == []


class TestJobCRUDClaim:
    """Test suite for JobCRUD.claim()."""

    @pytest.mark.asyncio
    async def test_claim_should_move_to_processing_and_count_attempt(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test claim sets PROCESSING, increments attempts and stamps started_at."""
        # Arrange
        job = await make_job(test_async_db)

        # Act
        claimed = await job_crud.claim(test_async_db, job.id, now=NOW)

        # Assert
        assert claimed is not None
        assert claimed.status == JobStatus.PROCESSING
        assert claimed.attempts == 1
        assert as_utc(claimed.started_at) == NOW

    @pytest.mark.asyncio
    async def test_second_claim_should_return_none(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test a claimed job cannot be claimed again."""
        # Arrange
        job = await make_job(test_async_db)
        await job_crud.claim(test_async_db, job.id, now=NOW)

        # Act
        result = await job_crud.claim(test_async_db, job.id, now=NOW)

        # Assert
        assert result is None
        assert job.attempts == 1

    @pytest.mark.asyncio
    async def test_exhausted_job_should_not_be_claimable(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test the attempt budget is enforced by the claim itself."""
        job = await make_job(test_async_db, attempts=3, max_attempts=3)

        assert await job_crud.claim(test_async_db, job.id, now=NOW) is None

    @pytest.mark.asyncio
    async def test_concurrent_claims_should_have_single_winner(
        self, session_factory, job_crud: JobCRUD
    ) -> None:
        """Test two sessions racing for the same job: exactly one wins."""
        # Arrange
        async with session_factory() as session:
            job = await make_job(session)
            await session.commit()

        async def attempt_claim():
            async with session_factory() as session:
                claimed = await job_crud.claim(session, job.id, now=NOW)
                await session.commit()
                return claimed

        # Act
        results = await asyncio.gather(attempt_claim(), attempt_claim())

        # Assert
        winners = [r for r in results if r is not None]
        assert len(winners) == 1
        async with session_factory() as session:
            stored = await job_crud.get_by_id(session, job.id)
        assert stored.attempts == 1
        assert stored.status == JobStatus.PROCESSING


class TestJobCRUDTransitions:
    """Test suite for guarded transitions out of PROCESSING."""

    @pytest.mark.asyncio
    async def test_mark_completed_should_finish_processing_job(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test mark_completed sets COMPLETED with completed_at."""
        # Arrange
        job = await make_job(test_async_db)
        await job_crud.claim(test_async_db, job.id, now=NOW)

        # Act
        result = await job_crud.mark_completed(test_async_db, job.id, now=NOW)

        # Assert
        assert result.status == JobStatus.COMPLETED
        assert as_utc(result.completed_at) == NOW
        assert result.error_message is None

    @pytest.mark.asyncio
    async def test_transitions_should_refuse_non_processing_jobs(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test pending and terminal jobs are never moved by a late writer."""
        # Arrange
        job = await make_job(test_async_db)

        # Act / Assert
        assert await job_crud.mark_completed(test_async_db, job.id) is None
        assert await job_crud.mark_failed(test_async_db, job.id, "boom") is None

        await job_crud.claim(test_async_db, job.id, now=NOW)
        await job_crud.mark_completed(test_async_db, job.id, now=NOW)

        assert await job_crud.mark_failed(test_async_db, job.id, "late") is None
        assert await job_crud.schedule_retry(test_async_db, job.id, "late", NOW) is None
        assert job.status == JobStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_schedule_retry_should_return_job_to_pending(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test schedule_retry keeps attempts and moves scheduled_at forward."""
        # Arrange
        job = await make_job(test_async_db)
        await job_crud.claim(test_async_db, job.id, now=NOW)
        next_attempt = NOW + timedelta(minutes=2)

        # Act
        result = await job_crud.schedule_retry(test_async_db, job.id, "timeout", next_attempt)

        # Assert
        assert result.status == JobStatus.PENDING
        assert result.attempts == 1
        assert result.started_at is None
        assert result.error_message == "timeout"
        assert as_utc(result.scheduled_at) == next_attempt
        assert await job_crud.get_claim_candidates(test_async_db, limit=5, now=NOW) == []

    @pytest.mark.asyncio
    async def test_mark_failed_should_dead_letter(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test mark_failed sets FAILED with the final error."""
        job = await make_job(test_async_db)
        await job_crud.claim(test_async_db, job.id, now=NOW)

        result = await job_crud.mark_failed(test_async_db, job.id, "quota exceeded", now=NOW)

        assert result.status == JobStatus.FAILED
        assert result.error_message == "quota exceeded"


class TestJobCRUDReset:
    """Test suite for JobCRUD.reset_to_pending()."""

    @pytest.mark.asyncio
    async def test_reset_should_restart_terminal_job(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test a failed job is reset with a fresh attempt budget."""
        # Arrange
        job = await make_job(test_async_db)
        await job_crud.claim(test_async_db, job.id, now=NOW)
        await job_crud.mark_failed(test_async_db, job.id, "boom", now=NOW)

        # Act
        result = await job_crud.reset_to_pending(
            test_async_db, job.id, priority=1, max_attempts=5, scheduled_at=NOW
        )

        # Assert
        assert result.status == JobStatus.PENDING
        assert result.attempts == 0
        assert result.max_attempts == 5
        assert result.priority == 1
        assert result.error_message is None
        assert result.completed_at is None

    @pytest.mark.asyncio
    async def test_reset_should_refuse_processing_job(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test a job held by a worker is left alone."""
        job = await make_job(test_async_db)
        await job_crud.claim(test_async_db, job.id, now=NOW)

        result = await job_crud.reset_to_pending(test_async_db, job.id, priority=0, max_attempts=3)

        assert result is None


class TestJobCRUDStaleSweep:
    """Test suite for JobCRUD.reset_stale()."""

    @pytest.mark.asyncio
    async def test_reset_stale_should_requeue_or_dead_letter(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test stale jobs with attempts left requeue; exhausted ones fail."""
        # Arrange
        long_ago = NOW - timedelta(hours=2)
        retryable = await make_job(test_async_db, max_attempts=3)
        exhausted = await make_job(test_async_db, attempts=2, max_attempts=3)
        fresh = await make_job(test_async_db)
        for job in (retryable, exhausted):
            await job_crud.claim(test_async_db, job.id, now=long_ago)
        await job_crud.claim(test_async_db, fresh.id, now=NOW)

        # Act
        requeued, failed = await job_crud.reset_stale(
            test_async_db, cutoff=NOW - timedelta(minutes=30), now=NOW
        )

        # Assert
        assert requeued == [retryable.document_id]
        assert failed == [exhausted.document_id]
        for job in (retryable, exhausted, fresh):
            await test_async_db.refresh(job)
        assert retryable.status == JobStatus.PENDING
        assert retryable.error_message == STALE_JOB_MESSAGE
        assert retryable.started_at is None
        assert exhausted.status == JobStatus.FAILED
        assert exhausted.attempts == 3
        assert fresh.status == JobStatus.PROCESSING

    @pytest.mark.asyncio
    async def test_reset_stale_should_be_idempotent(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test a second sweep finds nothing to do."""
        # Arrange
        job = await make_job(test_async_db)
        await job_crud.claim(test_async_db, job.id, now=NOW - timedelta(hours=2))
        cutoff = NOW - timedelta(minutes=30)
        await job_crud.reset_stale(test_async_db, cutoff=cutoff, now=NOW)

        # Act
        second = await job_crud.reset_stale(test_async_db, cutoff=cutoff, now=NOW)

        # Assert
        assert second == ([], [])


class TestJobCRUDCounts:
    """Test suite for JobCRUD.count_by_status()."""

    @pytest.mark.asyncio
    async def test_count_by_status_should_cover_every_status(
        self, test_async_db: AsyncSession, job_crud: JobCRUD
    ) -> None:
        """Test absent statuses report zero."""
        # Arrange
        await make_job(test_async_db)
        await make_job(test_async_db)
        claimed = await make_job(test_async_db)
        await job_crud.claim(test_async_db, claimed.id, now=NOW)

        # Act
        counts = await job_crud.count_by_status(test_async_db)

        # Assert
        assert counts == {
            JobStatus.PENDING: 2,
            JobStatus.PROCESSING: 1,
            JobStatus.COMPLETED: 0,
            JobStatus.FAILED: 0,
        }

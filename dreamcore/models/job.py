"""
Job domain models and schemas.

Job status, queue statistics and worker outcome schemas.

Dependencies: pydantic
System role: Job and worker status contracts
"""

import enum
import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class JobResponse(BaseModel):
    """Snapshot of an embedding job."""

    id: uuid.UUID
    document_id: uuid.UUID
    status: str
    attempts: int
    max_attempts: int
    priority: int
    scheduled_at: datetime
    started_at: datetime | None = None
    completed_at: datetime | None = None
    error_message: str | None = None


class QueueStats(BaseModel):
    """Job counts per status."""

    pending: int = 0
    processing: int = 0
    completed: int = 0
    failed: int = 0


class WorkerStatus(BaseModel):
    """Runtime state of an embedding worker."""

    is_running: bool
    active_jobs: int
    max_concurrent_jobs: int
    active_document_ids: list[uuid.UUID] = Field(default_factory=list)


class JobOutcomeStatus(str, enum.Enum):
    """
    Result of one job execution.

    COMPLETED: Pipeline succeeded
    SKIPPED: Document not eligible; job completed without embeddings
    RETRY_SCHEDULED: Attempt failed; job back to pending with backoff
    FAILED: Attempt failed and no attempts remain
    LOST: Job was no longer processing when the result was recorded
    """

    COMPLETED = "completed"
    SKIPPED = "skipped"
    RETRY_SCHEDULED = "retry_scheduled"
    FAILED = "failed"
    LOST = "lost"


class JobOutcome(BaseModel):
    """Outcome of EmbeddingWorker.process_job()."""

    job_id: uuid.UUID
    document_id: uuid.UUID
    status: JobOutcomeStatus
    attempts: int
    processing_time_ms: float
    chunk_count: int = 0
    theme_count: int = 0
    error: str | None = None
    next_attempt_at: datetime | None = None

"""
Embedding job ORM model.

Queue row driving the embedding worker. One row per document: re-enqueueing
resets the row instead of inserting a new one.

Dependencies: sqlalchemy, dreamcore.boundary.db.base
System role: Durable job queue for background embedding
"""

import enum
import uuid
from datetime import datetime

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from dreamcore.boundary.db.base import Base, TimestampMixin, UUIDMixin, utcnow


class JobStatus(str, enum.Enum):
    """
    Embedding job execution states.

    PENDING: Waiting for scheduled_at to pass and a worker to claim it
    PROCESSING: Claimed by a worker; attempts already incremented
    COMPLETED: Pipeline succeeded or the document was skipped (terminal)
    FAILED: max_attempts exhausted (terminal, dead-lettered)
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_JOB_STATUSES = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})


class JobModel(Base, UUIDMixin, TimestampMixin):
    """
    Embedding job ORM model.

    Attributes:
        id: UUID primary key (auto-generated)
        document_id: Subject document (unique; one job row per document)
        status: Current execution state
        attempts: Executions started so far, incremented at claim time
        max_attempts: Attempts allowed before the job is dead-lettered
        priority: Higher values are claimed first
        scheduled_at: Earliest time the job may be claimed
        started_at: When the current attempt was claimed
        completed_at: When the job reached a terminal state
        error_message: Last failure, skip reason or timeout note

    Workflow:
        1. enqueue creates/resets the row with status=PENDING, attempts=0
        2. A worker claims it: status -> PROCESSING, attempts += 1
        3. Success -> COMPLETED; failure -> PENDING with backoff or FAILED
        4. Stale PROCESSING rows are swept back to PENDING
    """

    __tablename__ = "embedding_jobs"
    __table_args__ = (
        Index("ix_embedding_jobs_status_scheduled", "status", "scheduled_at"),
    )

    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    status: Mapped[JobStatus] = mapped_column(
        Enum(
            JobStatus,
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=JobStatus.PENDING,
    )

    attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    max_attempts: Mapped[int] = mapped_column(Integer, nullable=False, default=3)

    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    scheduled_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    started_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

"""
Document ORM model.

Represents submitted dream transcripts with embedding status.
Tracks the document lifecycle from submission to embedded and themed.

Dependencies: sqlalchemy, dreamcore.boundary.db.base
System role: Document persistence for embedding tracking
"""

import enum
from datetime import datetime

from sqlalchemy import DateTime, Enum, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from dreamcore.boundary.db.base import Base, TimestampMixin, UUIDMixin


class DocumentStatus(str, enum.Enum):
    """
    Document embedding lifecycle states.

    PENDING: Document submitted (or scheduled for retry), awaiting a worker
    PROCESSING: A worker is chunking, embedding and matching themes
    COMPLETED: Embeddings and theme associations are stored
    FAILED: All attempts exhausted; last_error contains details
    SKIPPED: Not eligible for embedding (too short, unsupported language)
    """

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    SKIPPED = "skipped"


class DocumentModel(Base, UUIDMixin, TimestampMixin):
    """
    Document ORM model tracking embedding pipeline state.

    Lifecycle: Submission (PENDING) -> worker claim (PROCESSING) ->
    COMPLETED, SKIPPED, back to PENDING for a retry, or FAILED once the job
    is dead-lettered. Only the worker mutates status after submission.

    Attributes:
        id: UUID primary key (auto-generated)
        raw_text: Transcript text
        language: Optional ISO language code reported by the transcriber
        status: Current processing state
        attempt_count: Number of processing attempts started
        last_error: Most recent failure or skip reason
        processed_at: When the document reached a terminal success state
        created_at: Submission timestamp (UTC)
        updated_at: Last status change timestamp (UTC)
    """

    __tablename__ = "documents"

    raw_text: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        doc="Transcript text",
    )

    language: Mapped[str | None] = mapped_column(
        String(16),
        nullable=True,
        doc="ISO language code, e.g. 'en', 'en-US', 'eng'",
    )

    status: Mapped[DocumentStatus] = mapped_column(
        Enum(
            DocumentStatus,
            native_enum=False,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
        default=DocumentStatus.PENDING,
        index=True,
    )

    attempt_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    last_error: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        doc="Error or skip reason from the most recent attempt",
    )

    processed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

"""
Document domain models and schemas.

Response schemas for document submission, status and theme queries.

Dependencies: pydantic
System role: Document service contracts
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class SubmittedDocument(BaseModel):
    """Result of submitting or re-enqueueing a document."""

    document_id: uuid.UUID
    job_id: uuid.UUID
    status: str
    priority: int


class DocumentStatusResponse(BaseModel):
    """Embedding status of a document."""

    document_id: uuid.UUID
    status: str
    last_error: str | None = None
    attempt_count: int = 0
    processed_at: datetime | None = None
    embedding_count: int | None = Field(
        default=None,
        description="Stored chunk embeddings (only reported once completed)",
    )
    theme_count: int | None = Field(
        default=None,
        description="Stored theme associations (only reported once completed)",
    )


class DocumentThemeResponse(BaseModel):
    """Theme associated with a document."""

    theme_code: str
    label: str | None = None
    similarity: float
    chunk_index: int


class SimilarDocument(BaseModel):
    """Document ranked by similarity to a query."""

    document_id: uuid.UUID
    similarity: float
    chunk_index: int

"""
Document embedding ORM model.

One row per (document, chunk). Vectors are stored as JSON float arrays so
the same schema runs on PostgreSQL and SQLite.

Dependencies: sqlalchemy, dreamcore.boundary.db.base
System role: Persistent chunk embeddings
"""

import uuid

from sqlalchemy import JSON, Float, ForeignKey, Integer, String, Text, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from dreamcore.boundary.db.base import Base, TimestampMixin, UUIDMixin


class DocumentEmbeddingModel(Base, UUIDMixin, TimestampMixin):
    """
    Chunk embedding record.

    Attributes:
        document_id: Parent document
        chunk_index: Zero-based chunk position, contiguous per document
        chunk_text: Exact text that was embedded
        embedding: Vector as a JSON array of floats
        embedding_version: Model/version tag used to produce the vector
        token_count: Estimated token count of chunk_text
        processing_time_ms: Latency of the embedder batch that produced it
        chunk_metadata: Span and overlap bookkeeping for the chunk

    Constraints:
        (document_id, chunk_index) UNIQUE; re-processing upserts
    """

    __tablename__ = "document_embeddings"
    __table_args__ = (
        UniqueConstraint("document_id", "chunk_index", name="uq_document_embeddings_chunk"),
    )

    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False)
    chunk_text: Mapped[str] = mapped_column(Text, nullable=False)
    embedding: Mapped[list[float]] = mapped_column(JSON, nullable=False)
    embedding_version: Mapped[str] = mapped_column(String(64), nullable=False)
    token_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    processing_time_ms: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    chunk_metadata: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)

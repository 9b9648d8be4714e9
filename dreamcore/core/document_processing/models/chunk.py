"""
Chunk domain model for the document pipeline.

A chunk is a slice ``text[start_char:end_char]`` of its parent document.
Neighbouring chunks share ``overlap_with_next`` / ``overlap_with_previous``
characters, so dropping each chunk's leading overlap and concatenating the
rest reproduces the original text.

Dependencies: pydantic
System role: Data structure for transcript chunks
"""

from uuid import UUID

from pydantic import BaseModel, Field


class Chunk(BaseModel):
    """Contiguous span of a document sized for the embedding model."""

    document_id: UUID | None = Field(default=None, description="Parent document")
    chunk_index: int = Field(ge=0, description="Zero-based position within the document")
    text: str = Field(description="Chunk text, exactly the source span")
    start_char: int = Field(ge=0, description="Inclusive start offset in the source text")
    end_char: int = Field(ge=0, description="Exclusive end offset in the source text")
    overlap_with_previous: int = Field(default=0, ge=0, description="Characters shared with the previous chunk")
    overlap_with_next: int = Field(default=0, ge=0, description="Characters shared with the next chunk")
    total_chunks: int = Field(default=1, ge=1, description="Number of chunks of the document")
    token_count: int = Field(ge=0, description="Estimated token count")

    def span_metadata(self) -> dict:
        """Span and overlap bookkeeping stored alongside the embedding."""
        return {
            "start_char": self.start_char,
            "end_char": self.end_char,
            "overlap_with_previous": self.overlap_with_previous,
            "overlap_with_next": self.overlap_with_next,
            "total_chunks": self.total_chunks,
        }

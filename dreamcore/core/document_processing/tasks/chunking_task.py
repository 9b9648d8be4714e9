"""
Paragraph-aware text chunking with bounded overlap.

Splits transcripts that exceed the embedding model's input ceiling into
chunks. RecursiveCharacterTextSplitter groups paragraphs into
non-overlapping cores (falling back to fixed character windows for an
oversized paragraph); each core is then widened by the overlap on both
sides. Every chunk is a slice of the source text, so separators survive
verbatim and offsets stay exact.

Dependencies: langchain_text_splitters, pydantic (Chunk model)
System role: First stage of the embedding pipeline
"""

import math
from uuid import UUID

from langchain_text_splitters import RecursiveCharacterTextSplitter

from dreamcore.configs.pipeline import PipelineSettings
from dreamcore.core.exceptions import DocumentValidationError

from ..models import Chunk

# Paragraphs first, then raw characters
SEPARATORS = ["\n\n", ""]


class ChunkingTask:
    """Split text into overlapping chunks sized in estimated tokens."""

    def __init__(
        self,
        max_tokens_per_chunk: int = 1000,
        chunk_size_tokens: int = 750,
        overlap_tokens: int = 100,
        chars_per_token: int = 4,
    ) -> None:
        """
        Initialize chunking task with splitter configuration.

        Args:
            max_tokens_per_chunk: Texts at or below this estimate stay whole
            chunk_size_tokens: Target size of a chunk's core when splitting
            overlap_tokens: Overlap added on each side of a core
            chars_per_token: Characters per token approximation

        Raises:
            ValueError: When sizes are inconsistent
        """
        if chars_per_token <= 0 or chunk_size_tokens <= 0:
            raise ValueError("chunk_size_tokens and chars_per_token must be positive")
        if not 0 <= overlap_tokens < chunk_size_tokens:
            raise ValueError("overlap_tokens must be in [0, chunk_size_tokens)")

        self.max_tokens_per_chunk = max_tokens_per_chunk
        self.chars_per_token = chars_per_token
        self.chunk_size_chars = chunk_size_tokens * chars_per_token
        self.overlap_chars = overlap_tokens * chars_per_token
        # A core no longer than the overlap would sit entirely inside its
        # neighbours' overlaps; rebalanced halves are always above this.
        self.min_core_chars = min(self.overlap_chars + 1, (self.chunk_size_chars + 1) // 2)

        self._splitter = RecursiveCharacterTextSplitter(
            separators=SEPARATORS,
            chunk_size=self.chunk_size_chars,
            chunk_overlap=0,
            keep_separator="end",
            strip_whitespace=False,
            add_start_index=True,
            length_function=len,
        )

    @classmethod
    def from_settings(cls, settings: PipelineSettings) -> "ChunkingTask":
        return cls(
            max_tokens_per_chunk=settings.max_tokens_per_chunk,
            chunk_size_tokens=settings.chunk_size_tokens,
            overlap_tokens=settings.overlap_tokens,
            chars_per_token=settings.chars_per_token,
        )

    def estimate_tokens(self, text: str) -> int:
        """Estimated token count: ceil(len(text) / chars_per_token)."""
        return math.ceil(len(text) / self.chars_per_token)

    def chunk(self, text: str, document_id: UUID | None = None) -> list[Chunk]:
        """
        Split text into chunks.

        Args:
            text: Source text
            document_id: Parent document recorded on every chunk

        Returns:
            list[Chunk]: Chunks with contiguous indices and backfilled total_chunks

        Raises:
            DocumentValidationError: When text is empty or whitespace only
        """
        if not text or not text.strip():
            raise DocumentValidationError("Transcript is empty", document_id=document_id)

        if self.estimate_tokens(text) <= self.max_tokens_per_chunk:
            return [
                Chunk(
                    document_id=document_id,
                    chunk_index=0,
                    text=text,
                    start_char=0,
                    end_char=len(text),
                    total_chunks=1,
                    token_count=self.estimate_tokens(text),
                )
            ]

        cores = self._rebalance(self._split_cores(text))
        chunks: list[Chunk] = []
        previous_end = 0
        for i, (core_start, core_end) in enumerate(cores):
            start = max(0, core_start - self.overlap_chars) if i > 0 else core_start
            end = min(len(text), core_end + self.overlap_chars) if i + 1 < len(cores) else core_end
            chunk_text = text[start:end]
            chunks.append(
                Chunk(
                    document_id=document_id,
                    chunk_index=i,
                    text=chunk_text,
                    start_char=start,
                    end_char=end,
                    overlap_with_previous=previous_end - start if i > 0 else 0,
                    token_count=self.estimate_tokens(chunk_text),
                )
            )
            previous_end = end

        total = len(chunks)
        for i, chunk in enumerate(chunks):
            chunk.total_chunks = total
            if i + 1 < total:
                chunk.overlap_with_next = chunks[i + 1].overlap_with_previous

        return chunks

    def _split_cores(self, text: str) -> list[tuple[int, int]]:
        """Non-overlapping (start, end) spans partitioning the text."""
        cores = []
        for doc in self._splitter.create_documents([text]):
            start = doc.metadata["start_index"]
            cores.append((start, start + len(doc.page_content)))
        return cores

    def _rebalance(self, cores: list[tuple[int, int]]) -> list[tuple[int, int]]:
        """
        Fold cores shorter than min_core_chars into a neighbour.

        The short core joins the previous core (the next one when it is
        first). If the joined span exceeds the core size it is split in half.
        """
        cores = list(cores)
        i = 0
        while i < len(cores) and len(cores) > 1:
            start, end = cores[i]
            if end - start >= self.min_core_chars:
                i += 1
                continue

            lo = i - 1 if i > 0 else i
            merged_start, merged_end = cores[lo][0], cores[lo + 1][1]
            if merged_end - merged_start <= self.chunk_size_chars:
                cores[lo : lo + 2] = [(merged_start, merged_end)]
            else:
                middle = merged_start + (merged_end - merged_start) // 2
                cores[lo : lo + 2] = [(merged_start, middle), (middle, merged_end)]
            i = lo
        return cores

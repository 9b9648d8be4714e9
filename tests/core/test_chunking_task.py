"""
Test suite for ChunkingTask.

Covers the single-chunk rule, paragraph-aware splitting, hard fallback for
oversized paragraphs, overlap bookkeeping and exact text reconstruction.

System role: Verification of transcript chunking
"""

import uuid

import pytest

from dreamcore.configs.pipeline import PipelineSettings
from dreamcore.core.document_processing.tasks import ChunkingTask
from dreamcore.core.exceptions import DocumentValidationError


def reconstruct(chunks) -> str:
    """Join chunks dropping each chunk's leading overlap."""
    return chunks[0].text + "".join(c.text[c.overlap_with_previous :] for c in chunks[1:])


@pytest.fixture
def small_chunker(pipeline_settings: PipelineSettings) -> ChunkingTask:
    """120-char cores, 20-char overlaps, 200-char ceiling."""
    return ChunkingTask.from_settings(pipeline_settings)


@pytest.fixture
def paragraph_text() -> str:
    paragraphs = [f"Paragraph {i}: " + "I was walking " * 3 for i in range(10)]
    return "\n\n".join(paragraphs)


class TestChunkingTaskInit:
    """Test suite for ChunkingTask configuration checks."""

    def test_init_should_reject_overlap_not_smaller_than_chunk(self) -> None:
        with pytest.raises(ValueError):
            ChunkingTask(chunk_size_tokens=100, overlap_tokens=100)

    def test_init_should_reject_non_positive_chars_per_token(self) -> None:
        with pytest.raises(ValueError):
            ChunkingTask(chars_per_token=0)

    def test_from_settings_should_convert_tokens_to_characters(
        self, pipeline_settings: PipelineSettings
    ) -> None:
        # Act
        chunker = ChunkingTask.from_settings(pipeline_settings)

        # Assert
        assert chunker.chunk_size_chars == 120
        assert chunker.overlap_chars == 20


class TestChunkingTaskSingleChunk:
    """Test suite for texts under the token ceiling."""

    def test_short_text_should_return_single_chunk_spanning_text(self) -> None:
        # Arrange
        chunker = ChunkingTask(max_tokens_per_chunk=250, chunk_size_tokens=150, overlap_tokens=25)
        text = "x" * 50
        document_id = uuid.uuid4()

        # Act
        chunks = chunker.chunk(text, document_id)

        # Assert
        assert len(chunks) == 1
        chunk = chunks[0]
        assert chunk.text == text
        assert (chunk.start_char, chunk.end_char) == (0, 50)
        assert chunk.total_chunks == 1
        assert chunk.overlap_with_previous == 0
        assert chunk.overlap_with_next == 0
        assert chunk.token_count == 13
        assert chunk.document_id == document_id

    def test_text_exactly_at_ceiling_should_not_split(self) -> None:
        # Arrange
        chunker = ChunkingTask(max_tokens_per_chunk=10, chunk_size_tokens=5, overlap_tokens=1)

        # Act
        chunks = chunker.chunk("y" * 40)

        # Assert
        assert len(chunks) == 1

    @pytest.mark.parametrize("text", ["", "   ", "\n\n\n"])
    def test_blank_text_should_raise_validation_error(self, text: str) -> None:
        with pytest.raises(DocumentValidationError):
            ChunkingTask().chunk(text)


class TestChunkingTaskSplitting:
    """Test suite for texts above the token ceiling."""

    def test_long_unbroken_text_should_split_into_two_overlapping_chunks(self) -> None:
        # Arrange
        chunker = ChunkingTask()
        text = "".join(chr(ord("a") + i % 26) for i in range(6000))

        # Act
        chunks = chunker.chunk(text)

        # Assert
        assert len(chunks) == 2
        assert chunks[0].start_char == 0
        assert chunks[0].end_char == 3400
        assert chunks[1].start_char == 3000 - 400
        assert chunks[1].end_char == 6000
        assert chunks[0].overlap_with_next == 800
        assert chunks[1].overlap_with_previous == 800

    def test_chunks_should_reconstruct_original_text(
        self, small_chunker: ChunkingTask, paragraph_text: str
    ) -> None:
        # Act
        chunks = small_chunker.chunk(paragraph_text)

        # Assert
        assert len(chunks) > 1
        assert reconstruct(chunks) == paragraph_text

    def test_chunks_should_be_slices_of_source(
        self, small_chunker: ChunkingTask, paragraph_text: str
    ) -> None:
        chunks = small_chunker.chunk(paragraph_text)

        for chunk in chunks:
            assert chunk.text == paragraph_text[chunk.start_char : chunk.end_char]

    def test_indices_should_be_contiguous_and_total_backfilled(
        self, small_chunker: ChunkingTask, paragraph_text: str
    ) -> None:
        chunks = small_chunker.chunk(paragraph_text)

        assert [c.chunk_index for c in chunks] == list(range(len(chunks)))
        assert all(c.total_chunks == len(chunks) for c in chunks)

    def test_chunks_should_respect_token_ceiling(
        self, small_chunker: ChunkingTask, paragraph_text: str
    ) -> None:
        chunks = small_chunker.chunk(paragraph_text)

        assert all(c.token_count <= small_chunker.max_tokens_per_chunk for c in chunks)

    def test_overlaps_should_be_bounded_and_consistent(
        self, small_chunker: ChunkingTask, paragraph_text: str
    ) -> None:
        chunks = small_chunker.chunk(paragraph_text)

        assert chunks[0].overlap_with_previous == 0
        assert chunks[-1].overlap_with_next == 0
        for previous, current in zip(chunks, chunks[1:]):
            assert current.overlap_with_previous == previous.overlap_with_next
            assert (
                small_chunker.overlap_chars
                <= current.overlap_with_previous
                <= 2 * small_chunker.overlap_chars
            )
            assert previous.end_char - current.start_char == current.overlap_with_previous

    def test_split_should_prefer_paragraph_boundaries(self, small_chunker: ChunkingTask) -> None:
        # Arrange
        first = "A" * 70 + "\n\n"
        second = "B" * 70 + "\n\n"
        third = "C" * 70
        text = first + second + third

        # Act
        chunks = small_chunker.chunk(text)

        # Assert
        assert len(chunks) == 3
        # Second chunk's own content starts exactly at the second paragraph
        assert chunks[1].start_char + 20 == len(first)
        assert chunks[1].text[20:].startswith("B")

    def test_oversized_paragraph_should_use_fixed_windows(
        self, small_chunker: ChunkingTask
    ) -> None:
        # Arrange
        text = "z" * 500

        # Act
        chunks = small_chunker.chunk(text)

        # Assert
        # 120-char windows; the 20-char tail is folded into the last window
        # and that span is halved
        assert len(chunks) == 5
        assert [c.start_char for c in chunks] == [0, 100, 220, 340, 410]
        assert [c.end_char for c in chunks] == [140, 260, 380, 450, 500]
        assert reconstruct(chunks) == text

    def test_tail_of_oversized_paragraph_should_keep_full_overlap(self) -> None:
        """Test a short remainder after a hard split does not shrink the overlap."""
        # Arrange
        chunker = ChunkingTask()
        text = "a" * 3010 + "\n\n" + "I woke up.\n\n" + "b" * 2500

        # Act
        chunks = chunker.chunk(text)

        # Assert
        assert [(c.start_char, c.end_char) for c in chunks] == [
            (0, 1906),
            (1106, 3412),
            (2612, 5524),
        ]
        for previous, current in zip(chunks, chunks[1:]):
            assert current.overlap_with_previous >= chunker.overlap_chars
            assert current.end_char - previous.end_char >= chunker.overlap_chars
        assert all(c.token_count <= chunker.max_tokens_per_chunk for c in chunks)
        assert reconstruct(chunks) == text

    def test_short_paragraph_before_oversized_one_should_not_become_its_own_chunk(
        self, small_chunker: ChunkingTask
    ) -> None:
        # Arrange
        text = "Fell.\n\n" + "w" * 300

        # Act
        chunks = small_chunker.chunk(text)

        # Assert
        assert chunks[0].text.startswith("Fell.\n\n" + "w")
        for previous, current in zip(chunks, chunks[1:]):
            assert current.overlap_with_previous >= small_chunker.overlap_chars
        assert reconstruct(chunks) == text

    def test_chunking_should_be_deterministic(
        self, small_chunker: ChunkingTask, paragraph_text: str
    ) -> None:
        assert small_chunker.chunk(paragraph_text) == small_chunker.chunk(paragraph_text)

"""
Test suite for EmbeddingCRUD database operations.

Tests the (document_id, chunk_index) upsert, stale chunk pruning and the
read paths used for similar-document search.

System role: Verification of chunk embedding persistence
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from conftest import seed_document
from dreamcore.boundary.db.CRUD import DocumentCRUD, EmbeddingCRUD


def rows_for(document_id, count: int, version: str = "v1") -> list[dict]:
    return [
        {
            "document_id": document_id,
            "chunk_index": i,
            "chunk_text": f"chunk {i}",
            "embedding": [float(i), 1.0],
            "embedding_version": version,
            "token_count": 2,
            "processing_time_ms": 1.5,
            "chunk_metadata": {"total_chunks": count},
        }
        for i in range(count)
    ]


@pytest.fixture
def embedding_crud() -> EmbeddingCRUD:
    """Provide EmbeddingCRUD instance for testing."""
    return EmbeddingCRUD()


class TestEmbeddingCRUDUpsert:
    """Test suite for EmbeddingCRUD.upsert_many() method."""

    @pytest.mark.asyncio
    async def test_upsert_should_insert_rows(
        self, test_async_db: AsyncSession, embedding_crud: EmbeddingCRUD
    ) -> None:
        """Test new rows are written in chunk order."""
        # Arrange
        document = await seed_document(test_async_db, "Dream")

        # Act
        written = await embedding_crud.upsert_many(test_async_db, rows_for(document.id, 3))

        # Assert
        stored = await embedding_crud.get_by_document(test_async_db, document.id)
        assert written == 3
        assert [row.chunk_index for row in stored] == [0, 1, 2]
        assert stored[2].embedding == [2.0, 1.0]

    @pytest.mark.asyncio
    async def test_upsert_should_overwrite_existing_chunk(
        self, test_async_db: AsyncSession, embedding_crud: EmbeddingCRUD
    ) -> None:
        """Test re-writing the same chunk index updates in place."""
        # Arrange
        document = await seed_document(test_async_db, "Dream")
        await embedding_crud.upsert_many(test_async_db, rows_for(document.id, 2))

        # Act
        await embedding_crud.upsert_many(test_async_db, rows_for(document.id, 2, version="v2"))

        # Assert
        stored = await embedding_crud.get_by_document(test_async_db, document.id)
        for row in stored:
            await test_async_db.refresh(row)
        assert await embedding_crud.count_by_document(test_async_db, document.id) == 2
        assert {row.embedding_version for row in stored} == {"v2"}

    @pytest.mark.asyncio
    async def test_upsert_with_no_rows_should_do_nothing(
        self, test_async_db: AsyncSession, embedding_crud: EmbeddingCRUD
    ) -> None:
        assert await embedding_crud.upsert_many(test_async_db, []) == 0


class TestEmbeddingCRUDDeleteStale:
    """Test suite for EmbeddingCRUD.delete_stale() method."""

    @pytest.mark.asyncio
    async def test_delete_stale_should_keep_only_given_indices(
        self, test_async_db: AsyncSession, embedding_crud: EmbeddingCRUD
    ) -> None:
        """Test indices not written by the current run are removed."""
        # Arrange
        document = await seed_document(test_async_db, "Dream")
        other = await seed_document(test_async_db, "Other dream")
        await embedding_crud.upsert_many(test_async_db, rows_for(document.id, 4))
        await embedding_crud.upsert_many(test_async_db, rows_for(other.id, 2))

        # Act
        deleted = await embedding_crud.delete_stale(test_async_db, document.id, [0, 2])

        # Assert
        stored = await embedding_crud.get_by_document(test_async_db, document.id)
        assert deleted == 2
        assert [row.chunk_index for row in stored] == [0, 2]
        assert await embedding_crud.count_by_document(test_async_db, other.id) == 2


class TestEmbeddingCRUDCompletedDocuments:
    """Test suite for EmbeddingCRUD.get_for_completed_documents() method."""

    @pytest.mark.asyncio
    async def test_only_completed_documents_should_be_returned(
        self, test_async_db: AsyncSession, embedding_crud: EmbeddingCRUD
    ) -> None:
        """Test pending documents and the excluded document are left out."""
        # Arrange
        document_crud = DocumentCRUD()
        done = await seed_document(test_async_db, "Done")
        excluded = await seed_document(test_async_db, "Query document")
        pending = await seed_document(test_async_db, "Pending")
        for doc in (done, excluded, pending):
            await embedding_crud.upsert_many(test_async_db, rows_for(doc.id, 1))
        await document_crud.mark_completed(test_async_db, done.id)
        await document_crud.mark_completed(test_async_db, excluded.id)

        # Act
        rows = await embedding_crud.get_for_completed_documents(
            test_async_db, exclude_document_id=excluded.id
        )

        # Assert
        assert rows == [(done.id, 0, [0.0, 1.0])]

"""
Test suite for BaseCRUD generic database operations.

Tests create, read (by ID and all), update, delete, exists and count against
an in-memory SQLite database, for both UUID and string primary keys.

System role: Verification of generic database layer foundation
"""

import uuid

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from dreamcore.boundary.db.CRUD import DocumentCRUD, ThemeCRUD
from dreamcore.boundary.db.models import DocumentStatus, ThemeModel


@pytest.fixture
def document_crud() -> DocumentCRUD:
    return DocumentCRUD()


class TestBaseCRUDCreate:
    """Test suite for BaseCRUD.create() method."""

    @pytest.mark.asyncio
    async def test_create_should_generate_id_and_defaults(
        self, test_async_db: AsyncSession, document_crud: DocumentCRUD
    ) -> None:
        """Test create flushes so the ID and column defaults are populated."""
        # Act
        document = await document_crud.create(test_async_db, raw_text="A dream")

        # Assert
        assert isinstance(document.id, uuid.UUID)
        assert document.status == DocumentStatus.PENDING
        assert document.attempt_count == 0
        assert document.created_at is not None

    @pytest.mark.asyncio
    async def test_create_should_support_string_primary_key(
        self, test_async_db: AsyncSession
    ) -> None:
        """Test create and get_by_id work for the code-keyed theme catalog."""
        # Arrange
        crud = ThemeCRUD()

        # Act
        await crud.create(test_async_db, code="water", label="Water", embedding=[1.0, 0.0])
        theme = await crud.get_by_id(test_async_db, "water")

        # Assert
        assert isinstance(theme, ThemeModel)
        assert theme.label == "Water"


class TestBaseCRUDRead:
    """Test suite for get_by_id(), get_all(), exists() and count()."""

    @pytest.mark.asyncio
    async def test_get_by_id_should_return_none_when_not_found(
        self, test_async_db: AsyncSession, document_crud: DocumentCRUD, sample_id: uuid.UUID
    ) -> None:
        """Test get_by_id returns None when ID doesn't exist."""
        assert await document_crud.get_by_id(test_async_db, sample_id) is None

    @pytest.mark.asyncio
    async def test_get_all_should_apply_limit_and_offset(
        self, test_async_db: AsyncSession, document_crud: DocumentCRUD
    ) -> None:
        """Test get_all respects pagination parameters."""
        # Arrange
        for i in range(5):
            await document_crud.create(test_async_db, raw_text=f"Dream {i}")

        # Act
        everything = await document_crud.get_all(test_async_db)
        page = await document_crud.get_all(test_async_db, limit=2, offset=4)

        # Assert
        assert len(everything) == 5
        assert len(page) == 1

    @pytest.mark.asyncio
    async def test_exists_and_count_should_reflect_rows(
        self, test_async_db: AsyncSession, document_crud: DocumentCRUD, sample_id: uuid.UUID
    ) -> None:
        """Test exists checks the primary key and count covers all rows."""
        # Arrange
        document = await document_crud.create(test_async_db, raw_text="A dream")

        # Act / Assert
        assert await document_crud.exists(test_async_db, document.id) is True
        assert await document_crud.exists(test_async_db, sample_id) is False
        assert await document_crud.count(test_async_db) == 1


class TestBaseCRUDUpdateByID:
    """Test suite for BaseCRUD.update_by_id() method."""

    @pytest.mark.asyncio
    async def test_update_by_id_should_refresh_loaded_instance(
        self, test_async_db: AsyncSession, document_crud: DocumentCRUD
    ) -> None:
        """Test the returned instance is the identity-mapped one with new values."""
        # Arrange
        document = await document_crud.create(test_async_db, raw_text="A dream")

        # Act
        updated = await document_crud.update_by_id(
            test_async_db, document.id, status=DocumentStatus.FAILED, last_error="boom"
        )

        # Assert
        assert updated is document
        assert document.status == DocumentStatus.FAILED
        assert document.last_error == "boom"

    @pytest.mark.asyncio
    async def test_update_by_id_should_return_none_when_not_found(
        self, test_async_db: AsyncSession, document_crud: DocumentCRUD, sample_id: uuid.UUID
    ) -> None:
        """Test update_by_id returns None when ID doesn't exist."""
        result = await document_crud.update_by_id(test_async_db, sample_id, last_error="x")

        assert result is None


class TestBaseCRUDDeleteByID:
    """Test suite for BaseCRUD.delete_by_id() method."""

    @pytest.mark.asyncio
    async def test_delete_by_id_should_report_whether_row_existed(
        self, test_async_db: AsyncSession, document_crud: DocumentCRUD
    ) -> None:
        """Test delete_by_id returns True once, then False."""
        # Arrange
        document = await document_crud.create(test_async_db, raw_text="A dream")

        # Act
        first = await document_crud.delete_by_id(test_async_db, document.id)
        second = await document_crud.delete_by_id(test_async_db, document.id)

        # Assert
        assert first is True
        assert second is False
        assert await document_crud.exists(test_async_db, document.id) is False

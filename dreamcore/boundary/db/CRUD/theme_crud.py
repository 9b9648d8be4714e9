"""
Theme catalog and document-theme CRUD operations.

Dependencies: sqlalchemy, dreamcore.boundary.db.models.theme_model
System role: Theme catalog reads and per-document theme association writes
"""

from typing import Any, Sequence
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from dreamcore.boundary.db.CRUD.base_crud import BaseCRUD
from dreamcore.boundary.db.models.theme_model import DocumentThemeModel, ThemeModel


class ThemeCRUD(BaseCRUD[ThemeModel]):
    """
    CRUD operations for the theme catalog.

    ThemeModel is keyed by ``code``; get_by_id accepts a theme code.
    """

    def __init__(self) -> None:
        """Initialize ThemeCRUD with ThemeModel."""
        super().__init__(ThemeModel)

    async def get_active_catalog(self, session: AsyncSession) -> Sequence[ThemeModel]:
        """
        Retrieve active themes that have a catalog vector.

        Args:
            session: Async database session

        Returns:
            Sequence of ThemeModels ordered by code
        """
        stmt = (
            select(ThemeModel)
            .where(ThemeModel.is_active.is_(True), ThemeModel.embedding.is_not(None))
            .order_by(ThemeModel.code)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_by_codes(
        self,
        session: AsyncSession,
        codes: Sequence[str],
    ) -> Sequence[ThemeModel]:
        """
        Retrieve themes by code.

        Args:
            session: Async database session
            codes: Theme codes

        Returns:
            Sequence of matching ThemeModels (unknown codes are ignored)
        """
        if not codes:
            return []
        stmt = select(ThemeModel).where(ThemeModel.code.in_(list(codes)))
        result = await session.execute(stmt)
        return result.scalars().all()


class DocumentThemeCRUD(BaseCRUD[DocumentThemeModel]):
    """CRUD operations for document-theme associations."""

    def __init__(self) -> None:
        """Initialize DocumentThemeCRUD with DocumentThemeModel."""
        super().__init__(DocumentThemeModel)

    async def replace_for_document(
        self,
        session: AsyncSession,
        document_id: UUID,
        associations: Sequence[dict[str, Any]],
    ) -> int:
        """
        Replace all theme associations of a document.

        Args:
            session: Async database session
            document_id: Document UUID
            associations: Dicts with theme_code, similarity, chunk_index

        Returns:
            int: Number of associations written
        """
        await session.execute(
            delete(DocumentThemeModel).where(DocumentThemeModel.document_id == document_id)
        )
        session.add_all(
            DocumentThemeModel(document_id=document_id, **association)
            for association in associations
        )
        await session.flush()
        return len(associations)

    async def get_by_document(
        self,
        session: AsyncSession,
        document_id: UUID,
    ) -> Sequence[DocumentThemeModel]:
        """
        Retrieve a document's themes, most similar first.

        Args:
            session: Async database session
            document_id: Document UUID

        Returns:
            Sequence of DocumentThemeModels ordered by similarity desc, code asc
        """
        stmt = (
            select(DocumentThemeModel)
            .where(DocumentThemeModel.document_id == document_id)
            .order_by(DocumentThemeModel.similarity.desc(), DocumentThemeModel.theme_code)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def count_by_document(self, session: AsyncSession, document_id: UUID) -> int:
        """Count a document's theme associations."""
        stmt = select(func.count()).where(DocumentThemeModel.document_id == document_id)
        result = await session.execute(stmt)
        return result.scalar_one()

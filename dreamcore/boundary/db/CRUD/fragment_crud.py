"""
Knowledge fragment CRUD operations.

Read paths for the three retrieval tiers: theme associations above a
similarity floor, fragments carrying embeddings, and keyword search.

Dependencies: sqlalchemy, dreamcore.boundary.db.models.fragment_model
System role: Knowledge fragment persistence operations
"""

import operator
from functools import reduce
from typing import Sequence
from uuid import UUID

from sqlalchemy import case, select
from sqlalchemy.ext.asyncio import AsyncSession

from dreamcore.boundary.db.CRUD.base_crud import BaseCRUD
from dreamcore.boundary.db.models.fragment_model import (
    FragmentThemeModel,
    KnowledgeFragmentModel,
)


class FragmentCRUD(BaseCRUD[KnowledgeFragmentModel]):
    """CRUD operations for KnowledgeFragmentModel and its theme links."""

    def __init__(self) -> None:
        """Initialize FragmentCRUD with KnowledgeFragmentModel."""
        super().__init__(KnowledgeFragmentModel)

    async def add_theme_association(
        self,
        session: AsyncSession,
        fragment_id: UUID,
        theme_code: str,
        similarity: float,
    ) -> FragmentThemeModel:
        """
        Link a fragment to a theme with a precomputed similarity.

        Args:
            session: Async database session
            fragment_id: Fragment UUID
            theme_code: Theme code
            similarity: Fragment-theme similarity

        Returns:
            Created FragmentThemeModel
        """
        association = FragmentThemeModel(
            fragment_id=fragment_id,
            theme_code=theme_code,
            similarity=similarity,
        )
        session.add(association)
        await session.flush()
        return association

    async def get_theme_associations(
        self,
        session: AsyncSession,
        theme_codes: Sequence[str],
        scope: str,
        min_similarity: float,
        limit: int,
    ) -> Sequence[tuple[UUID, str, float]]:
        """
        Retrieve fragment-theme rows for the given themes within a scope.

        Args:
            session: Async database session
            theme_codes: Themes to look up
            scope: Fragment scope
            min_similarity: Rows below this similarity are ignored
            limit: Maximum rows to fetch

        Returns:
            Sequence of (fragment_id, theme_code, similarity), most similar first
        """
        if not theme_codes:
            return []
        stmt = (
            select(
                FragmentThemeModel.fragment_id,
                FragmentThemeModel.theme_code,
                FragmentThemeModel.similarity,
            )
            .join(
                KnowledgeFragmentModel,
                KnowledgeFragmentModel.id == FragmentThemeModel.fragment_id,
            )
            .where(
                FragmentThemeModel.theme_code.in_(list(theme_codes)),
                FragmentThemeModel.similarity >= min_similarity,
                KnowledgeFragmentModel.scope == scope,
            )
            .order_by(FragmentThemeModel.similarity.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [tuple(row) for row in result.all()]

    async def get_by_ids(
        self,
        session: AsyncSession,
        ids: Sequence[UUID],
    ) -> Sequence[KnowledgeFragmentModel]:
        """
        Retrieve fragments by id.

        Args:
            session: Async database session
            ids: Fragment UUIDs

        Returns:
            Sequence of KnowledgeFragmentModels (order not guaranteed)
        """
        if not ids:
            return []
        stmt = select(KnowledgeFragmentModel).where(KnowledgeFragmentModel.id.in_(list(ids)))
        result = await session.execute(stmt)
        return result.scalars().all()

    async def get_with_embeddings(
        self,
        session: AsyncSession,
        scope: str,
    ) -> Sequence[KnowledgeFragmentModel]:
        """
        Retrieve a scope's fragments that carry an embedding.

        Args:
            session: Async database session
            scope: Fragment scope

        Returns:
            Sequence of KnowledgeFragmentModels
        """
        stmt = select(KnowledgeFragmentModel).where(
            KnowledgeFragmentModel.scope == scope,
            KnowledgeFragmentModel.embedding.is_not(None),
        )
        result = await session.execute(stmt)
        return result.scalars().all()

    async def search_text(
        self,
        session: AsyncSession,
        scope: str,
        keywords: Sequence[str],
        limit: int,
    ) -> Sequence[KnowledgeFragmentModel]:
        """
        Case-insensitive keyword search over fragment text within a scope.

        Rows are ranked in SQL by the number of distinct keywords they
        contain before the limit is applied.

        Args:
            session: Async database session
            scope: Fragment scope
            keywords: Terms of which at least one must appear
            limit: Maximum rows to fetch

        Returns:
            Sequence of matching KnowledgeFragmentModels, most hits first
        """
        if not keywords:
            return []
        hit_count = reduce(
            operator.add,
            (
                case((KnowledgeFragmentModel.text.ilike(f"%{kw}%"), 1), else_=0)
                for kw in keywords
            ),
        )
        stmt = (
            select(KnowledgeFragmentModel)
            .where(KnowledgeFragmentModel.scope == scope, hit_count > 0)
            .order_by(hit_count.desc(), KnowledgeFragmentModel.id)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return result.scalars().all()

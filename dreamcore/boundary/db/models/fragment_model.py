"""
Knowledge fragment ORM models.

Curated snippets (interpretation notes, symbol references) scoped to an
owner/category and linked to themes through precomputed similarities.

Dependencies: sqlalchemy, dreamcore.boundary.db.base
System role: Knowledge store consumed by the fragment retriever
"""

import uuid

from sqlalchemy import JSON, Float, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from dreamcore.boundary.db.base import Base, TimestampMixin, UUIDMixin


class KnowledgeFragmentModel(Base, UUIDMixin, TimestampMixin):
    """
    Knowledge fragment.

    Attributes:
        text: Fragment body
        source: Citation or origin of the fragment
        scope: Owner/category tag (e.g. interpreter name)
        fragment_metadata: Free-form JSON metadata
        embedding: Optional vector used by the semantic fallback
    """

    __tablename__ = "knowledge_fragments"

    text: Mapped[str] = mapped_column(Text, nullable=False)
    source: Mapped[str] = mapped_column(String(512), nullable=False, default="")
    scope: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    fragment_metadata: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    embedding: Mapped[list[float] | None] = mapped_column(JSON(none_as_null=True), nullable=True)


class FragmentThemeModel(Base):
    """
    Fragment-theme association with an offline similarity score.

    Attributes:
        fragment_id: Associated fragment
        theme_code: Associated theme
        similarity: Precomputed fragment-theme similarity
    """

    __tablename__ = "fragment_themes"

    fragment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("knowledge_fragments.id", ondelete="CASCADE"),
        primary_key=True,
    )
    theme_code: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("themes.code", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    similarity: Mapped[float] = mapped_column(Float, nullable=False)

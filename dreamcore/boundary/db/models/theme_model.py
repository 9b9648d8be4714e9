"""
Theme catalog and document-theme association ORM models.

The catalog is maintained offline and read-only at run time; associations
are rewritten whenever a document is (re)processed.

Dependencies: sqlalchemy, dreamcore.boundary.db.base
System role: Theme catalog and per-document theme storage
"""

import uuid

from sqlalchemy import JSON, Boolean, Float, ForeignKey, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from dreamcore.boundary.db.base import Base, UUIDMixin


class ThemeModel(Base):
    """
    Theme catalog entry.

    Attributes:
        code: Stable theme identifier, e.g. "falling"
        label: Human-readable name
        description: Optional longer description
        embedding: Catalog vector, same dimensionality as chunk embeddings
        is_active: Inactive themes are ignored by the matcher
    """

    __tablename__ = "themes"

    code: Mapped[str] = mapped_column(String(64), primary_key=True)
    label: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    embedding: Mapped[list[float] | None] = mapped_column(JSON(none_as_null=True), nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)


class DocumentThemeModel(Base, UUIDMixin):
    """
    Document-theme association.

    Attributes:
        document_id: Associated document
        theme_code: Associated theme
        similarity: Maximum chunk similarity to the theme vector
        chunk_index: Chunk that produced the maximum

    Constraints:
        (document_id, theme_code) UNIQUE
    """

    __tablename__ = "document_themes"
    __table_args__ = (
        UniqueConstraint("document_id", "theme_code", name="uq_document_themes_pair"),
    )

    document_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("documents.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    theme_code: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("themes.code", ondelete="CASCADE"),
        nullable=False,
    )
    similarity: Mapped[float] = mapped_column(Float, nullable=False)
    chunk_index: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

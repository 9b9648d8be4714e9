"""
Database boundary layer: ORM models, CRUD operations, and connection management.

Exports:
  - Base, UUIDMixin, TimestampMixin: Model building blocks
  - get_async_engine(), get_async_session_factory(), create_tables(): Connection management
  - DocumentModel, JobModel, DocumentEmbeddingModel, ThemeModel,
    DocumentThemeModel, KnowledgeFragmentModel, FragmentThemeModel: Entities
  - DocumentStatus, JobStatus: Enum types for state tracking
  - DocumentCRUD, JobCRUD, EmbeddingCRUD, ThemeCRUD, DocumentThemeCRUD,
    FragmentCRUD: CRUD operation classes

Dependencies: sqlalchemy, dreamcore.configs
System role: Database adapter providing persistent storage for documents,
embeddings, themes, knowledge fragments and the embedding job queue.
"""

from dreamcore.boundary.db.base import Base, TimestampMixin, UUIDMixin, utcnow
from dreamcore.boundary.db.connection import (
    create_tables,
    get_async_engine,
    get_async_session_factory,
)
from dreamcore.boundary.db.models import (
    DocumentEmbeddingModel,
    DocumentModel,
    DocumentStatus,
    DocumentThemeModel,
    FragmentThemeModel,
    JobModel,
    JobStatus,
    KnowledgeFragmentModel,
    ThemeModel,
)
from dreamcore.boundary.db.CRUD import (
    BaseCRUD,
    DocumentCRUD,
    DocumentThemeCRUD,
    EmbeddingCRUD,
    FragmentCRUD,
    JobCRUD,
    ThemeCRUD,
)

__all__ = [
    # Base classes
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "utcnow",
    # Connection
    "get_async_engine",
    "get_async_session_factory",
    "create_tables",
    # Models
    "DocumentModel",
    "DocumentStatus",
    "DocumentEmbeddingModel",
    "DocumentThemeModel",
    "FragmentThemeModel",
    "JobModel",
    "JobStatus",
    "KnowledgeFragmentModel",
    "ThemeModel",
    # CRUD classes
    "BaseCRUD",
    "DocumentCRUD",
    "DocumentThemeCRUD",
    "EmbeddingCRUD",
    "FragmentCRUD",
    "JobCRUD",
    "ThemeCRUD",
]

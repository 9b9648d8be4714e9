"""
Database models package.

Exports:
  - DocumentModel, DocumentStatus: Document ORM model and status enum
  - JobModel, JobStatus: Embedding job ORM model and status enum
  - DocumentEmbeddingModel: Per-chunk embedding records
  - ThemeModel, DocumentThemeModel: Theme catalog and document associations
  - KnowledgeFragmentModel, FragmentThemeModel: Fragment store and theme links

Dependencies: sqlalchemy, dreamcore.boundary.db.base
System role: Database model definitions for domain entities
"""

from dreamcore.boundary.db.models.document_model import DocumentModel, DocumentStatus
from dreamcore.boundary.db.models.embedding_model import DocumentEmbeddingModel
from dreamcore.boundary.db.models.fragment_model import (
    FragmentThemeModel,
    KnowledgeFragmentModel,
)
from dreamcore.boundary.db.models.job_model import (
    TERMINAL_JOB_STATUSES,
    JobModel,
    JobStatus,
)
from dreamcore.boundary.db.models.theme_model import DocumentThemeModel, ThemeModel

__all__ = [
    "DocumentModel",
    "DocumentStatus",
    "DocumentEmbeddingModel",
    "JobModel",
    "JobStatus",
    "TERMINAL_JOB_STATUSES",
    "ThemeModel",
    "DocumentThemeModel",
    "KnowledgeFragmentModel",
    "FragmentThemeModel",
]

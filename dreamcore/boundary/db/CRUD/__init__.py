"""
CRUD operations for database models.

Exports base CRUD class and model-specific CRUD implementations.
CRUD classes are stateless; services construct their own instances or
receive them by injection.

Usage:
    from dreamcore.boundary.db.CRUD import JobCRUD

    job_crud = JobCRUD()
    job = await job_crud.claim(session, job_id)
"""

from dreamcore.boundary.db.CRUD.base_crud import BaseCRUD, dialect_insert
from dreamcore.boundary.db.CRUD.document_crud import DocumentCRUD
from dreamcore.boundary.db.CRUD.embedding_crud import EmbeddingCRUD
from dreamcore.boundary.db.CRUD.fragment_crud import FragmentCRUD
from dreamcore.boundary.db.CRUD.job_crud import STALE_JOB_MESSAGE, JobCRUD
from dreamcore.boundary.db.CRUD.theme_crud import DocumentThemeCRUD, ThemeCRUD

__all__ = [
    "BaseCRUD",
    "dialect_insert",
    "DocumentCRUD",
    "EmbeddingCRUD",
    "FragmentCRUD",
    "JobCRUD",
    "STALE_JOB_MESSAGE",
    "ThemeCRUD",
    "DocumentThemeCRUD",
]

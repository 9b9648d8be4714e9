"""Service orchestrators."""

from .document_service import DocumentService
from .job_service import JobService, backoff_delay

__all__ = [
    "DocumentService",
    "JobService",
    "backoff_delay",
]

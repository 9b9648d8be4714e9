"""
Domain schemas returned by services, the worker and the retriever.
"""

from dreamcore.models.document import (
    DocumentStatusResponse,
    DocumentThemeResponse,
    SimilarDocument,
    SubmittedDocument,
)
from dreamcore.models.fragment import RetrievalMethod, RetrievalResult, RetrievedFragment
from dreamcore.models.job import JobOutcome, JobOutcomeStatus, JobResponse, QueueStats, WorkerStatus

__all__ = [
    "DocumentStatusResponse",
    "DocumentThemeResponse",
    "SimilarDocument",
    "SubmittedDocument",
    "RetrievalMethod",
    "RetrievalResult",
    "RetrievedFragment",
    "JobOutcome",
    "JobOutcomeStatus",
    "JobResponse",
    "QueueStats",
    "WorkerStatus",
]

"""
Exception hierarchy for the dream embedding core.

Provides layered exception structure for domain-specific errors.
All exceptions include context for observability and debugging.

Dependencies: None (pure domain layer)
System role: Centralized exception handling across the application
"""

from typing import Any


class DreamCoreException(Exception):
    """Base exception for all dreamcore errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """
        Initialize base exception with message and optional context.

        Args:
            message: Human-readable error message
            details: Optional dictionary of additional context for debugging

        """
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def __str__(self) -> str:
        """Return string representation including details."""
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class DocumentNotFoundError(DreamCoreException):
    """Raised when a document cannot be found."""

    def __init__(self, document_id: Any, details: dict[str, Any] | None = None) -> None:
        """
        Initialize document not found error.

        Args:
            document_id: ID of the missing document
            details: Additional context
        """
        details = details or {}
        details["document_id"] = str(document_id)
        self.document_id = document_id
        super().__init__(f"Document not found: {document_id}", details)


class DocumentValidationError(DreamCoreException):
    """
    Raised when a document is not eligible for embedding.

    Terminal and non-retryable: the worker marks the document skipped.
    """

    def __init__(
        self,
        reason: str,
        document_id: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize validation error.

        Args:
            reason: Why the document was rejected (stored as the skip reason)
            document_id: ID of the rejected document
            details: Additional context
        """
        details = details or {}
        if document_id is not None:
            details["document_id"] = str(document_id)
        self.reason = reason
        super().__init__(reason, details)


class DocumentProcessingError(DreamCoreException):
    """Base exception for document processing errors."""

    def __init__(
        self,
        message: str,
        document_id: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize document processing error.

        Args:
            message: Error message
            document_id: ID of the document that failed
            details: Additional context
        """
        details = details or {}
        if document_id is not None:
            details["document_id"] = str(document_id)
        super().__init__(message, details)


class EmbeddingError(DocumentProcessingError):
    """Raised when embedding generation fails for a whole document."""

    pass


class EmbeddingBatchError(EmbeddingError):
    """Raised when a single embedding batch fails."""

    def __init__(
        self,
        message: str,
        batch_index: int,
        document_id: Any | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize batch error.

        Args:
            message: Error message
            batch_index: Zero-based index of the failed batch
            document_id: ID of the document being embedded
            details: Additional context
        """
        details = details or {}
        details["batch_index"] = batch_index
        self.batch_index = batch_index
        super().__init__(message, document_id, details)


class JobNotFoundError(DreamCoreException):
    """Raised when an embedding job cannot be found."""

    def __init__(self, job_id: Any, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["job_id"] = str(job_id)
        super().__init__(f"Job not found: {job_id}", details)


class JobAlreadyActiveError(DreamCoreException):
    """Raised when enqueueing a document whose job is currently processing."""

    def __init__(self, document_id: Any, details: dict[str, Any] | None = None) -> None:
        details = details or {}
        details["document_id"] = str(document_id)
        super().__init__(f"Document is already being processed: {document_id}", details)


class RetrievalError(DreamCoreException):
    """Raised when a retrieval tier fails."""

    def __init__(
        self,
        message: str,
        method: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Initialize retrieval error.

        Args:
            message: Error message
            method: Retrieval tier that failed
            details: Additional context
        """
        details = details or {}
        if method:
            details["method"] = method
        super().__init__(message, details)

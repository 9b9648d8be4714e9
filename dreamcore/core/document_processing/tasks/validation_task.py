"""
Eligibility check run before a transcript enters the pipeline.

Dependencies: dreamcore.core.exceptions
System role: Validation short-circuit of the embedding pipeline
"""

from uuid import UUID

from dreamcore.configs.pipeline import PipelineSettings
from dreamcore.core.exceptions import DocumentValidationError

TOO_SHORT_REASON = "Transcript too short"


class ValidationTask:
    """Reject transcripts that are too short or not in a supported language."""

    def __init__(
        self,
        min_chars: int = 40,
        supported_language_prefixes: list[str] | None = None,
    ) -> None:
        self.min_chars = min_chars
        self.supported_language_prefixes = [
            prefix.lower() for prefix in (supported_language_prefixes or ["en"])
        ]

    @classmethod
    def from_settings(cls, settings: PipelineSettings) -> "ValidationTask":
        return cls(
            min_chars=settings.min_chars_for_embedding,
            supported_language_prefixes=settings.supported_language_prefixes,
        )

    def validate(
        self,
        text: str | None,
        language: str | None = None,
        document_id: UUID | None = None,
    ) -> None:
        """
        Check that a transcript is eligible for embedding.

        A missing language code is accepted; a present one must start with a
        supported prefix ("en" also covers "en-US" and "eng").

        Args:
            text: Transcript text
            language: Optional ISO language code
            document_id: Document being validated

        Raises:
            DocumentValidationError: With the skip reason when not eligible
        """
        if text is None or len(text.strip()) < self.min_chars:
            raise DocumentValidationError(TOO_SHORT_REASON, document_id=document_id)

        if language and language.strip():
            code = language.strip().lower()
            if not any(code.startswith(prefix) for prefix in self.supported_language_prefixes):
                raise DocumentValidationError(
                    f"Unsupported language: {language}",
                    document_id=document_id,
                    details={"language": language},
                )

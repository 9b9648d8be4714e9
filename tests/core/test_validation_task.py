"""
Test suite for ValidationTask.

System role: Verification of transcript eligibility rules
"""

import uuid

import pytest

from dreamcore.configs.pipeline import PipelineSettings
from dreamcore.core.document_processing.tasks import TOO_SHORT_REASON, ValidationTask
from dreamcore.core.exceptions import DocumentValidationError

LONG_TEXT = "I was falling through water and could not breathe at all."


class TestValidationTask:
    """Test suite for ValidationTask.validate."""

    def test_long_english_text_should_pass(self) -> None:
        ValidationTask(min_chars=40).validate(LONG_TEXT, "en")

    def test_missing_language_should_pass(self) -> None:
        ValidationTask(min_chars=40).validate(LONG_TEXT, None)

    @pytest.mark.parametrize("language", ["en-US", "EN", "eng"])
    def test_language_variants_should_match_prefix(self, language: str) -> None:
        ValidationTask(min_chars=40).validate(LONG_TEXT, language)

    def test_short_text_should_raise_too_short(self) -> None:
        # Arrange
        document_id = uuid.uuid4()

        # Act
        with pytest.raises(DocumentValidationError) as exc_info:
            ValidationTask(min_chars=40).validate("too short", "en", document_id)

        # Assert
        assert exc_info.value.reason == TOO_SHORT_REASON

    def test_whitespace_padding_should_not_count(self) -> None:
        with pytest.raises(DocumentValidationError):
            ValidationTask(min_chars=10).validate("   short   " + " " * 40)

    def test_none_text_should_raise(self) -> None:
        with pytest.raises(DocumentValidationError):
            ValidationTask().validate(None)

    def test_unsupported_language_should_raise(self) -> None:
        with pytest.raises(DocumentValidationError) as exc_info:
            ValidationTask(min_chars=10).validate(LONG_TEXT, "fr")

        assert exc_info.value.reason == "Unsupported language: fr"

    def test_from_settings_should_convert_tokens_to_chars(
        self, pipeline_settings: PipelineSettings
    ) -> None:
        task = ValidationTask.from_settings(pipeline_settings)

        assert task.min_chars == 12
        assert task.supported_language_prefixes == ["en"]

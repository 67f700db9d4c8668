"""Error types raised by the PDF → questions pipeline.

Download and extraction errors are fatal to a run and reach the caller.
Errors raised while synthesizing questions are caught by the pipeline
and turned into an unsuccessful ``PipelineResult``.
"""

from __future__ import annotations

from app.llm_clients import LLMError


class PdfQuestionsError(Exception):
    """Base class for all pipeline errors."""


class ConfigurationError(PdfQuestionsError):
    """Required configuration (e.g. an API key) is missing or invalid."""


class DownloadError(PdfQuestionsError):
    """The PDF could not be downloaded (non-2xx status or network failure)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class InvalidInputError(PdfQuestionsError):
    """Input is not a usable PDF (wrong type, bad signature, unreadable)."""


class ExtractionError(PdfQuestionsError):
    """The OCR / document extraction collaborator failed."""


class EmptyResultError(PdfQuestionsError):
    """An extraction step produced only whitespace."""


class EmptyExtractionError(EmptyResultError):
    """No text could be extracted from the PDF."""


class GenerationTooShortError(PdfQuestionsError):
    """The generated text is too short to contain questions."""

    def __init__(self, length: int, minimum: int) -> None:
        super().__init__(
            f"Generated text too short: {length} characters "
            f"(must be more than {minimum})"
        )
        self.length = length
        self.minimum = minimum


__all__ = [
    "PdfQuestionsError",
    "ConfigurationError",
    "DownloadError",
    "InvalidInputError",
    "ExtractionError",
    "EmptyResultError",
    "EmptyExtractionError",
    "GenerationTooShortError",
    "LLMError",
]

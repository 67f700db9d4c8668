"""PDF → study questions pipeline.

Downloads a PDF, extracts its text (vision OCR or text layer), generates
study questions with a streamed LLM call and parses them into a bounded
list. Public symbols are re-exported here so ``from app.pdf_questions
import X`` works.
"""

from app.pdf_questions.agent import Agent, ToolSpec, run_agent, tool_registry
from app.pdf_questions.config import PipelineSettings, load_settings
from app.pdf_questions.errors import (
    ConfigurationError,
    DownloadError,
    EmptyExtractionError,
    EmptyResultError,
    ExtractionError,
    GenerationTooShortError,
    InvalidInputError,
    LLMError,
    PdfQuestionsError,
)
from app.pdf_questions.extractor import TextExtractor
from app.pdf_questions.fetcher import fetch_pdf
from app.pdf_questions.models import (
    ExtractedText,
    PdfBytes,
    PipelineResult,
    PipelineState,
    StepResult,
)
from app.pdf_questions.parser import parse_questions
from app.pdf_questions.pipeline import PdfQuestionPipeline
from app.pdf_questions.synthesizer import QuestionSynthesizer
from app.pdf_questions.tools import PdfToolSession, pdf_question_agent

__all__ = [
    # Pipeline
    "PdfQuestionPipeline",
    "PipelineSettings",
    "load_settings",
    # Stages
    "fetch_pdf",
    "TextExtractor",
    "QuestionSynthesizer",
    "parse_questions",
    # Agents
    "Agent",
    "ToolSpec",
    "run_agent",
    "tool_registry",
    "PdfToolSession",
    "pdf_question_agent",
    # Models
    "PdfBytes",
    "ExtractedText",
    "PipelineResult",
    "PipelineState",
    "StepResult",
    # Errors
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

"""PDF → questions pipeline orchestrator.

Runs Download → Extract → Synthesize strictly in sequence, then parses
the generated text. Download and extraction failures propagate to the
caller; synthesis failures are downgraded to an unsuccessful result.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Optional, TypeVar

from app.llm_clients import LLMUsage, OpenAIClient
from app.pdf_questions.config import PipelineSettings, load_settings
from app.pdf_questions.errors import EmptyExtractionError
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
from app.pdf_questions.synthesizer import QuestionSynthesizer, question_generator_agent

logger = logging.getLogger(__name__)

T = TypeVar("T")

Fetcher = Callable[..., PdfBytes]


def build_client(settings: PipelineSettings) -> OpenAIClient:
    """OpenAI client configured from *settings* (requires an API key)."""
    return OpenAIClient(
        api_key=settings.require_api_key(),
        model=settings.question_model,
        timeout=settings.llm_timeout,
    )


def build_extractor(
    settings: PipelineSettings, client: Optional[OpenAIClient],
) -> TextExtractor:
    return TextExtractor(
        client,
        mode=settings.ocr_mode,
        ocr_model=settings.ocr_model,
        dpi=settings.ocr_dpi,
        max_pages=settings.max_pages,
    )


def build_synthesizer(
    settings: PipelineSettings, client: OpenAIClient,
) -> QuestionSynthesizer:
    return QuestionSynthesizer(
        client,
        agent=question_generator_agent(settings.question_model),
        max_questions=settings.max_questions,
        min_question_length=settings.min_question_length,
        min_generation_length=settings.min_generation_length,
    )


class PdfQuestionPipeline:
    """Orchestrates the download, extract and synthesize stages.

    Components are injected; any that are omitted are built from
    *settings*. The pipeline holds no per-run state, so one instance can
    serve independent runs.
    """

    def __init__(
        self,
        settings: PipelineSettings | None = None,
        *,
        client: OpenAIClient | None = None,
        extractor: TextExtractor | None = None,
        synthesizer: QuestionSynthesizer | None = None,
        fetcher: Fetcher = fetch_pdf,
    ) -> None:
        """Initialize with settings and components (defaults from settings)."""
        self._settings = settings or load_settings()

        needs_client = synthesizer is None or (
            extractor is None and self._settings.ocr_mode != "text"
        )
        if client is None and needs_client:
            client = build_client(self._settings)

        self._fetcher = fetcher
        self._extractor = extractor or build_extractor(self._settings, client)
        self._synthesizer = synthesizer or build_synthesizer(self._settings, client)

    @property
    def settings(self) -> PipelineSettings:
        return self._settings

    def run(self, pdf_url: str) -> PipelineResult:
        """Run the pipeline for a single PDF URL.

        Raises:
            InvalidInputError: If the URL or downloaded bytes are unusable.
            DownloadError: If the download fails.
            ExtractionError: If the OCR collaborator fails.
            EmptyExtractionError: If no text was extracted.
        """
        steps: list[StepResult] = []
        usages: list[LLMUsage] = []
        logger.info("Starting pdf-to-questions run for %s", pdf_url)

        # Downloading
        pdf = self._run_step(
            "download-pdf",
            PipelineState.DOWNLOADING,
            steps,
            lambda: self._fetcher(pdf_url, timeout=self._settings.download_timeout),
            lambda p: f"Downloaded {p.size} bytes",
        )

        # Extracting
        extracted = self._run_step(
            "extract-text",
            PipelineState.EXTRACTING,
            steps,
            lambda: self._extract(pdf),
            lambda e: f"Extracted {e.character_count} characters from {e.page_count} pages",
        )

        # Synthesizing: the only stage whose errors are contained
        try:
            raw = self._run_step(
                "generate-questions",
                PipelineState.SYNTHESIZING,
                steps,
                lambda: self._synthesizer.synthesize(
                    extracted.text,
                    self._settings.max_input_chars,
                    on_usage=usages.append,
                ),
                lambda r: f"Generated {len(r)} characters",
            )
        except Exception as exc:
            return PipelineResult(
                questions=[],
                success=False,
                state=PipelineState.FAILED,
                error=f"{type(exc).__name__}: {exc}",
                steps=steps,
                usage=usages[-1] if usages else None,
            )

        questions = parse_questions(
            raw,
            max_questions=self._settings.max_questions,
            min_length=self._settings.min_question_length,
        )
        logger.info("Parsed %d questions", len(questions))
        return PipelineResult(
            questions=questions,
            success=True,
            state=PipelineState.DONE,
            steps=steps,
            usage=usages[-1] if usages else None,
        )

    def _extract(self, pdf: PdfBytes) -> ExtractedText:
        extracted = self._extractor.extract(pdf)
        if extracted.is_blank():
            raise EmptyExtractionError(
                "No text could be extracted from the provided PDF",
            )
        return extracted

    def _run_step(
        self,
        name: str,
        state: PipelineState,
        steps: list[StepResult],
        action: Callable[[], T],
        describe: Callable[[T], str],
    ) -> T:
        """Execute one stage, recording a StepResult either way."""
        logger.info("Executing step: %s (%s)", name, state.value)
        t0 = time.perf_counter()
        try:
            value = action()
        except Exception as exc:
            elapsed = time.perf_counter() - t0
            steps.append(StepResult(
                step_name=name, success=False,
                elapsed_s=round(elapsed, 3), error=str(exc),
            ))
            logger.error(
                "Step %s: Failed after %.2fs -> %s: %s",
                name, elapsed, PipelineState.FAILED.value, exc,
            )
            raise

        elapsed = time.perf_counter() - t0
        detail = describe(value)
        steps.append(StepResult(
            step_name=name, success=True,
            elapsed_s=round(elapsed, 3), detail=detail,
        ))
        logger.info("Step %s: Succeeded in %.2fs - %s", name, elapsed, detail)
        return value

"""CLI entry point for the PDF → questions pipeline.

Usage:
    # Transformer paper (default URL)
    python -m app.pdf_questions.scripts.run_pipeline

    # Any PDF, JSON output
    python -m app.pdf_questions.scripts.run_pipeline \
        --url https://example.com/paper.pdf --json

    # Use the embedded text layer instead of vision OCR
    python -m app.pdf_questions.scripts.run_pipeline --ocr-mode text

    # Let the tool-using agent drive the whole process
    python -m app.pdf_questions.scripts.run_pipeline --agent

Requires OPENAI_API_KEY (environment or .env).
"""

from __future__ import annotations

import argparse
import json
import logging
import sys

from pydantic import ValidationError

from app.pdf_questions.config import load_settings
from app.pdf_questions.errors import ConfigurationError, LLMError, PdfQuestionsError
from app.pdf_questions.models import PipelineResult
from app.pdf_questions.pipeline import (
    PdfQuestionPipeline,
    build_client,
    build_extractor,
    build_synthesizer,
)
from app.pdf_questions.tools import PdfToolSession, pdf_question_agent
from app.utils.logging_config import setup_logging

_logger = logging.getLogger(__name__)

EXAMPLE_PDF_URL = "https://arxiv.org/pdf/1706.03762.pdf"


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    args = _parse_args(argv)
    setup_logging(verbose=args.verbose)

    overrides: dict = {}
    if args.ocr_mode is not None:
        overrides["ocr_mode"] = args.ocr_mode
    if args.max_chars is not None:
        overrides["max_input_chars"] = args.max_chars
    if args.max_pages is not None:
        overrides["max_pages"] = args.max_pages
    try:
        settings = load_settings(**overrides)
    except ValidationError as exc:
        print(f"Error: invalid settings:\n{exc}", file=sys.stderr)
        sys.exit(1)

    try:
        settings.require_api_key()
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    print(f"Process: PDF URL -> Download -> OCR ({settings.ocr_mode}) -> Question Generation")
    print(f"Input: {args.url}\n")

    if args.agent:
        try:
            _run_agent(settings, args.url)
        except (PdfQuestionsError, LLMError) as exc:
            _logger.error("Agent run failed: %s", exc)
            sys.exit(1)
        sys.exit(0)

    try:
        result = PdfQuestionPipeline(settings).run(args.url)
    except PdfQuestionsError as exc:
        _logger.error("Pipeline failed: %s", exc)
        print(f"\nFailed: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))
    else:
        _print_result(result)
    sys.exit(0 if result.success else 1)


def _run_agent(settings, pdf_url: str) -> None:
    """Stream the PDF agent's reply to stdout."""
    client = build_client(settings)
    session = PdfToolSession(
        build_extractor(settings, client),
        build_synthesizer(settings, client),
        download_timeout=settings.download_timeout,
        max_input_chars=settings.max_input_chars,
    )
    agent = pdf_question_agent(session, model=settings.question_model)
    request = f"Generate study questions from the PDF at {pdf_url}"
    for chunk in agent.stream(
        request, client=client, max_tool_rounds=settings.max_tool_rounds,
    ):
        print(chunk, end="", flush=True)
    print()


def _print_result(result: PipelineResult) -> None:
    for step in result.steps:
        status = "OK" if step.success else "FAILED"
        print(f"  [{status}] {step.step_name} ({step.elapsed_s:.2f}s) {step.detail}")
    if result.usage is not None:
        print(
            f"  Tokens: {result.usage.input_tokens} in / "
            f"{result.usage.output_tokens} out ({result.usage.model})"
        )

    if result.success and result.questions:
        print("\nGenerated Questions:")
        for index, question in enumerate(result.questions, start=1):
            print(f"{index}. {question}")
    elif result.success:
        print("\nNo questions could be parsed from the generated text.")
    else:
        print(f"\nQuestion generation failed: {result.error}")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Download a PDF, extract its text and generate study questions.",
    )
    parser.add_argument(
        "--url", default=EXAMPLE_PDF_URL,
        help=f"URL of the PDF to process (default: {EXAMPLE_PDF_URL})",
    )
    parser.add_argument(
        "--ocr-mode", choices=["vision", "text", "auto"], default=None,
        help="How page text is read (default: vision, or OCR_MODE)",
    )
    parser.add_argument(
        "--max-chars", type=int, default=None,
        help="Characters of extracted text sent to the model (default 4000)",
    )
    parser.add_argument(
        "--max-pages", type=int, default=None,
        help="Only read the first N pages",
    )
    parser.add_argument(
        "--agent", action="store_true",
        help="Let the tool-using PDF agent drive download, OCR and generation",
    )
    parser.add_argument(
        "--json", action="store_true",
        help='Print {"questions": [...], "success": bool} as JSON',
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


if __name__ == "__main__":
    main()

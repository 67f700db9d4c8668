"""PDF tools for the tool-using PDF question agent.

Downloaded PDFs are held by a ``PdfToolSession`` that lives only as long
as one agent conversation, so tools can refer to a PDF by its URL.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from app.pdf_questions.agent import Agent, ToolSpec, tool_registry
from app.pdf_questions.extractor import TextExtractor
from app.pdf_questions.fetcher import fetch_pdf
from app.pdf_questions.models import PdfBytes
from app.pdf_questions.prompts import PDF_AGENT_INSTRUCTIONS
from app.pdf_questions.synthesizer import MAX_INPUT_CHARS, QuestionSynthesizer

logger = logging.getLogger(__name__)

_URL_PARAMETERS = {
    "type": "object",
    "properties": {
        "pdf_url": {"type": "string", "description": "URL of the PDF file"},
    },
    "required": ["pdf_url"],
}

_TEXT_PARAMETERS = {
    "type": "object",
    "properties": {
        "extracted_text": {
            "type": "string",
            "description": "Text extracted from the PDF",
        },
    },
    "required": ["extracted_text"],
}


class PdfToolSession:
    """Tool handlers sharing the PDFs downloaded during one conversation."""

    def __init__(
        self,
        extractor: TextExtractor,
        synthesizer: QuestionSynthesizer,
        *,
        download_timeout: Optional[float] = None,
        max_input_chars: int = MAX_INPUT_CHARS,
    ) -> None:
        self._extractor = extractor
        self._synthesizer = synthesizer
        self._download_timeout = download_timeout
        self._max_input_chars = max_input_chars
        self._pdfs: dict[str, PdfBytes] = {}

    def fetch_pdf(self, pdf_url: str) -> dict[str, Any]:
        pdf = fetch_pdf(pdf_url, timeout=self._download_timeout)
        self._pdfs[pdf.source_url] = pdf
        return {"pdf_url": pdf.source_url, "file_size": pdf.size}

    def extract_pdf_text(self, pdf_url: str) -> dict[str, Any]:
        pdf = self._pdfs.get(pdf_url.strip())
        if pdf is None:
            pdf = fetch_pdf(pdf_url, timeout=self._download_timeout)
            self._pdfs[pdf.source_url] = pdf
        extracted = self._extractor.extract(pdf)
        return {
            "extracted_text": extracted.text[: self._max_input_chars],
            "truncated": extracted.character_count > self._max_input_chars,
            "pages_count": extracted.page_count,
            "character_count": extracted.character_count,
        }

    def generate_questions(self, extracted_text: str) -> dict[str, Any]:
        questions = self._synthesizer.generate(extracted_text, self._max_input_chars)
        return {"questions": questions, "success": True}

    def tools(self) -> dict[str, ToolSpec]:
        return tool_registry(
            ToolSpec(
                name="fetch_pdf",
                description="Downloads a PDF from a URL and returns its size in bytes",
                parameters=_URL_PARAMETERS,
                handler=self.fetch_pdf,
            ),
            ToolSpec(
                name="extract_pdf_text",
                description="Extracts text from a downloaded PDF using OCR",
                parameters=_URL_PARAMETERS,
                handler=self.extract_pdf_text,
            ),
            ToolSpec(
                name="generate_questions",
                description="Generates study questions from extracted PDF text",
                parameters=_TEXT_PARAMETERS,
                handler=self.generate_questions,
            ),
        )


def pdf_question_agent(session: PdfToolSession, model: Optional[str] = None) -> Agent:
    """Agent that downloads, extracts and generates questions via tools."""
    return Agent(
        name="pdf-question-agent",
        instructions=PDF_AGENT_INSTRUCTIONS,
        tools=session.tools(),
        model=model,
    )

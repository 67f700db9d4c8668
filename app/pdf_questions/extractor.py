"""Text Extractor - PDF bytes → text via OCR.

Second stage of the pipeline. Pages are opened with PyMuPDF and read one
at a time, either through a vision model (rendered page image), through
the PDF's embedded text layer, or a mix of both (``auto``).
"""

from __future__ import annotations

import io
import logging
from typing import Optional, Union

import fitz  # type: ignore
from PIL import Image

from app.llm_clients import LLMError, OpenAIClient
from app.pdf_questions.config import OcrMode
from app.pdf_questions.errors import (
    ConfigurationError,
    EmptyExtractionError,
    ExtractionError,
    InvalidInputError,
)
from app.pdf_questions.models import ExtractedText, PdfBytes
from app.pdf_questions.prompts import OCR_PAGE_PROMPT

logger = logging.getLogger(__name__)

PDF_SIGNATURE = b"%PDF-"
PAGE_SEPARATOR = "\n\n"


class TextExtractor:
    """Extracts text from PDF bytes, one page at a time.

    Single attempt per page; OCR errors propagate as ``ExtractionError``.
    """

    def __init__(
        self,
        client: Optional[OpenAIClient] = None,
        *,
        mode: OcrMode = "vision",
        ocr_model: Optional[str] = None,
        dpi: int = 150,
        max_pages: Optional[int] = None,
    ) -> None:
        """Initialize the extractor.

        Args:
            client: OpenAI client used for vision OCR. Required unless
                *mode* is ``"text"``.
            mode: ``"vision"``, ``"text"`` or ``"auto"``.
            ocr_model: Vision model override (defaults to the client's).
            dpi: Render resolution for vision OCR.
            max_pages: Process at most this many pages (None = all).
        """
        if mode != "text" and client is None:
            raise ConfigurationError(f"OCR mode '{mode}' requires an LLM client")
        self._client = client
        self._mode = mode
        self._ocr_model = ocr_model
        self._dpi = dpi
        self._max_pages = max_pages

    def extract(self, data: Union[bytes, bytearray, PdfBytes]) -> ExtractedText:
        """Extract the text of a PDF.

        A document that opens but whose page content streams are missing
        or unreadable yields no text, so it ends in ``EmptyExtractionError``
        rather than ``InvalidInputError``.

        Raises:
            InvalidInputError: If *data* is not readable PDF bytes.
            ExtractionError: If the OCR collaborator fails.
            EmptyExtractionError: If the extracted text is blank.
        """
        content = _coerce_bytes(data)
        logger.info("Extracting text from PDF buffer (%d bytes)...", len(content))

        doc = _open_pdf(content)
        try:
            total_pages = doc.page_count
            limit = total_pages
            if self._max_pages is not None:
                limit = min(total_pages, self._max_pages)

            pages: list[str] = []
            for index in range(limit):
                page_text = self._read_page(doc.load_page(index), index)
                logger.debug(
                    "Page %d/%d: %d characters", index + 1, limit, len(page_text),
                )
                pages.append(page_text.strip())
        finally:
            doc.close()

        text = PAGE_SEPARATOR.join(p for p in pages if p)
        if not text.strip():
            raise EmptyExtractionError(
                "No text could be extracted from the provided PDF",
            )

        result = ExtractedText(text=text, page_count=len(pages), pages=tuple(pages))
        logger.info(
            "Text extraction successful: %d characters from %d pages",
            result.character_count, result.page_count,
        )
        return result

    # ------------------------------------------------------------------
    # Per-page readers
    # ------------------------------------------------------------------

    def _read_page(self, page: "fitz.Page", index: int) -> str:
        if self._mode == "text":
            return page.get_text("text")
        if self._mode == "auto":
            layer = page.get_text("text")
            if layer.strip():
                return layer
            logger.debug("Page %d has no text layer; using vision OCR", index + 1)
        return self._ocr_page(page, index)

    def _ocr_page(self, page: "fitz.Page", index: int) -> str:
        image = _render_page(page, self._dpi)
        try:
            response = self._client.call_with_images(
                OCR_PAGE_PROMPT, [image], model=self._ocr_model,
            )
        except LLMError as exc:
            raise ExtractionError(
                f"Text extraction failed on page {index + 1}: {exc}",
            ) from exc
        return response.text


def _coerce_bytes(data: Union[bytes, bytearray, PdfBytes]) -> bytes:
    if isinstance(data, PdfBytes):
        data = data.content
    if not isinstance(data, (bytes, bytearray)):
        raise InvalidInputError(
            f"Invalid PDF buffer provided: expected bytes, got {type(data).__name__}",
        )
    if not data.startswith(PDF_SIGNATURE):
        raise InvalidInputError("Invalid PDF buffer provided: missing %PDF- header")
    return bytes(data)


def _open_pdf(content: bytes) -> "fitz.Document":
    try:
        doc = fitz.open(stream=content, filetype="pdf")
    except Exception as exc:
        raise InvalidInputError(f"Invalid PDF buffer provided: {exc}") from exc

    try:
        page_count = doc.page_count
    except Exception as exc:
        doc.close()
        raise InvalidInputError(f"Invalid PDF buffer provided: {exc}") from exc

    if doc.needs_pass:
        doc.close()
        raise InvalidInputError("Invalid PDF buffer provided: document is encrypted")
    if page_count == 0:
        doc.close()
        raise InvalidInputError("Invalid PDF buffer provided: document has no pages")
    return doc


def _render_page(page: "fitz.Page", dpi: int) -> Image.Image:
    """Render a page to a PIL image for the vision model."""
    pix = page.get_pixmap(dpi=dpi, alpha=False)
    return Image.open(io.BytesIO(pix.tobytes("png")))

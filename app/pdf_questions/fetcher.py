"""PDF Fetcher - downloads a PDF over HTTP.

First stage of the pipeline: URL → PdfBytes. Single GET, no retry.
"""

from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import urlparse

import requests

from app.pdf_questions.errors import DownloadError, InvalidInputError
from app.pdf_questions.models import PdfBytes

logger = logging.getLogger(__name__)


def validate_pdf_url(url: str) -> str:
    """Return *url* stripped, or raise ``InvalidInputError``."""
    if not isinstance(url, str) or not url.strip():
        raise InvalidInputError("PDF URL must be a non-empty string")
    url = url.strip()
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidInputError(f"Not an http(s) URL: {url}")
    return url


def fetch_pdf(
    url: str,
    *,
    timeout: Optional[float] = None,
    session: Optional[requests.Session] = None,
) -> PdfBytes:
    """Download the PDF at *url*.

    Args:
        url: http(s) URL of the PDF.
        timeout: Request timeout in seconds (None = no timeout).
        session: Optional ``requests.Session`` to reuse connections.

    Returns:
        PdfBytes holding the response body.

    Raises:
        InvalidInputError: If *url* is not an http(s) URL.
        DownloadError: On a non-2xx status or a network failure.
    """
    url = validate_pdf_url(url)
    http = session or requests
    logger.info("Downloading PDF from URL: %s", url)

    try:
        response = http.get(url, timeout=timeout)
    except requests.exceptions.RequestException as exc:
        logger.error("PDF download failed: %s", exc)
        raise DownloadError(
            f"Failed to download PDF from URL: {exc}",
        ) from exc

    if not 200 <= response.status_code < 300:
        message = (
            f"Failed to download PDF: {response.status_code} {response.reason}"
        )
        logger.error(message)
        raise DownloadError(message, status_code=response.status_code)

    pdf = PdfBytes(content=response.content, source_url=url)
    logger.info("Downloaded PDF: %d bytes", pdf.size)
    return pdf

import unittest
from unittest.mock import MagicMock

import fitz  # type: ignore
from PIL import Image

from app.llm_clients import LLMError, LLMResponse
from app.pdf_questions.errors import (
    ConfigurationError,
    EmptyExtractionError,
    ExtractionError,
    InvalidInputError,
)
from app.pdf_questions.extractor import TextExtractor
from app.pdf_questions.models import PdfBytes
from app.pdf_questions.prompts import OCR_PAGE_PROMPT


def make_pdf(*page_texts):
    """Build an in-memory PDF with one page per entry ("" = blank page)."""
    doc = fitz.open()
    for text in page_texts:
        page = doc.new_page()
        if text:
            page.insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


class TestTextMode(unittest.TestCase):
    def test_reads_text_layer_of_every_page(self):
        data = make_pdf("Attention is all you need", "Multi-head attention")
        result = TextExtractor(mode="text").extract(data)

        self.assertEqual(result.page_count, 2)
        self.assertIn("Attention is all you need", result.text)
        self.assertIn("Multi-head attention", result.text)
        self.assertLess(
            result.text.index("Attention is all"), result.text.index("Multi-head"),
        )
        self.assertEqual(result.character_count, len(result.text))

    def test_accepts_pdf_bytes_value(self):
        pdf = PdfBytes(content=make_pdf("Encoder stack"), source_url="https://x.org/a.pdf")
        result = TextExtractor(mode="text").extract(pdf)
        self.assertIn("Encoder stack", result.text)

    def test_max_pages_limits_reading(self):
        data = make_pdf("First page", "Second page", "Third page")
        result = TextExtractor(mode="text", max_pages=1).extract(data)
        self.assertEqual(result.page_count, 1)
        self.assertNotIn("Second page", result.text)

    def test_blank_document_raises_empty_extraction(self):
        with self.assertRaises(EmptyExtractionError):
            TextExtractor(mode="text").extract(make_pdf("", ""))

    def test_dangling_content_stream_raises_empty_extraction(self):
        doc = fitz.open(stream=make_pdf("Attention is all you need"), filetype="pdf")
        doc.xref_set_key(doc[0].xref, "Contents", "999 0 R")
        data = doc.tobytes()
        doc.close()

        with self.assertRaises(EmptyExtractionError):
            TextExtractor(mode="text").extract(data)


class TestVisionMode(unittest.TestCase):
    def setUp(self):
        self.client = MagicMock()
        self.client.call_with_images.return_value = LLMResponse(text="OCR page text")

    def test_each_page_is_rendered_and_sent(self):
        extractor = TextExtractor(self.client, mode="vision", ocr_model="gpt-4o", dpi=72)
        result = extractor.extract(make_pdf("one", "two"))

        self.assertEqual(self.client.call_with_images.call_count, 2)
        args, kwargs = self.client.call_with_images.call_args
        self.assertEqual(args[0], OCR_PAGE_PROMPT)
        self.assertEqual(len(args[1]), 1)
        self.assertIsInstance(args[1][0], Image.Image)
        self.assertEqual(kwargs["model"], "gpt-4o")
        self.assertEqual(result.text, "OCR page text\n\nOCR page text")
        self.assertEqual(result.pages, ("OCR page text", "OCR page text"))

    def test_llm_failure_becomes_extraction_error(self):
        self.client.call_with_images.side_effect = LLMError("503 Service Unavailable")
        extractor = TextExtractor(self.client, dpi=72)

        with self.assertRaises(ExtractionError) as ctx:
            extractor.extract(make_pdf("one"))
        self.assertIn("page 1", str(ctx.exception))

    def test_whitespace_ocr_output_raises_empty_extraction(self):
        self.client.call_with_images.return_value = LLMResponse(text="  \n\t ")
        with self.assertRaises(EmptyExtractionError):
            TextExtractor(self.client, dpi=72).extract(make_pdf("one"))

    def test_requires_client(self):
        with self.assertRaises(ConfigurationError):
            TextExtractor(None, mode="vision")
        with self.assertRaises(ConfigurationError):
            TextExtractor(None, mode="auto")


class TestAutoMode(unittest.TestCase):
    def test_ocr_only_for_pages_without_text_layer(self):
        client = MagicMock()
        client.call_with_images.return_value = LLMResponse(text="Scanned page text")
        extractor = TextExtractor(client, mode="auto", dpi=72)

        result = extractor.extract(make_pdf("Typed page text", ""))

        self.assertEqual(client.call_with_images.call_count, 1)
        self.assertIn("Typed page text", result.text)
        self.assertIn("Scanned page text", result.text)


class TestInvalidInput(unittest.TestCase):
    def setUp(self):
        self.extractor = TextExtractor(mode="text")

    def test_non_pdf_bytes(self):
        with self.assertRaises(InvalidInputError):
            self.extractor.extract(b"<html>Not Found</html>")

    def test_corrupted_pdf(self):
        with self.assertRaises(InvalidInputError):
            self.extractor.extract(b"%PDF-1.4\nthis is not a real document")

    def test_wrong_type(self):
        for bad in ("%PDF-1.4", None, 42):
            with self.assertRaises(InvalidInputError):
                self.extractor.extract(bad)


if __name__ == "__main__":
    unittest.main()

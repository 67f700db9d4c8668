import json
import unittest
from unittest.mock import MagicMock, patch

from app.llm_clients import StreamEvent, ToolCall
from app.pdf_questions.models import ExtractedText, PdfBytes
from app.pdf_questions.tools import PdfToolSession, pdf_question_agent

PDF_URL = "https://arxiv.org/pdf/1706.03762.pdf"


class TestPdfToolSession(unittest.TestCase):
    def setUp(self):
        self.extractor = MagicMock()
        self.extractor.extract.return_value = ExtractedText(
            text="x" * 50, page_count=2,
        )
        self.synthesizer = MagicMock()
        self.synthesizer.generate.return_value = ["What is attention?"]
        self.session = PdfToolSession(
            self.extractor, self.synthesizer, max_input_chars=20,
        )
        self.pdf = PdfBytes(content=b"%PDF-1.4 data", source_url=PDF_URL)

    @patch("app.pdf_questions.tools.fetch_pdf")
    def test_fetch_then_extract_reuses_download(self, mock_fetch):
        mock_fetch.return_value = self.pdf

        self.assertEqual(
            self.session.fetch_pdf(PDF_URL),
            {"pdf_url": PDF_URL, "file_size": len(b"%PDF-1.4 data")},
        )
        result = self.session.extract_pdf_text(PDF_URL)

        mock_fetch.assert_called_once()
        self.extractor.extract.assert_called_once_with(self.pdf)
        self.assertEqual(result["extracted_text"], "x" * 20)
        self.assertTrue(result["truncated"])
        self.assertEqual(result["pages_count"], 2)
        self.assertEqual(result["character_count"], 50)

    @patch("app.pdf_questions.tools.fetch_pdf")
    def test_extract_downloads_when_needed(self, mock_fetch):
        mock_fetch.return_value = self.pdf
        self.session.extract_pdf_text(PDF_URL)
        mock_fetch.assert_called_once_with(PDF_URL, timeout=None)

    def test_generate_questions(self):
        result = self.session.generate_questions("some text")
        self.assertEqual(result, {"questions": ["What is attention?"], "success": True})
        self.synthesizer.generate.assert_called_once_with("some text", 20)

    @patch("app.pdf_questions.tools.fetch_pdf")
    def test_agent_drives_tools(self, mock_fetch):
        mock_fetch.return_value = self.pdf
        agent = pdf_question_agent(self.session, model="gpt-test")
        self.assertEqual(
            sorted(agent.tools), ["extract_pdf_text", "fetch_pdf", "generate_questions"],
        )

        turns = [
            [StreamEvent(tool_calls=[
                ToolCall("c1", "fetch_pdf", json.dumps({"pdf_url": PDF_URL})),
            ])],
            [StreamEvent(tool_calls=[
                ToolCall("c2", "extract_pdf_text", json.dumps({"pdf_url": PDF_URL})),
            ])],
            [StreamEvent(tool_calls=[
                ToolCall("c3", "generate_questions", json.dumps({"extracted_text": "x" * 20})),
            ])],
            [StreamEvent(text="1. What is attention?")],
        ]
        client = MagicMock()
        client.stream_chat.side_effect = [iter(turn) for turn in turns]

        reply = agent.run("Process the PDF", client=client, max_tool_rounds=3)

        self.assertEqual(reply, "1. What is attention?")
        self.assertEqual(client.stream_chat.call_count, 4)
        self.synthesizer.generate.assert_called_once_with("x" * 20, 20)


if __name__ == "__main__":
    unittest.main()

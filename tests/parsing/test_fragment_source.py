"""
Unit Tests for PdfPlumberFragmentSource (pdfplumber mocked)
"""
import io
from unittest.mock import MagicMock, Mock, patch

import pytest

from pdfprocessor.parsing.exceptions import InvalidPdfException
from pdfprocessor.parsing.sources.fragments import PdfPlumberFragmentSource, describe_source


def mock_page(words, height=800.0, text=""):
    page = Mock()
    page.height = height
    page.extract_words.return_value = words
    page.extract_text.return_value = text
    return page


def mock_pdf(pages):
    pdf = MagicMock()
    pdf.pages = pages
    pdf.__enter__.return_value = pdf
    pdf.__exit__.return_value = False
    return pdf


class TestIterPages:

    @patch('pdfprocessor.parsing.sources.fragments.pdfplumber')
    def test_converts_to_bottom_left_origin(self, mock_pdfplumber):
        words = [{'text': '01/01/2024', 'x0': 42.5, 'top': 90.0, 'bottom': 100.0}]
        mock_pdfplumber.open.return_value = mock_pdf([mock_page(words, height=800.0)])

        pages = list(PdfPlumberFragmentSource().iter_pages("statement.pdf"))

        assert len(pages) == 1
        page_number, fragments = pages[0]
        assert page_number == 1
        frag = fragments[0]
        assert frag.text == '01/01/2024'
        assert frag.x == 42.5
        assert frag.y == 700.0
        assert frag.page == 1

    @patch('pdfprocessor.parsing.sources.fragments.pdfplumber')
    def test_pages_numbered_in_order(self, mock_pdfplumber):
        mock_pdfplumber.open.return_value = mock_pdf([mock_page([]), mock_page([]), mock_page([])])
        numbers = [n for n, _ in PdfPlumberFragmentSource().iter_pages(b"%PDF-1.4")]
        assert numbers == [1, 2, 3]

    @patch('pdfprocessor.parsing.sources.fragments.pdfplumber')
    def test_bytes_are_wrapped(self, mock_pdfplumber):
        mock_pdfplumber.open.return_value = mock_pdf([])
        list(PdfPlumberFragmentSource().iter_pages(b"%PDF-1.4"))

        opened = mock_pdfplumber.open.call_args[0][0]
        assert isinstance(opened, io.BytesIO)

    @patch('pdfprocessor.parsing.sources.fragments.pdfplumber')
    def test_open_failure_raises_invalid_pdf(self, mock_pdfplumber):
        mock_pdfplumber.open.side_effect = ValueError("No /Root object!")

        with pytest.raises(InvalidPdfException) as exc_info:
            list(PdfPlumberFragmentSource().iter_pages("broken.pdf"))
        assert exc_info.value.filename == "broken.pdf"
        assert exc_info.value.details == "ValueError"

    @patch('pdfprocessor.parsing.sources.fragments.pdfplumber')
    def test_page_failure_raises_invalid_pdf(self, mock_pdfplumber):
        bad_page = mock_page([])
        bad_page.extract_words.side_effect = KeyError("Font")
        mock_pdfplumber.open.return_value = mock_pdf([mock_page([]), bad_page])

        with pytest.raises(InvalidPdfException, match="page 2"):
            list(PdfPlumberFragmentSource().iter_pages("statement.pdf"))


class TestFirstPageText:

    @patch('pdfprocessor.parsing.sources.fragments.pdfplumber')
    def test_reads_first_page(self, mock_pdfplumber):
        mock_pdfplumber.open.return_value = mock_pdf([mock_page([], text="Transactions in Date Sequence")])
        assert PdfPlumberFragmentSource().first_page_text("a.pdf") == "Transactions in Date Sequence"

    @patch('pdfprocessor.parsing.sources.fragments.pdfplumber')
    def test_empty_document(self, mock_pdfplumber):
        mock_pdfplumber.open.return_value = mock_pdf([])
        assert PdfPlumberFragmentSource().first_page_text("a.pdf") == ""


def test_describe_source():
    assert describe_source("/tmp/a.pdf") == "/tmp/a.pdf"
    assert describe_source(b"%PDF") == "bytes"

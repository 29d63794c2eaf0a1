"""
Fragment Source

Turns a PDF into positioned text fragments, page by page, with pdfplumber.
pdfplumber measures ``top``/``bottom`` from the top of the page; fragments
are converted to the bottom-left origin of PDF user space so that y grows
upwards and the first printed line has the largest y.
"""
import io
from abc import ABC, abstractmethod
from typing import Iterator, List, Tuple

import pdfplumber

from pdfprocessor.common.logging_config import get_logger
from pdfprocessor.common.models import TextFragment
from ..exceptions import InvalidPdfException

logger = get_logger(__name__)

PageFragments = Tuple[int, List[TextFragment]]


def describe_source(source) -> str:
    if isinstance(source, str):
        return source
    return getattr(source, 'name', None) or type(source).__name__


class FragmentSource(ABC):
    """
    Collaborator that yields, per page, every rendered text run with its
    position. Pages come in ascending page number order.
    """

    @abstractmethod
    def iter_pages(self, source) -> Iterator[PageFragments]:
        """Yield (page_number, fragments) for each page, 1-based."""

    @abstractmethod
    def first_page_text(self, source) -> str:
        """Plain text of page 1, used for layout auto-detection."""


class PdfPlumberFragmentSource(FragmentSource):
    """
    pdfplumber implementation. Accepts a path, raw bytes or a binary
    file-like object.
    """

    def __init__(self, x_tolerance: float = 3, y_tolerance: float = 3):
        self.x_tolerance = x_tolerance
        self.y_tolerance = y_tolerance

    def _open(self, source):
        if isinstance(source, (bytes, bytearray)):
            source = io.BytesIO(source)
        elif hasattr(source, 'seek'):
            source.seek(0)
        try:
            return pdfplumber.open(source)
        except Exception as e:
            raise InvalidPdfException(
                f"PDF Read Error: {e}", filename=describe_source(source), details=type(e).__name__
            ) from e

    @staticmethod
    def to_fragment(word: dict, page_height: float, page_number: int) -> TextFragment:
        return TextFragment(
            text=word['text'],
            x=float(word['x0']),
            y=float(page_height) - float(word['bottom']),
            page=page_number,
        )

    def iter_pages(self, source) -> Iterator[PageFragments]:
        pdf = self._open(source)
        with pdf:
            for page_number, page in enumerate(pdf.pages, start=1):
                try:
                    words = page.extract_words(
                        x_tolerance=self.x_tolerance,
                        y_tolerance=self.y_tolerance,
                        keep_blank_chars=False,
                    )
                except Exception as e:
                    raise InvalidPdfException(
                        f"Failed to read page {page_number}: {e}",
                        filename=describe_source(source), details=type(e).__name__,
                    ) from e
                logger.debug("Page fragments extracted", page=page_number, fragments=len(words))
                yield page_number, [self.to_fragment(w, page.height, page_number) for w in words]

    def first_page_text(self, source) -> str:
        pdf = self._open(source)
        with pdf:
            if not pdf.pages:
                return ""
            try:
                return pdf.pages[0].extract_text() or ""
            except Exception as e:
                raise InvalidPdfException(
                    f"Failed to read page 1: {e}", filename=describe_source(source), details=type(e).__name__
                ) from e

"""
Base Classes for Parsing Module
"""
from abc import ABC, abstractmethod

from pdfprocessor.common.models import DocumentResult


class BaseExtractor(ABC):
    """
    Abstract Base Class for statement extractors.

    Returns:
        DocumentResult with the records of one document, per account
    """

    @abstractmethod
    def identify(self, pdf_text: str) -> bool:
        """
        Returns True if this extractor can handle the given PDF text.
        """

    @abstractmethod
    def extract(self, source, file_name: str = None) -> DocumentResult:
        """
        Main entry point. ``source`` is a path, bytes or binary file object.
        """

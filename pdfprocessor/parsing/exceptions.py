"""
Exceptions raised while reading statements and applying layout profiles.
"""


class PdfProcessingException(Exception):
    """Base error for anything that fails while processing a PDF."""

    def __init__(self, message: str, filename: str = None, details: str = None):
        self.filename = filename
        self.details = details
        super().__init__(message)


class InvalidPdfException(PdfProcessingException):
    """Unreadable, corrupt or encrypted PDF: the fragment source could not decode it."""


class ParserException(PdfProcessingException):
    """Raised when a document cannot be parsed with the selected profile."""

    def __init__(self, message: str, profile: str = None, filename: str = None):
        self.profile = profile
        super().__init__(message, filename=filename)


class LayoutConfigError(ValueError):
    """Invalid layout profile definition (bad regex, unknown column, ...)."""


class LayoutNotIdentifiedException(PdfProcessingException):
    """
    Raised when no profile was named and none of the registered layouts
    matched the document.

    The message includes:
    - The filename that failed
    - Sample text that was inspected
    """

    def __init__(self, message: str, filename: str = None, sample_text: str = None):
        self.sample_text = sample_text

        details = []
        if filename:
            details.append(f"File: {filename}")
        if sample_text:
            details.append(f"Sample: {sample_text[:200]}...")

        full_message = f"{message}\n" + "\n".join(details) if details else message
        super().__init__(full_message, filename=filename)

# Sources
from .fragments import FragmentSource, PdfPlumberFragmentSource

__all__ = ['FragmentSource', 'PdfPlumberFragmentSource']

"""
Parsing Module

- Layout profiles (configuration + registry)
- Positional extraction engine (lines, columns, boundaries, continuation, state)
- Fragment source (pdfplumber)
- Pipeline orchestration
"""

# Base classes
from .base import BaseExtractor

# Configuration
from .config.layout import LayoutProfile, ColumnDef
from .config.registry import LayoutRegistry

# Sources
from .sources.fragments import FragmentSource, PdfPlumberFragmentSource

# Extractors
from .extractors.positional import PositionalExtractor

# Pipeline
from .pipeline import ExtractorPipeline

__all__ = [
    # Base
    'BaseExtractor',
    # Config
    'LayoutProfile',
    'ColumnDef',
    'LayoutRegistry',
    # Sources
    'FragmentSource',
    'PdfPlumberFragmentSource',
    # Extractors
    'PositionalExtractor',
    # Pipeline
    'ExtractorPipeline',
]

# Extractors
from .positional import PositionalExtractor

__all__ = ['PositionalExtractor']

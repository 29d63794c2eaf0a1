"""
Column Mapper

Cuts a line into named columns using the x-ranges of a layout profile.
"""
from typing import Dict, Sequence

from pdfprocessor.common.models import Line, TextFragment
from ..config.layout import ColumnDef, LayoutProfile


def text_in_range(fragments: Sequence[TextFragment], x_start: float, x_end: float) -> str:
    """Text of the fragments with x in [x_start, x_end), left to right, space-joined."""
    in_range = sorted((f for f in fragments if x_start <= f.x < x_end), key=lambda f: f.x)
    return " ".join(f.text.strip() for f in in_range if f.text.strip()).strip()


class ColumnMapper:
    """
    Every column scans all fragments independently, so overlapping ranges in
    a profile put the same fragment in more than one column.
    """

    def __init__(self, profile: LayoutProfile):
        self.profile = profile

    def extract_column(self, line: Line, column: ColumnDef) -> str:
        return text_in_range(line.fragments, column.x_start, column.x_end)

    def extract(self, line: Line) -> Dict[str, str]:
        return {col.name: self.extract_column(line, col) for col in self.profile.columns}

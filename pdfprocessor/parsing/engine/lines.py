"""
Line Assembler

Groups the positioned fragments of one page into printed lines.
"""
import math
from typing import Dict, Iterable, List

from pdfprocessor.common.models import Line, TextFragment

DEFAULT_Y_TOLERANCE = 2.0


def bucket_y(y: float, tolerance: float = DEFAULT_Y_TOLERANCE) -> float:
    """Snap y to the lower edge of its tolerance bucket."""
    return round(math.floor(y / tolerance) * tolerance, 6)


def assemble_lines(fragments: Iterable[TextFragment], y_tolerance: float = DEFAULT_Y_TOLERANCE) -> List[Line]:
    """
    Group fragments by y bucket. Lines come out top of page first
    (descending y, PDF origin is bottom-left) and fragments inside a line
    left to right.

    Fragments of two different pages must not be mixed in one call.
    """
    buckets: Dict[float, List[TextFragment]] = {}
    for frag in fragments:
        buckets.setdefault(bucket_y(frag.y, y_tolerance), []).append(frag)

    lines = []
    for y in sorted(buckets, reverse=True):
        # text as tie-breaker keeps the result independent of input order
        ordered = sorted(buckets[y], key=lambda f: (f.x, f.text, f.y))
        lines.append(Line(page=ordered[0].page, y=y, fragments=tuple(ordered)))
    return lines

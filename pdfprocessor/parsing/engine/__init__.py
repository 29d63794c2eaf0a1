# Positional extraction engine
from .lines import assemble_lines
from .columns import ColumnMapper
from .boundaries import Boundary, BoundaryDetector, BoundaryKind
from .continuation import ContinuationMerger
from .heuristics import AmountAssignment, assign_amounts, find_amount_tokens
from .state import ParserState, StateMachine, Transition

__all__ = [
    'assemble_lines',
    'ColumnMapper',
    'Boundary',
    'BoundaryDetector',
    'BoundaryKind',
    'ContinuationMerger',
    'AmountAssignment',
    'assign_amounts',
    'find_amount_tokens',
    'ParserState',
    'StateMachine',
    'Transition',
]

"""
Parser State Machine

Explicit state of one document traversal and the pure transitions over it:
``step(state, line) -> Transition(state', emitted, event)``. Nothing here
touches a PDF, so the whole machine can be exercised with hand-built lines.
"""
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from pdfprocessor.common.models import Line, PendingRecord, Record
from ..config.layout import LayoutProfile
from .boundaries import Boundary, BoundaryDetector, BoundaryKind
from .columns import ColumnMapper
from .continuation import ContinuationMerger, flush

PAGE_END = "page_end"
DOCUMENT_END = "document_end"


@dataclass(frozen=True)
class ParserState:
    current_account_key: Optional[str] = None
    pending: Optional[PendingRecord] = None
    inside_section: bool = False
    last_lead: Optional[str] = None  # lead value inherited by implicit-lead rows

    @property
    def idle(self) -> bool:
        return not self.inside_section


@dataclass(frozen=True)
class Transition:
    state: ParserState
    emitted: Tuple[Tuple[str, Record], ...] = ()
    event: str = ""
    boundary: Optional[Boundary] = None


class StateMachine:
    """
    Transitions of the engine for one layout profile. Holds no per-document
    data, so one instance may serve many documents (and threads).
    """

    def __init__(self, profile: LayoutProfile):
        self.profile = profile
        self.mapper = ColumnMapper(profile)
        self.detector = BoundaryDetector(profile)
        self.merger = ContinuationMerger(profile, self.mapper)

    def initial_state(self) -> ParserState:
        return ParserState(current_account_key=self.profile.default_account_key)

    def step(self, state: ParserState, line: Line) -> Transition:
        # inside the table an account pattern may be a counterparty reference
        header_only = self.profile.account_start_outside_section_only and state.inside_section
        boundary = self.detector.classify(line.text, allow_account_start=not header_only)
        if boundary is not None:
            return self.apply_boundary(state, boundary)
        new_state, emitted, event = self.merger.merge(state, line)
        return Transition(new_state, tuple(emitted), event)

    def apply_boundary(self, state: ParserState, boundary: Boundary) -> Transition:
        kind = boundary.kind

        if kind is BoundaryKind.ACCOUNT_START:
            # the pending record belongs to the account being left
            state, emitted = flush(state)
            state = replace(
                state,
                current_account_key=boundary.account_key,
                inside_section=True if self.profile.account_start_opens_section else state.inside_section,
                last_lead=None,
            )
            return Transition(state, tuple(emitted), kind.value, boundary)

        if kind is BoundaryKind.SECTION_START:
            return Transition(replace(state, inside_section=True), (), kind.value, boundary)

        if kind is BoundaryKind.ACCOUNT_END:
            state, emitted = flush(state)
            if self.profile.account_end_is_terminal:
                state = replace(state, current_account_key=None, inside_section=False, last_lead=None)
            return Transition(state, tuple(emitted), kind.value, boundary)

        if kind is BoundaryKind.SECTION_END:
            state, emitted = flush(state)
            return Transition(replace(state, inside_section=False), tuple(emitted), kind.value, boundary)

        return Transition(state, (), kind.value, boundary)

    def end_of_page(self, state: ParserState) -> Transition:
        if not self.profile.page_break_closes_section:
            return Transition(state, (), PAGE_END)
        state, emitted = flush(state)
        return Transition(replace(state, inside_section=False), tuple(emitted), PAGE_END)

    def end_of_document(self, state: ParserState) -> Transition:
        state, emitted = flush(state)
        return Transition(state, tuple(emitted), DOCUMENT_END)

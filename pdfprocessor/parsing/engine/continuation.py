"""
Continuation Merger

Decides whether a content line opens a new record or continues the pending
one (wrapped descriptions, second lines of two-line rows).
"""
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from pdfprocessor.common.models import Line, PendingRecord, Record
from ..config.layout import LayoutProfile
from .columns import ColumnMapper
from .heuristics import assign_amounts, find_amount_tokens

RECORD_LEAD = "record_lead"
IMPLICIT_LEAD = "implicit_lead"
CONTINUATION = "continuation"
DISCARDED = "discarded"

Emitted = List[Tuple[str, Record]]


def flush(state) -> Tuple[object, Emitted]:
    """Finalize the pending record into the current account and clear it."""
    if state.pending is None:
        return state, []
    emitted = []
    if state.current_account_key is not None:
        emitted.append((state.current_account_key, state.pending.finalize()))
    return replace(state, pending=None), emitted


def _remove_last(text: str, token: str) -> str:
    idx = text.rfind(token)
    if idx == -1:
        return text
    return " ".join((text[:idx] + text[idx + len(token):]).split())


class ContinuationMerger:

    def __init__(self, profile: LayoutProfile, mapper: Optional[ColumnMapper] = None):
        self.profile = profile
        self.mapper = mapper or ColumnMapper(profile)

    def is_lead(self, extraction: Dict[str, str]) -> bool:
        lead_text = extraction.get(self.profile.lead_column, "")
        return bool(lead_text) and self.profile.lead_regex.search(lead_text) is not None

    def merge(self, state, line: Line):
        """
        Returns (new_state, emitted, event). ``state`` is never mutated.
        """
        p = self.profile
        if not state.inside_section or state.current_account_key is None:
            return state, [], DISCARDED

        extraction = self.mapper.extract(line)
        pending = state.pending

        # first lines of a multi-line row always belong to the open record
        if pending is not None and pending.line_count < p.lead_block_lines:
            return replace(state, pending=pending.extend(extraction, p.continuation_columns)), [], CONTINUATION

        if self.is_lead(extraction):
            state, emitted = flush(state)
            record = self.open_record(extraction, line)
            return replace(state, pending=record, last_lead=extraction[p.lead_column]), emitted, RECORD_LEAD

        if (p.implicit_lead_columns and state.last_lead
                and any(extraction.get(c) for c in p.implicit_lead_columns)):
            state, emitted = flush(state)
            extraction[p.lead_column] = state.last_lead
            return replace(state, pending=self.open_record(extraction, line)), emitted, IMPLICIT_LEAD

        if pending is not None:
            return replace(state, pending=pending.extend(extraction, p.continuation_columns)), [], CONTINUATION

        # orphan text: no record to attach it to
        return state, [], DISCARDED

    def open_record(self, extraction: Dict[str, str], line: Line) -> PendingRecord:
        confidence, notes = None, ()
        p = self.profile
        if p.amount_heuristic and p.amount_columns:
            if self.needs_heuristic(extraction):
                assignment = assign_amounts(find_amount_tokens(line.text), p.amount_heuristic)
                confidence, notes = assignment.confidence, (assignment.reason,)
                if assignment.ok:
                    self._apply_assignment(extraction, assignment.values)
        return PendingRecord.open(extraction, page=line.page, confidence=confidence, notes=notes)

    def needs_heuristic(self, extraction: Dict[str, str]) -> bool:
        """
        Amount columns are all empty (amounts drifted into a text column) or
        one of them holds more than one amount (neighbouring bands merged).
        """
        cols = self.profile.amount_columns.values()
        if all(not extraction.get(col) for col in cols):
            return True
        return any(len(find_amount_tokens(extraction.get(col, ""))) > 1 for col in cols)

    def _apply_assignment(self, extraction: Dict[str, str], values: Dict[str, str]) -> None:
        targets = self.profile.amount_columns
        amount_cols = set(targets.values())
        for role, col in targets.items():
            extraction[col] = values.get(role, "")
        # tokens that landed in a text column were moved, drop the copy
        for token in values.values():
            for name in self.profile.column_names:
                if name not in amount_cols and name != self.profile.lead_column and token in extraction.get(name, ""):
                    extraction[name] = _remove_last(extraction[name], token)
                    break

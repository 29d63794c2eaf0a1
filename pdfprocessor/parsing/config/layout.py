"""
Layout Profile Configuration

Dataclasses describing one statement format: column x-ranges, boundary
markers and record-lead pattern. The engine is written once and
parameterized by these profiles.
"""
import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import List, Mapping, Optional, Pattern, Sequence

from ..exceptions import LayoutConfigError

AMOUNT_HEURISTICS = ('value_balance', 'credit_debit_balance')


@dataclass(frozen=True)
class ColumnDef:
    """
    Horizontal band of a statement table.

    Attributes:
        name: Field name written to the record ('date', 'description', ...)
        x_start: Inclusive left edge in PDF units
        x_end: Exclusive right edge in PDF units
    """
    name: str
    x_start: float
    x_end: float

    def contains(self, x: float) -> bool:
        return self.x_start <= x < self.x_end


def _compile(pattern: Optional[str], what: str, profile: str) -> Optional[Pattern]:
    if pattern is None:
        return None
    try:
        return re.compile(pattern)
    except re.error as e:
        raise LayoutConfigError(f"Invalid {what} regex in layout '{profile}': {pattern!r} ({e})")


@dataclass(frozen=True)
class LayoutProfile:
    """
    Configuration for one statement layout. Immutable once built: list
    settings are stored as tuples and the regexes are compiled up front.

    Marker lists are ordered: the first pattern that matches wins, so a more
    specific marker must be declared before a generic one.

    Attributes:
        name: Registry name (e.g. "itau_cash2")
        bank_id: Issuing institution label
        columns: Ordered column bands
        lead_column: Column the record-lead pattern is applied to
        record_lead_pattern: Regex identifying the first line of a record
        keywords: Strings that must all appear on page 1 for auto-detection
        account_start_pattern: Regex of a new account block; its groups feed
            account_key_template
        account_end_pattern: Regex of a closing/subtotal line of an account
        account_end_is_terminal: True when the account-end marker really
            ends the account; False when it only pauses it (subtotal)
        account_start_opens_section: Account start also opens the table
        account_start_outside_section_only: Only look for the account start
            outside the table, where the statement header is printed
        page_break_closes_section: Flush and close the section at each page end
        default_account_key: Key active from the first line (single-account formats)
        continuation_columns: Columns continuation lines may append to (None = all)
        lead_block_lines: Physical lines that always belong to a new record
        implicit_lead_columns: Non-lead lines with text here open a record
            inheriting the last lead value
        amount_heuristic: None, 'value_balance' or 'credit_debit_balance'
        amount_columns: Heuristic role -> column name
    """
    name: str
    bank_id: str
    columns: Sequence[ColumnDef]
    lead_column: str
    record_lead_pattern: str
    keywords: Sequence[str] = ()
    section_start_markers: Sequence[str] = ()
    section_end_markers: Sequence[str] = ()
    header_markers: Sequence[str] = ()
    account_start_pattern: Optional[str] = None
    account_end_pattern: Optional[str] = None
    account_key_template: str = "{0}_{1}"
    default_account_key: Optional[str] = None
    account_start_opens_section: bool = True
    account_start_outside_section_only: bool = False
    account_end_is_terminal: bool = False
    page_break_closes_section: bool = False
    continuation_columns: Optional[Sequence[str]] = None
    lead_block_lines: int = 1
    implicit_lead_columns: Sequence[str] = ()
    amount_heuristic: Optional[str] = None
    amount_columns: Mapping[str, str] = field(default_factory=dict)
    y_tolerance: float = 2.0

    def _freeze(self, name: str, value) -> None:
        object.__setattr__(self, name, value)

    def __post_init__(self):
        self._freeze('columns', tuple(c if isinstance(c, ColumnDef) else ColumnDef(**c) for c in self.columns))
        for name in ('keywords', 'section_start_markers', 'section_end_markers',
                     'header_markers', 'implicit_lead_columns'):
            self._freeze(name, tuple(getattr(self, name)))
        if self.continuation_columns is not None:
            self._freeze('continuation_columns', tuple(self.continuation_columns))
        self._freeze('amount_columns', MappingProxyType(dict(self.amount_columns)))

        names = self.column_names
        if not names:
            raise LayoutConfigError(f"Layout '{self.name}' defines no columns")
        if len(set(names)) != len(names):
            raise LayoutConfigError(f"Layout '{self.name}' has duplicated column names")
        for col in self.columns:
            if col.x_end <= col.x_start:
                raise LayoutConfigError(f"Column '{col.name}' of '{self.name}' has an empty x-range")

        referenced = [self.lead_column]
        referenced += list(self.continuation_columns or [])
        referenced += list(self.implicit_lead_columns)
        referenced += list(self.amount_columns.values())
        unknown = [c for c in referenced if c not in names]
        if unknown:
            raise LayoutConfigError(f"Layout '{self.name}' references unknown columns: {unknown}")

        if self.amount_heuristic is not None and self.amount_heuristic not in AMOUNT_HEURISTICS:
            raise LayoutConfigError(f"Unknown amount heuristic '{self.amount_heuristic}'")
        if self.lead_block_lines < 1:
            raise LayoutConfigError("lead_block_lines must be >= 1")
        if self.y_tolerance <= 0:
            raise LayoutConfigError("y_tolerance must be positive")

        self._freeze('lead_regex', _compile(self.record_lead_pattern, 'record lead', self.name))
        self._freeze('section_start_regexes',
                     tuple(_compile(p, 'section start', self.name) for p in self.section_start_markers))
        self._freeze('section_end_regexes',
                     tuple(_compile(p, 'section end', self.name) for p in self.section_end_markers))
        self._freeze('header_regexes', tuple(_compile(p, 'header', self.name) for p in self.header_markers))
        self._freeze('account_start_regex', _compile(self.account_start_pattern, 'account start', self.name))
        self._freeze('account_end_regex', _compile(self.account_end_pattern, 'account end', self.name))

    @property
    def column_names(self) -> List[str]:
        return [c.name for c in self.columns]

    def to_dict(self) -> dict:
        """Serializable form, the same shape the registry loads from JSON."""
        return {
            'name': self.name,
            'bank_id': self.bank_id,
            'columns': [{'name': c.name, 'x_start': c.x_start, 'x_end': c.x_end} for c in self.columns],
            'lead_column': self.lead_column,
            'record_lead_pattern': self.record_lead_pattern,
            'keywords': list(self.keywords),
            'section_start_markers': list(self.section_start_markers),
            'section_end_markers': list(self.section_end_markers),
            'header_markers': list(self.header_markers),
            'account_start_pattern': self.account_start_pattern,
            'account_end_pattern': self.account_end_pattern,
            'account_key_template': self.account_key_template,
            'default_account_key': self.default_account_key,
            'account_start_opens_section': self.account_start_opens_section,
            'account_start_outside_section_only': self.account_start_outside_section_only,
            'account_end_is_terminal': self.account_end_is_terminal,
            'page_break_closes_section': self.page_break_closes_section,
            'continuation_columns': (list(self.continuation_columns)
                                     if self.continuation_columns is not None else None),
            'lead_block_lines': self.lead_block_lines,
            'implicit_lead_columns': list(self.implicit_lead_columns),
            'amount_heuristic': self.amount_heuristic,
            'amount_columns': dict(self.amount_columns),
            'y_tolerance': self.y_tolerance,
        }

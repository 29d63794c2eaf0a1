"""
Boundary Detector

Recognizes control lines (account switches, table start/end, repeated
column headers) from the plain text of a line, independent of columns.
"""
import enum
from dataclasses import dataclass
from typing import List, Optional, Pattern

from ..config.layout import LayoutProfile


class BoundaryKind(enum.Enum):
    ACCOUNT_START = "account_start"
    SECTION_START = "section_start"
    ACCOUNT_END = "account_end"
    SECTION_END = "section_end"
    HEADER = "header"


@dataclass(frozen=True)
class Boundary:
    kind: BoundaryKind
    marker: str
    account_key: Optional[str] = None


def first_match(regexes: List[Pattern], text: str) -> Optional[Pattern]:
    """First pattern (in declaration order) found in text."""
    for regex in regexes:
        if regex.search(text):
            return regex
    return None


def build_account_key(template: str, groups) -> str:
    """Format the account key, collapsing whitespace inside each group."""
    cleaned = [" ".join((g or "").split()) for g in groups]
    return template.format(*cleaned)


class BoundaryDetector:
    """
    Priority per line: account start, section start, account/section end,
    header noise. The first category that matches decides.
    """

    def __init__(self, profile: LayoutProfile):
        self.profile = profile

    def account_key_for(self, match) -> str:
        groups = match.groups()
        if not groups:
            return " ".join(match.group(0).split())
        try:
            return build_account_key(self.profile.account_key_template, groups)
        except (IndexError, KeyError):
            return "_".join(" ".join((g or "").split()) for g in groups)

    def classify(self, text: str, allow_account_start: bool = True) -> Optional[Boundary]:
        """
        Boundary of a line, or None for table content. With
        ``allow_account_start`` False an account-start match is ignored and
        the lower categories are tried instead.
        """
        p = self.profile
        if not text:
            return None

        if allow_account_start and p.account_start_regex is not None:
            m = p.account_start_regex.search(text)
            if m:
                return Boundary(BoundaryKind.ACCOUNT_START, p.account_start_regex.pattern, self.account_key_for(m))

        regex = first_match(p.section_start_regexes, text)
        if regex is not None:
            return Boundary(BoundaryKind.SECTION_START, regex.pattern)

        if p.account_end_regex is not None and p.account_end_regex.search(text):
            return Boundary(BoundaryKind.ACCOUNT_END, p.account_end_regex.pattern)

        regex = first_match(p.section_end_regexes, text)
        if regex is not None:
            return Boundary(BoundaryKind.SECTION_END, regex.pattern)

        regex = first_match(p.header_regexes, text)
        if regex is not None:
            return Boundary(BoundaryKind.HEADER, regex.pattern)

        return None

"""
Amount token heuristics.

Some layouts only tell "value vs. balance" or "credit vs. debit" apart by the
position of the rightmost numeric tokens of a line. This is a heuristic, not
a parser: every assignment carries a confidence and the reason it was made,
and callers keep the raw strings (no numeric conversion happens here).

Confidence levels:
    high    the token count matches the expected shape exactly
    medium  extra tokens were ignored, or a trailing minus decided the role
    low     a single unsigned token whose role is a guess
    failed  nothing usable; no values are assigned
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List

# 1,234.56 | 1.234,56 | -12.00 | 1.234,56- ; two decimals required so that
# dates (01/02/2024, 01.02.24) and quantities never qualify
AMOUNT_TOKEN_RE = re.compile(r"(?<![\w.,/])-?(?:\d{1,3}(?:[.,]\d{3})+|\d+)[.,]\d{2}-?(?![\w.,/])")

VALUE_BALANCE = 'value_balance'
CREDIT_DEBIT_BALANCE = 'credit_debit_balance'


@dataclass(frozen=True)
class AmountAssignment:
    values: Dict[str, str] = field(default_factory=dict)
    confidence: str = 'failed'
    reason: str = ''

    @property
    def ok(self) -> bool:
        return self.confidence != 'failed'


def find_amount_tokens(text: str) -> List[str]:
    """Monetary-looking tokens of a line, left to right."""
    if not text:
        return []
    return [m.group(0) for m in AMOUNT_TOKEN_RE.finditer(text)]


def is_negative(token: str) -> bool:
    return token.startswith('-') or token.endswith('-')


def _value_balance(tokens: List[str]) -> AmountAssignment:
    if len(tokens) < 2:
        return AmountAssignment(reason=f"value/balance needs two amount tokens, found {len(tokens)}")
    values = {'value': tokens[-2], 'balance': tokens[-1]}
    if len(tokens) == 2:
        return AmountAssignment(values, 'high', "last two amount tokens taken as value and balance")
    return AmountAssignment(values, 'medium', f"{len(tokens) - 2} leading amount token(s) ignored")


def _credit_debit_balance(tokens: List[str]) -> AmountAssignment:
    if not tokens:
        return AmountAssignment(reason="no amount tokens")

    if len(tokens) == 1:
        token = tokens[0]
        if is_negative(token):
            return AmountAssignment({'debit': token}, 'medium', "single signed token taken as debit")
        return AmountAssignment({'credit': token}, 'low', "single unsigned token taken as credit, may be a balance")

    values = {'balance': tokens[-1]}
    for token in tokens[:-1]:
        role = 'debit' if is_negative(token) else 'credit'
        values.setdefault(role, token)

    if len(tokens) == 2:
        return AmountAssignment(values, 'high', "rightmost token taken as balance, sign decides credit/debit")
    return AmountAssignment(values, 'medium', f"{len(tokens)} amount tokens, first credit/debit kept")


def assign_amounts(tokens: List[str], strategy: str) -> AmountAssignment:
    """Assign amount roles to tokens. Never raises; unknown strategies fail softly."""
    if strategy == VALUE_BALANCE:
        return _value_balance(tokens)
    if strategy == CREDIT_DEBIT_BALANCE:
        return _credit_debit_balance(tokens)
    return AmountAssignment(reason=f"unknown amount heuristic '{strategy}'")

"""
Shared fixtures: hand-built fragments, lines and layout profiles, so the
engine can be exercised without a PDF.
"""
import pytest

from pdfprocessor.common.models import Line, TextFragment
from pdfprocessor.parsing.config.layout import LayoutProfile

# x positions inside the columns of the statement profile below
X_DATE, X_DESC, X_VALUE, X_BALANCE = 10, 100, 320, 420


def build_line(page, y, *cells):
    """cells: (x, text) pairs."""
    return Line(page=page, y=y, fragments=tuple(TextFragment(t, x, y, page) for x, t in cells))


def text_line(page, y, text):
    """A control line printed in the description band (markers, headers)."""
    return build_line(page, y, (X_DESC, text))


def txn_line(page, y, date="", desc="", value="", balance=""):
    cells = [(X_DATE, date), (X_DESC, desc), (X_VALUE, value), (X_BALANCE, balance)]
    return build_line(page, y, *[(x, t) for x, t in cells if t])


def statement_profile(**overrides):
    data = dict(
        name="test_statement",
        bank_id="Test Bank",
        keywords=["Test Bank", "Statement"],
        columns=[
            {"name": "date", "x_start": 0, "x_end": 60},
            {"name": "description", "x_start": 60, "x_end": 300},
            {"name": "value", "x_start": 300, "x_end": 400},
            {"name": "balance", "x_start": 400, "x_end": 500},
        ],
        lead_column="date",
        record_lead_pattern=r"^\d{2}/\d{2}/\d{4}",
        account_start_pattern=r"Opening Balance Account (\d+) ([A-Z]{3})",
        account_end_pattern=r"Closing Balance",
        section_start_markers=["Cash Transactions"],
        section_end_markers=["End of Transactions"],
        header_markers=[r"Date\s+Description"],
        continuation_columns=["description"],
    )
    data.update(overrides)
    return LayoutProfile(**data)


@pytest.fixture
def profile():
    """Multi-account profile: account start opens the table, subtotal end."""
    return statement_profile()


@pytest.fixture
def profile_factory():
    return statement_profile


@pytest.fixture
def line_factory():
    return build_line


@pytest.fixture
def txn():
    return txn_line


@pytest.fixture
def marker():
    return text_line

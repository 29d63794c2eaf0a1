"""
Unit Tests for the Boundary Detector

Covers marker priority, declaration order inside a category and account key
derivation.
"""
import pytest

from pdfprocessor.parsing.engine.boundaries import BoundaryDetector, BoundaryKind, build_account_key


@pytest.fixture
def detector(profile):
    return BoundaryDetector(profile)


class TestClassify:

    def test_content_line_is_not_a_boundary(self, detector):
        assert detector.classify("02/01/2024 Wire in 1,000.00") is None
        assert detector.classify("") is None

    def test_account_start_derives_key(self, detector):
        boundary = detector.classify("Opening Balance Account 1001 USD 10,000.00")
        assert boundary.kind is BoundaryKind.ACCOUNT_START
        assert boundary.account_key == "1001_USD"

    def test_section_start(self, detector):
        boundary = detector.classify("Cash Transactions")
        assert boundary.kind is BoundaryKind.SECTION_START
        assert boundary.marker == "Cash Transactions"

    def test_account_end_and_section_end(self, detector):
        assert detector.classify("Closing Balance 9,000.00").kind is BoundaryKind.ACCOUNT_END
        assert detector.classify("End of Transactions").kind is BoundaryKind.SECTION_END

    def test_header(self, detector):
        assert detector.classify("Date   Description   Value").kind is BoundaryKind.HEADER

    def test_account_start_can_be_skipped(self, detector):
        text = "Cash Transactions - Opening Balance Account 2002 EUR"
        assert detector.classify("Opening Balance Account 2002 EUR", allow_account_start=False) is None
        assert detector.classify(text, allow_account_start=False).kind is BoundaryKind.SECTION_START


class TestPriority:
    """A line matching several categories resolves to the highest one."""

    def test_account_start_beats_section_start(self, detector):
        text = "Cash Transactions - Opening Balance Account 2002 EUR"
        boundary = detector.classify(text)
        assert boundary.kind is BoundaryKind.ACCOUNT_START
        assert boundary.account_key == "2002_EUR"

    def test_section_start_beats_end_and_header(self, detector):
        assert detector.classify("Cash Transactions / Closing Balance").kind is BoundaryKind.SECTION_START

    def test_account_end_beats_section_end(self, detector):
        assert detector.classify("Closing Balance - End of Transactions").kind is BoundaryKind.ACCOUNT_END

    def test_end_beats_header(self, detector):
        assert detector.classify("Date Description Closing Balance").kind is BoundaryKind.ACCOUNT_END

    def test_first_declared_marker_wins(self, profile_factory):
        profile = profile_factory(section_start_markers=["Transactions in Date", "Transactions"])
        boundary = BoundaryDetector(profile).classify("Transactions in Date Sequence")
        assert boundary.marker == "Transactions in Date"


class TestAccountKey:

    def test_whitespace_collapsed(self):
        assert build_account_key("{0}", ["CH12  3456\n7890"]) == "CH12 3456 7890"

    def test_template_with_labels(self, profile_factory):
        profile = profile_factory(
            account_start_pattern=r"(?i)ag\s+(\d+)\s+cc\s+([0-9\-]+)",
            account_key_template="AG {0} - CC {1}",
        )
        boundary = BoundaryDetector(profile).classify("Ag 1234 cc 56789-0 Movimentação")
        assert boundary.account_key == "AG 1234 - CC 56789-0"

    def test_pattern_without_groups_uses_whole_match(self, profile_factory):
        profile = profile_factory(account_start_pattern=r"PORTFOLIO \d+")
        assert BoundaryDetector(profile).classify("PORTFOLIO 77 summary").account_key == "PORTFOLIO 77"

    def test_template_mismatch_falls_back_to_joined_groups(self, profile_factory):
        profile = profile_factory(account_start_pattern=r"Account (\d+)", account_key_template="{0}-{1}")
        assert BoundaryDetector(profile).classify("Account 42").account_key == "42"

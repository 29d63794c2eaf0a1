"""
Unit Tests for ExcelExporter

The workbook is inspected as the zip archive it is, no spreadsheet reader
needed.
"""
import io
import re
import zipfile

import pytest

from pdfprocessor.common.models import ConsolidatedResult, FailedDocument, Record
from pdfprocessor.exporters.excel_exporter import ExcelExporter, sanitize_sheet_name


def sheet_names(content: bytes):
    with zipfile.ZipFile(io.BytesIO(content)) as zf:
        workbook = zf.read("xl/workbook.xml").decode("utf-8")
    return re.findall(r'<sheet name="([^"]+)"', workbook)


def shared_strings(content: bytes) -> str:
    with zipfile.ZipFile(io.BytesIO(content)) as zf:
        if "xl/sharedStrings.xml" not in zf.namelist():
            return ""
        return zf.read("xl/sharedStrings.xml").decode("utf-8")


def record(**fields):
    return Record(fields=fields, page=1)


@pytest.fixture
def consolidated():
    return ConsolidatedResult(accounts={
        "1001_USD": [
            record(date="02/01/2024", description="Wire in", value="1,000.00", balance="5,000.00"),
            record(date="03/01/2024", description="Fee", value="-5.00", balance="4,995.00"),
        ],
        "2002_EUR": [record(date="04/01/2024", description="Interest", value="1.20", balance="10.20")],
    })


class TestSanitizeSheetName:

    def test_invalid_characters_replaced(self):
        assert sanitize_sheet_name("AG 1/2 [cc]:*?", set()) == "AG 1_2 _cc____"

    def test_truncated_to_31(self):
        assert len(sanitize_sheet_name("CH93 0076 2011 6238 5295 7 EXTRA LONG", set())) == 31

    def test_deduplicated_case_insensitive(self):
        used = set()
        assert sanitize_sheet_name("Conta", used) == "Conta"
        assert sanitize_sheet_name("conta", used) == "conta (2)"
        assert sanitize_sheet_name("Conta", used) == "Conta (3)"

    def test_dedup_suffix_respects_limit(self):
        used = set()
        name = "X" * 40
        first = sanitize_sheet_name(name, used)
        second = sanitize_sheet_name(name, used)
        assert len(second) == 31 and second.endswith(" (2)")
        assert first != second

    def test_blank_name(self):
        assert sanitize_sheet_name("  ", set()) == "Conta"


class TestGenerate:

    def test_one_sheet_per_account(self, consolidated, profile):
        content = ExcelExporter().generate(consolidated, profile)

        assert content[:2] == b"PK"
        assert sheet_names(content) == ["1001_USD", "2002_EUR"]
        strings = shared_strings(content)
        for header in profile.column_names:
            assert f">{header}<" in strings
        assert "Wire in" in strings

    def test_warning_sheet_when_empty(self, profile):
        content = ExcelExporter().generate(ConsolidatedResult(), profile)

        assert sheet_names(content) == ["Aviso"]
        assert "Nenhum lançamento encontrado" in shared_strings(content)

    def test_failed_files_sheet(self, consolidated, profile):
        consolidated.failed.append(FailedDocument("bad.pdf", "PDF Read Error", "InvalidPdfException"))
        content = ExcelExporter().generate(consolidated, profile)

        assert sheet_names(content)[-1] == "Arquivos com erro"
        assert "bad.pdf" in shared_strings(content)

    def test_confidence_columns_follow_heuristic(self, consolidated, profile_factory):
        plain = ExcelExporter().generate(consolidated, profile_factory())
        assert ">confidence<" not in shared_strings(plain)

        with_heuristic = profile_factory(
            amount_heuristic="value_balance",
            amount_columns={"value": "value", "balance": "balance"},
        )
        content = ExcelExporter().generate(consolidated, with_heuristic)
        assert ">confidence<" in shared_strings(content)

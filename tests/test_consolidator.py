"""
Unit Tests for TransactionConsolidator
"""
from pdfprocessor.common.models import DocumentResult, FailedDocument, Record
from pdfprocessor.core.consolidator import TransactionConsolidator


def doc(name, **accounts):
    result = DocumentResult(source_file=name, profile="test")
    for key, descriptions in accounts.items():
        result.open_account(key)
        for desc in descriptions:
            result.add(key, Record(fields={"description": desc}, page=1))
    return result


class TestConsolidate:

    def test_concatenates_in_input_order(self):
        f1 = doc("f1.pdf", K=["a", "b"])
        f2 = doc("f2.pdf", K=["c"])
        consolidated = TransactionConsolidator.consolidate([("f1.pdf", f1), ("f2.pdf", f2)])

        assert consolidated.accounts["K"] == f1.accounts["K"] + f2.accounts["K"]

    def test_no_deduplication(self):
        f1 = doc("jan.pdf", K=["same"])
        f2 = doc("jan_copy.pdf", K=["same"])
        consolidated = TransactionConsolidator.consolidate([("jan.pdf", f1), ("jan_copy.pdf", f2)])

        assert len(consolidated.accounts["K"]) == 2

    def test_counts_and_origins(self):
        consolidated = TransactionConsolidator.consolidate([
            ("f1.pdf", doc("f1.pdf", A=["1", "2"], B=["3"])),
            ("f2.pdf", doc("f2.pdf", A=["4"])),
        ])

        assert consolidated.counts == {("A", "f1.pdf"): 2, ("B", "f1.pdf"): 1, ("A", "f2.pdf"): 1}
        assert consolidated.origins["A"] == ["f1.pdf", "f1.pdf", "f2.pdf"]
        assert consolidated.record_count == 4
        assert list(consolidated.accounts) == ["A", "B"]

    def test_failed_documents_collected(self):
        failure = FailedDocument("f2.pdf", "PDF Read Error", "InvalidPdfException")
        consolidated = TransactionConsolidator.consolidate([
            ("f1.pdf", doc("f1.pdf", A=["1"])),
            ("f2.pdf", failure),
            ("f3.pdf", doc("f3.pdf", A=["2"])),
        ])

        assert consolidated.failed == [failure]
        assert [r.get("description") for r in consolidated.accounts["A"]] == ["1", "2"]

    def test_empty_input(self):
        consolidated = TransactionConsolidator.consolidate([])
        assert consolidated.accounts == {} and consolidated.record_count == 0

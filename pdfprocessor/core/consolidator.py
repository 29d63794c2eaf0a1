from typing import Iterable, Tuple, Union

from pdfprocessor.common.logging_config import get_logger
from pdfprocessor.common.models import ConsolidatedResult, DocumentResult, FailedDocument

logger = get_logger(__name__)

BatchItem = Tuple[str, Union[DocumentResult, FailedDocument]]


class TransactionConsolidator:
    @staticmethod
    def consolidate(results: Iterable[BatchItem]) -> ConsolidatedResult:
        """
        Merge per-document results by account key, in input order.

        No deduplication: two files covering the same period both contribute
        their records, the source PDFs are not assumed to be disjoint.
        Failed documents are carried along for reporting.
        """
        consolidated = ConsolidatedResult()

        for file_name, result in results:
            if isinstance(result, FailedDocument):
                consolidated.failed.append(result)
                logger.warning(f"Skipping failed document: {file_name}", error=result.error)
                continue

            for account_key, records in result.accounts.items():
                bucket = consolidated.accounts.setdefault(account_key, [])
                bucket.extend(records)
                consolidated.origins.setdefault(account_key, []).extend([file_name] * len(records))
                key = (account_key, file_name)
                consolidated.counts[key] = consolidated.counts.get(key, 0) + len(records)
                logger.info(f"{account_key}: {len(records)} record(s)", source_file=file_name)

        logger.info(
            f"Total: {len(consolidated.accounts)} account(s), {consolidated.record_count} record(s)",
            failed_files=len(consolidated.failed),
        )
        return consolidated

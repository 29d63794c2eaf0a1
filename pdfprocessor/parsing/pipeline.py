"""
Extractor Pipeline

Orchestrates extraction: profile resolution (explicit name, or detection
from page 1 text), per-document parsing, and parallel batch processing with
failures isolated per document.
"""
import os
from concurrent.futures import ThreadPoolExecutor
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from pdfprocessor.common.logging_config import current_context, get_logger, log_context
from pdfprocessor.common.models import ConsolidatedResult, DocumentResult, FailedDocument
from pdfprocessor.core.consolidator import TransactionConsolidator
from .config.layout import LayoutProfile
from .config.registry import LayoutRegistry
from .exceptions import LayoutNotIdentifiedException, ParserException
from .extractors.positional import PositionalExtractor
from .sources.fragments import FragmentSource, PdfPlumberFragmentSource, describe_source

logger = get_logger(__name__)

MAX_WORKERS_ENV = "PDFPROCESSOR_MAX_WORKERS"
DEFAULT_MAX_WORKERS = 4

ProfileRef = Union[str, LayoutProfile, None]


def default_max_workers() -> int:
    try:
        return max(1, int(os.getenv(MAX_WORKERS_ENV, DEFAULT_MAX_WORKERS)))
    except ValueError:
        return DEFAULT_MAX_WORKERS


class ExtractorPipeline:
    """
    Main orchestrator for statement extraction.

    Handles:
    - Profile selection (explicit, or detected from the first page)
    - Per-document extraction with PositionalExtractor
    - Batch extraction on a worker pool, one independent parser per document
    - Consolidation of the batch per account
    """

    def __init__(self, registry: LayoutRegistry, fragment_source: Optional[FragmentSource] = None,
                 max_workers: Optional[int] = None):
        """
        Initialize pipeline with layout registry.

        Args:
            registry: LayoutRegistry with available layout profiles
            fragment_source: PDF text extraction collaborator
            max_workers: Upper bound of concurrent documents in a batch
        """
        self.registry = registry
        self.fragment_source = fragment_source or PdfPlumberFragmentSource()
        self.max_workers = max_workers or default_max_workers()

    def resolve_profile(self, profile: ProfileRef, source=None, file_name: str = None) -> LayoutProfile:
        """
        Raises:
            ParserException: unknown profile name
            LayoutNotIdentifiedException: no profile given and none detected
        """
        if isinstance(profile, LayoutProfile):
            return profile
        if profile:
            layout = self.registry.get_by_name(profile)
            if layout is None:
                raise ParserException(f"Unknown layout profile: {profile}", profile=profile, filename=file_name)
            return layout

        text = self.fragment_source.first_page_text(source)
        layout = self.registry.detect(text)
        if layout is None:
            raise LayoutNotIdentifiedException("Layout not detected.", filename=file_name, sample_text=text)
        logger.info(f"Layout detected: {layout.name}", layout_owner=layout.bank_id, source_file=file_name)
        return layout

    def process_file(self, source, profile: ProfileRef = None, file_name: str = None) -> DocumentResult:
        """
        Parse one document. Errors propagate; batch callers isolate them.

        Args:
            source: Path, bytes or binary file object
            profile: Profile name or instance; None to auto-detect
            file_name: Name reported in results and logs
        """
        name = file_name or describe_source(source)
        layout = self.resolve_profile(profile, source, name)
        logger.info(f"Processing {name}", profile=layout.name)
        extractor = PositionalExtractor(layout, self.fragment_source)
        return extractor.extract(source, name)

    def _process_safely(self, name: str, source, profile: ProfileRef,
                        context: Optional[dict] = None) -> Union[DocumentResult, FailedDocument]:
        """
        ``context`` holds the log context of the thread that started the
        batch; worker threads log under it plus the document name.
        """
        with log_context(**dict(context or {}, source_file=name)):
            try:
                return self.process_file(source, profile, name)
            except Exception as e:
                # one bad file must not sink the batch
                logger.error(f"Error parsing {name}: {e}", exc_info=True)
                return FailedDocument(source_file=name, error=str(e), error_type=type(e).__name__)

    def extract_batch(self, files: Sequence[Tuple[str, object]], profile: ProfileRef = None,
                      context: Optional[dict] = None) -> List[Tuple[str, Union[DocumentResult, FailedDocument]]]:
        """
        Parse every (file_name, source) pair, up to ``max_workers`` at a time.
        Results keep the input order regardless of completion order.

        Args:
            context: Log context for the workers (default: the calling thread's)
        """
        if not files:
            return []
        workers = min(self.max_workers, len(files))
        logger.info(f"Processing {len(files)} PDF(s)", workers=workers)

        if context is None:
            context = current_context()
        if workers == 1:
            return [(name, self._process_safely(name, src, profile, context)) for name, src in files]

        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [executor.submit(self._process_safely, name, src, profile, context) for name, src in files]
            # joined before consolidation, never interleaved with it
            return [(name, fut.result()) for (name, _), fut in zip(files, futures)]

    def process_batch(self, files: Iterable[Tuple[str, object]], profile: ProfileRef = None,
                      context: Optional[dict] = None) -> ConsolidatedResult:
        """Parse a batch and consolidate it per account. Never raises for a bad document."""
        results = self.extract_batch(list(files), profile, context)
        return TransactionConsolidator.consolidate(results)

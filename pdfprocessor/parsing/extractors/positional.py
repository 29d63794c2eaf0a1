"""
Positional Extractor

Drives the engine over one document: pages in ascending order, lines top to
bottom, every line through the state machine, emitted records into the
DocumentResult.
"""
from typing import Iterable, List, Optional, Tuple

from pdfprocessor.common.logging_config import get_logger
from pdfprocessor.common.models import DocumentResult, Line, TextFragment
from ..base import BaseExtractor
from ..config.layout import LayoutProfile
from ..engine.boundaries import BoundaryKind
from ..engine.lines import assemble_lines
from ..engine.state import ParserState, StateMachine, Transition
from ..sources.fragments import FragmentSource, PdfPlumberFragmentSource, describe_source

logger = get_logger(__name__)


class PositionalExtractor(BaseExtractor):
    """
    Layout-profile driven extractor. One instance per profile; every call to
    ``extract`` starts from a fresh ParserState, so concurrent calls on
    different documents share nothing mutable.
    """

    def __init__(self, profile: LayoutProfile, fragment_source: Optional[FragmentSource] = None):
        """
        Args:
            profile: Layout profile of the statement format
            fragment_source: PDF text extraction collaborator (pdfplumber by default)
        """
        self.profile = profile
        self.fragment_source = fragment_source or PdfPlumberFragmentSource()
        self.machine = StateMachine(profile)

    def identify(self, pdf_text: str) -> bool:
        """Check if this extractor can handle the PDF based on keywords."""
        return bool(self.profile.keywords) and all(k in pdf_text for k in self.profile.keywords)

    def extract(self, source, file_name: str = None) -> DocumentResult:
        """
        Extract records from a PDF.

        Raises:
            InvalidPdfException: the fragment source could not read the PDF
        """
        name = file_name or describe_source(source)
        return self.extract_from_pages(self.fragment_source.iter_pages(source), name)

    def extract_from_pages(self, pages: Iterable[Tuple[int, List[TextFragment]]], file_name: str) -> DocumentResult:
        """
        Parse already extracted fragments, given as (page_number, fragments)
        pairs in page order.
        """
        result = DocumentResult(source_file=file_name, profile=self.profile.name)
        state = self.machine.initial_state()

        for page_number, fragments in pages:
            lines = assemble_lines(fragments, self.profile.y_tolerance)
            if not lines:
                logger.warning("Page yielded no usable lines, skipped.", page=page_number, source_file=file_name)
                result.pages_skipped.append(page_number)
                continue
            state = self.parse_lines(lines, state, result)
            state = self._collect(self.machine.end_of_page(state), result)

        state = self._collect(self.machine.end_of_document(state), result)

        if result.is_empty:
            logger.warning(
                "No records found. Layout markers may not match this document.",
                source_file=file_name, profile=self.profile.name, accounts_seen=list(result.accounts),
            )
        else:
            for account_key, records in result.accounts.items():
                logger.info(f"{account_key}: {len(records)} record(s)", source_file=file_name)
        return result

    def parse_lines(self, lines: Iterable[Line], state: ParserState, result: DocumentResult) -> ParserState:
        for line in lines:
            state = self._collect(self.machine.step(state, line), result)
        return state

    def _collect(self, transition: Transition, result: DocumentResult) -> ParserState:
        for account_key, record in transition.emitted:
            result.add(account_key, record)

        boundary = transition.boundary
        if boundary is not None and boundary.kind is BoundaryKind.ACCOUNT_START:
            if boundary.account_key in result.accounts:
                logger.debug(f"Continuing account: {boundary.account_key}", source_file=result.source_file)
            else:
                logger.info(f"New account: {boundary.account_key}", source_file=result.source_file)
            result.open_account(boundary.account_key)
        elif boundary is not None and boundary.kind is not BoundaryKind.HEADER:
            logger.debug(f"Boundary: {boundary.kind.value}", marker=boundary.marker,
                         account=transition.state.current_account_key)
        return transition.state

import threading
from typing import Optional

from pdfprocessor.common.logging_config import get_logger
from pdfprocessor.parsing.config.registry import LayoutRegistry
from pdfprocessor.parsing.pipeline import ExtractorPipeline

logger = get_logger("api.state")


class PipelineHolder:
    """Builds the layout registry and pipeline once, on first use, for all requests."""

    def __init__(self):
        self._lock = threading.Lock()
        self._pipeline: Optional[ExtractorPipeline] = None

    def get(self) -> ExtractorPipeline:
        with self._lock:
            if self._pipeline is None:
                registry = LayoutRegistry()
                logger.info("Layout registry loaded", layouts=registry.list_layouts())
                self._pipeline = ExtractorPipeline(registry)
            return self._pipeline


# Global instance
pipeline_holder = PipelineHolder()


def get_pipeline() -> ExtractorPipeline:
    """
    FastAPI dependency returning the shared pipeline.
    Import this in endpoints instead of importing from main.py to avoid circular imports.
    """
    return pipeline_holder.get()

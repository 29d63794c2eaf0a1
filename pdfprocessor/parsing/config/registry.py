"""
Layout Registry

Manages loading and detection of layout profiles from JSON configuration files.
"""
import os
import json
from typing import List, Optional

from pdfprocessor.common.logging_config import get_logger
from ..exceptions import LayoutConfigError
from .layout import LayoutProfile

logger = get_logger(__name__)

LAYOUTS_DIR_ENV = "PDFPROCESSOR_LAYOUTS_DIR"
DEFAULT_LAYOUTS_DIR = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), 'layouts')


class LayoutRegistry:
    """
    Registry for statement layout profiles.

    Loads profile configurations from JSON files and provides
    automatic detection based on PDF text content.
    """

    def __init__(self, layouts_dir: Optional[str] = None):
        """
        Initialize registry with path to layouts directory.

        Args:
            layouts_dir: Directory containing .json layout files. Defaults to
                PDFPROCESSOR_LAYOUTS_DIR, then the packaged layouts.
        """
        self.layouts_dir = layouts_dir or os.getenv(LAYOUTS_DIR_ENV) or DEFAULT_LAYOUTS_DIR
        self.layouts: List[LayoutProfile] = []
        self._load_layouts()

    def _load_layouts(self) -> None:
        """Scans the directory and loads all .json layouts, in file name order."""
        if not os.path.exists(self.layouts_dir):
            logger.warning(f"Layouts directory not found: {self.layouts_dir}")
            return

        for fname in sorted(os.listdir(self.layouts_dir)):
            if not fname.endswith(".json"):
                continue
            fpath = os.path.join(self.layouts_dir, fname)
            try:
                with open(fpath, 'r', encoding='utf-8') as f:
                    data = json.load(f)
                self.layouts.append(self.parse_layout(data))
                logger.debug(f"Loaded layout: {fname}")
            except (OSError, ValueError, TypeError) as e:
                # LayoutConfigError and JSONDecodeError are ValueErrors
                logger.error(f"Error loading layout {fname}: {e}", layout_file=fname)

    @staticmethod
    def parse_layout(data: dict) -> LayoutProfile:
        """Converts dict to LayoutProfile object."""
        if 'name' not in data or 'columns' not in data:
            raise LayoutConfigError("Layout definition needs at least 'name' and 'columns'")
        return LayoutProfile(**data)

    def detect(self, text: str) -> Optional[LayoutProfile]:
        """
        Detect the appropriate layout for the given PDF text.

        Args:
            text: Extracted text from the first page

        Returns:
            First matching LayoutProfile, or None if no match
        """
        for layout in self.layouts:
            if layout.keywords and all(k in text for k in layout.keywords):
                logger.debug(f"Detected layout: {layout.name}")
                return layout
        return None

    def get_by_name(self, name: str) -> Optional[LayoutProfile]:
        """Get layout by name."""
        for layout in self.layouts:
            if layout.name == name:
                return layout
        return None

    def get(self, name: str) -> LayoutProfile:
        """Get layout by name, raising KeyError when it is not registered."""
        layout = self.get_by_name(name)
        if layout is None:
            raise KeyError(name)
        return layout

    def list_layouts(self) -> List[str]:
        """List all available layout names."""
        return [l.name for l in self.layouts]

    def save_layout(self, layout_data: dict, filename: str = None) -> bool:
        """
        Save a new layout configuration to disk.

        Args:
            layout_data: Dictionary containing layout configuration
            filename: Optional filename. If None, generated from layout name.

        Returns:
            bool: True if saved successfully
        """
        try:
            # Validate before anything touches the disk
            self.parse_layout(layout_data)

            if not filename:
                safe_name = "".join(c for c in layout_data.get('name', 'unknown') if c.isalnum() or c in (' ', '-', '_')).strip()
                safe_name = safe_name.replace(' ', '_').lower()
                filename = f"{safe_name}.json"

            os.makedirs(self.layouts_dir, exist_ok=True)
            fpath = os.path.join(self.layouts_dir, filename)

            with open(fpath, 'w', encoding='utf-8') as f:
                json.dump(layout_data, f, indent=4, ensure_ascii=False)

            # Reload layouts to include the new one
            self.layouts = []
            self._load_layouts()

            logger.info(f"Saved new layout to {fpath}")
            return True

        except (OSError, ValueError, TypeError) as e:
            logger.error(f"Failed to save layout: {e}")
            return False

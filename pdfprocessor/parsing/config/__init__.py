# Configuration submodule
from .layout import LayoutProfile, ColumnDef
from .registry import LayoutRegistry

__all__ = ['LayoutProfile', 'ColumnDef', 'LayoutRegistry']

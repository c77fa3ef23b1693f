"""
BaseRenderer — Abstract base class for output renderers

All renderers inherit from this class and implement render().
Provides common utilities for terminal width, truncation and counting.
"""

import shutil
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List

if TYPE_CHECKING:
    from ..presentation.symbols import SymbolSet
    from . import OutputSpec


class BaseRenderer(ABC):
    """
    Abstract base class for all output renderers.

    Subclasses must implement render().
    """

    def __init__(self, symbols: "SymbolSet" = None, width: int = None, full: bool = False):
        """
        Initialize renderer.

        Args:
            symbols: SymbolSet for visual elements (auto-detect if None)
            width: Terminal width (auto-detect if None)
            full: If True, don't truncate content
        """
        from ..presentation.symbols import get_symbols

        self.symbols = symbols or get_symbols()
        self.width = width or shutil.get_terminal_size().columns
        self.full = full

    @abstractmethod
    def render(self, spec: "OutputSpec") -> str:
        """
        Render OutputSpec to formatted string.

        Args:
            spec: OutputSpec with data and hints

        Returns:
            Formatted string for output
        """

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def truncate(self, text: str, length: int = None) -> str:
        """Truncate text with the symbol set's ellipsis, unless in full mode."""
        if not text:
            return ""
        if self.full:
            return text
        if length is None:
            length = max(20, self.width - 10)
        if len(text) <= length:
            return text

        ellipsis = self.symbols.ellipsis
        if length <= len(ellipsis):
            return text[:length]
        return text[:length - len(ellipsis)] + ellipsis

    def format_count(self, count: int, singular: str, plural: str = None) -> str:
        """Format a count with its noun ("1 problem", "3 problems")."""
        if count == 1:
            return f"{count} {singular}"
        return f"{count} {plural or singular + 's'}"

    @staticmethod
    def items_of(spec: "OutputSpec") -> List[Dict[str, Any]]:
        if isinstance(spec.data, list):
            return spec.data
        if isinstance(spec.data, dict):
            return spec.data.get("items") or []
        return []

    @staticmethod
    def errors_of(spec: "OutputSpec") -> List[Dict[str, Any]]:
        if isinstance(spec.data, dict):
            return spec.data.get("errors") or []
        return []

"""
Output Module — View layer for the onetime CLI

Separates data from presentation. Commands build an OutputSpec,
renderers turn it into text.

Usage:
    from onetime.output import OutputSpec, render

    # In command:
    spec = OutputSpec(
        data={"items": [finding.to_dict() for finding in findings], "errors": []},
        title="Single-use variables",
    )

    # In CLI layer:
    print(render(spec, format="list", symbols=symbols))
"""

from dataclasses import dataclass
from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from ..presentation.symbols import SymbolSet

from .base import BaseRenderer
from .list import ListRenderer
from .summary import SummaryRenderer
from .json import JsonRenderer


# =============================================================================
# OutputSpec — Data envelope for rendering
# =============================================================================

@dataclass
class OutputSpec:
    """
    Data envelope that commands hand to a renderer.

    Expected data shape for lint results:
        {
            "items":  [finding dicts, each with "path", "line", "column", ...],
            "errors": [{"path": ..., "error": ...}, ...],
            "files":  number of files checked,
        }

    Attributes:
        data: The actual data
        title: Optional header line
        empty_message: Message when there is nothing to show
        command: Which command produced this output
    """
    data: Any
    title: Optional[str] = None
    empty_message: str = "No single-use variables found."
    command: Optional[str] = None


# =============================================================================
# Format Registry
# =============================================================================

RENDERERS = {
    "list": ListRenderer,
    "summary": SummaryRenderer,
    "json": JsonRenderer,
}

VALID_FORMATS = tuple(RENDERERS)


def get_renderer(format: str, symbols: "SymbolSet" = None, width: int = None,
                 full: bool = False) -> BaseRenderer:
    """
    Get a renderer instance.

    Args:
        format: Format name from VALID_FORMATS
        symbols: SymbolSet for visual elements
        width: Terminal width (auto-detect if None)
        full: If True, don't truncate content

    Raises:
        ValueError: If the format is unknown
    """
    renderer_class = RENDERERS.get(format)
    if renderer_class is None:
        raise ValueError(f"Unknown format '{format}'. Valid: {', '.join(VALID_FORMATS)}")
    return renderer_class(symbols=symbols, width=width, full=full)


def render(spec: OutputSpec, format: str = "list", symbols: "SymbolSet" = None,
           width: int = None, full: bool = False) -> str:
    """Render an OutputSpec in the requested format."""
    return get_renderer(format, symbols, width, full).render(spec)


__all__ = [
    "OutputSpec", "RENDERERS", "VALID_FORMATS",
    "BaseRenderer", "ListRenderer", "SummaryRenderer", "JsonRenderer",
    "get_renderer", "render",
]

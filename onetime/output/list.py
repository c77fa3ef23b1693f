"""
ListRenderer — One line per finding, grouped by file

Format:
    src/app.js
      3:7  Variable 'total' is only used once.  ⚒
      9:9  Variable 'row' is only used once.

    ⚠ 2 problems (1 fixable)
"""

from itertools import groupby
from typing import TYPE_CHECKING, List

from ..presentation.symbols import sanitize_control_chars
from .base import BaseRenderer

if TYPE_CHECKING:
    from . import OutputSpec


class ListRenderer(BaseRenderer):
    """Render findings as a compact per-file list."""

    def render(self, spec: "OutputSpec") -> str:
        s = self.symbols
        items = self.items_of(spec)
        errors = self.errors_of(spec)
        lines: List[str] = []

        if spec.title:
            lines.append(spec.title)
            lines.append("")

        for path, group in groupby(items, key=lambda item: item.get("path") or "<source>"):
            lines.append(path)
            for item in group:
                lines.append(self._render_finding(item))
            lines.append("")

        for error in errors:
            text = self.truncate(sanitize_control_chars(f"{error.get('path')}: {error.get('error')}"))
            lines.append(f"{s.check_fail} {text}")
        if errors:
            lines.append("")

        if not items:
            lines.append(f"{s.check_pass} {spec.empty_message}")
        else:
            fixable = sum(1 for item in items if item.get("fixable"))
            lines.append(
                f"{s.check_warn} {self.format_count(len(items), 'problem')} ({fixable} fixable)"
            )
        return "\n".join(lines)

    def _render_finding(self, item: dict) -> str:
        position = f"{item.get('line')}:{item.get('column')}"
        line = f"  {position:<8} {item.get('message', '')}"
        if item.get("fixable"):
            line += f"  {self.symbols.fixable}"
        return line

"""
SummaryRenderer — Per-file counts instead of individual findings

Format:
    Files checked: 12
    Problems: 5 (3 fixable)

    src/app.js          3  (2 fixable)
    src/util/format.ts  2  (1 fixable)

    ✗ 1 file could not be checked
"""

from collections import Counter
from typing import TYPE_CHECKING

from .base import BaseRenderer

if TYPE_CHECKING:
    from . import OutputSpec


class SummaryRenderer(BaseRenderer):
    """Render an overview of findings per file."""

    def render(self, spec: "OutputSpec") -> str:
        s = self.symbols
        items = self.items_of(spec)
        errors = self.errors_of(spec)
        lines = []

        if spec.title:
            lines.append(spec.title)
            lines.append("")

        files = spec.data.get("files") if isinstance(spec.data, dict) else None
        if files is not None:
            lines.append(f"Files checked: {files}")

        totals = Counter()
        fixable = Counter()
        for item in items:
            path = item.get("path") or "<source>"
            totals[path] += 1
            if item.get("fixable"):
                fixable[path] += 1

        lines.append(f"Problems: {len(items)} ({sum(fixable.values())} fixable)")

        if totals:
            lines.append("")
            width = max(len(path) for path in totals)
            for path in sorted(totals):
                label = self.truncate(path, max(20, self.width - 24))
                lines.append(f"  {label:<{width}}  {totals[path]:>3}  ({fixable[path]} fixable)")

        if errors:
            lines.append("")
            lines.append(f"{s.check_fail} {self.format_count(len(errors), 'file')} could not be checked")
            for error in errors:
                lines.append(f"  {s.bullet} {error.get('path')}")

        if not items and not errors:
            lines.append("")
            lines.append(f"{s.check_pass} {spec.empty_message}")

        return "\n".join(lines)

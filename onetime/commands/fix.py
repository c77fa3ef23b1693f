"""
FixCommand — Inline single-use variables in place

Applies the rule's fixes (repeating passes until nothing more applies) and
writes the result back. With --dry-run nothing is written; --diff prints a
unified diff of what would change.

Exit status: 0 when nothing is left to report, 1 when findings remain
(e.g., without a safe rewrite), 2 when any file could not be processed.
"""

import difflib
import logging
from pathlib import Path
from typing import List

from ..commands.base import BaseCommand, add_lint_arguments
from ..errors import OneTimeError
from ..output import OutputSpec
from ..presentation.symbols import safe_print

logger = logging.getLogger(__name__)


class FixCommand(BaseCommand):
    """Command for rewriting files."""

    def fix(self, paths: List[str], dry_run: bool = False, show_diff: bool = False) -> int:
        """
        Fix files and print what is left.

        Args:
            paths: Files or directories
            dry_run: Compute fixes without writing files
            show_diff: Print a unified diff per changed file

        Returns:
            Exit status
        """
        symbols = self.symbols
        files, errors = self.collect(paths)
        items = []
        applied = 0
        changed_files = 0

        for path in files:
            try:
                source = self.read_source(path)
                result = self.rule.fix(source, path=path)
                if result.changed and not dry_run:
                    path.write_bytes(result.source.encode('utf-8'))
            except (OneTimeError, OSError, UnicodeDecodeError) as e:
                logger.debug("Could not fix %s: %s", path, e)
                errors.append({"path": str(path), "error": str(e)})
                continue

            if result.changed:
                applied += result.applied
                changed_files += 1
                logger.info("%s: inlined %d variable(s) in %d pass(es)",
                            path, result.applied, result.passes)
                if show_diff:
                    safe_print(self.diff(path, source, result.source), end="")
            items.extend(finding.to_dict() for finding in result.findings)

        if self.format != "json":
            verb = "Would inline" if dry_run else "Inlined"
            safe_print(f"{symbols.check_pass} {verb} {applied} variable(s) in {changed_files} file(s)")

        self.emit(OutputSpec(
            data={"items": items, "errors": errors, "files": len(files)},
            empty_message="Nothing left to report.",
            command="fix",
        ))
        return self.exit_status(len(items), len(errors))

    @staticmethod
    def diff(path: Path, before: str, after: str) -> str:
        """Unified diff between the original and fixed text."""
        return "".join(difflib.unified_diff(
            before.splitlines(keepends=True),
            after.splitlines(keepends=True),
            fromfile=f"a/{path.as_posix()}",
            tofile=f"b/{path.as_posix()}",
        ))


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

def register_parser(subparsers):
    """Register fix command parser."""
    p = subparsers.add_parser('fix', help='Inline variables that are used only once')
    add_lint_arguments(p)
    p.add_argument('--dry-run', action='store_true',
                   help='Compute fixes without writing files')
    p.add_argument('--diff', action='store_true',
                   help='Print a unified diff of each change')
    return p


def handle(cli, args):
    """Handle fix command dispatch."""
    return FixCommand(cli).fix(args.paths, dry_run=args.dry_run, show_diff=args.diff)

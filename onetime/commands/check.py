"""
CheckCommand — Report single-use variables

Walks the given paths, runs the no-one-time-vars rule on every supported
file and prints the findings. Files that cannot be checked (unreadable,
too large, no parser) get an error line; the other files are still checked.

Exit status: 0 clean, 1 findings, 2 when any file could not be checked.
"""

import logging
from typing import List

from ..commands.base import BaseCommand, add_lint_arguments
from ..errors import OneTimeError
from ..output import OutputSpec

logger = logging.getLogger(__name__)


class CheckCommand(BaseCommand):
    """Command for linting files without touching them."""

    def check(self, paths: List[str]) -> int:
        """
        Check files and print findings.

        Args:
            paths: Files or directories

        Returns:
            Exit status
        """
        files, errors = self.collect(paths)
        items = []

        for path in files:
            try:
                source = self.read_source(path)
                findings = self.rule.check(source, path=path)
            except (OneTimeError, OSError, UnicodeDecodeError) as e:
                logger.debug("Could not check %s: %s", path, e)
                errors.append({"path": str(path), "error": str(e)})
                continue
            items.extend(finding.to_dict() for finding in findings)

        logger.info("Checked %d file(s): %d finding(s), %d error(s)",
                    len(files), len(items), len(errors))

        self.emit(OutputSpec(
            data={"items": items, "errors": errors, "files": len(files)},
            command="check",
        ))
        return self.exit_status(len(items), len(errors))


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

def register_parser(subparsers):
    """Register check command parser."""
    p = subparsers.add_parser('check', help='Report variables that are used only once')
    add_lint_arguments(p)
    return p


def handle(cli, args):
    """Handle check command dispatch."""
    return CheckCommand(cli).check(args.paths)

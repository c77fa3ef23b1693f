"""
BaseCommand — Shared foundation for all CLI commands

Commands receive the CLI instance and reach its resources (configuration,
rule, discovery, symbols) through properties instead of building their own.
"""

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Dict, Iterable, List, Tuple

from ..errors import SourceTooLargeError
from ..output import OutputSpec, VALID_FORMATS, render
from ..presentation.symbols import safe_print

if TYPE_CHECKING:
    from ..cli import LintCLI

logger = logging.getLogger(__name__)

# Exit statuses
EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_ERROR = 2


def add_lint_arguments(parser) -> None:
    """Options shared by commands that check files."""
    parser.add_argument('paths', nargs='*', default=['.'],
                        help='Files or directories to check (default: current directory)')
    parser.add_argument('--format', '-f', choices=VALID_FORMATS,
                        help='Output format (default: display.format from config)')
    parser.add_argument('--rule', '-r', action='append', default=[], metavar='KEY=VALUE',
                        help='Override a rule option (e.g., allowInsideCallback=false); repeatable')
    parser.add_argument('--exclude', action='append', default=[], metavar='PATTERN',
                        help='Extra glob pattern to skip when walking directories; repeatable')
    parser.add_argument('--no-gitignore', action='store_true',
                        help='Walk directories without consulting git ls-files')
    parser.add_argument('--full', action='store_true',
                        help='Do not truncate long lines')


class BaseCommand:
    """
    Base class for CLI commands with access to shared resources.

    Commands don't reinitialize resources; they access them via the CLI instance.
    """

    def __init__(self, cli: 'LintCLI'):
        self._cli = cli

    # -------------------------------------------------------------------------
    # Core resources (convenience properties)
    # -------------------------------------------------------------------------

    @property
    def project_dir(self) -> Path:
        return self._cli.project_dir

    @property
    def config(self):
        """Effective configuration (files + overrides)."""
        return self._cli.config

    @property
    def config_manager(self):
        return self._cli.config_manager

    @property
    def symbols(self):
        """Symbol set for display (Unicode/ASCII)."""
        return self._cli.symbols

    @property
    def format(self) -> str:
        """Output format for this run."""
        return self._cli.format

    @property
    def rule(self):
        """The configured OneTimeVarsRule."""
        return self._cli.rule

    @property
    def discovery(self):
        """SourceDiscovery for expanding paths."""
        return self._cli.discovery

    # -------------------------------------------------------------------------
    # Shared helpers
    # -------------------------------------------------------------------------

    def collect(self, paths: Iterable[str]) -> Tuple[List[Path], List[Dict[str, str]]]:
        """
        Expand paths into files.

        Returns:
            (files, errors): a missing path becomes an error entry instead of
            stopping the run
        """
        files = set()
        errors = []
        for raw in paths:
            try:
                files.update(self.discovery.discover([raw]))
            except FileNotFoundError as e:
                errors.append({"path": str(raw), "error": str(e)})
        return sorted(files), errors

    def read_source(self, path: Path) -> str:
        """
        Read one source file as text.

        Raises:
            OSError: If the file cannot be read
            UnicodeDecodeError: If it is not UTF-8
            SourceTooLargeError: If it exceeds files.max_file_size
        """
        data = path.read_bytes()
        limit = self.config.files.max_file_size
        if limit and len(data) > limit:
            raise SourceTooLargeError(str(path), len(data), limit)
        return data.decode('utf-8')

    def emit(self, spec: OutputSpec) -> None:
        """Render an OutputSpec with the CLI's format and print it."""
        safe_print(render(spec, format=self._cli.format, symbols=self.symbols, full=self._cli.full))

    @staticmethod
    def exit_status(findings: int, errors: int) -> int:
        if errors:
            return EXIT_ERROR
        if findings:
            return EXIT_FINDINGS
        return EXIT_OK

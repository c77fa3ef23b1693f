"""
CLI — Command interface for the no-one-time-vars linter

    onetime check src/            # report
    onetime fix src/ --diff       # inline and show what changed
    onetime config --set rule.allowInsideCallback=false

Quiet by default: findings go to stdout, diagnostics to stderr only when
asked for with -v / -vv.
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import OPTION_KEYS, LEGACY_OPTION_KEYS, ConfigManager, RuleOptions, parse_option_value
from .core.engine import OneTimeVarsRule
from .core.parsing import ExclusionConfig, default_registry
from .presentation.symbols import get_symbols
from .services.discovery import SourceDiscovery

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)-5.5s] %(name)s: %(message)s"


class LintCLI:
    """
    Resources shared by the commands of one invocation.

    Built from the layered configuration; configure() then applies the
    command-line overrides on top.
    """

    def __init__(self, project_dir: Path, config_manager: Optional[ConfigManager] = None):
        self.project_dir = Path(project_dir)
        self.config_manager = config_manager or ConfigManager(self.project_dir)
        self.config = self.config_manager.load()

        self.format = self.config.display.format
        self.full = False
        self.symbols = get_symbols(self.config.display.symbols)
        self.registry = default_registry()
        self.rule = OneTimeVarsRule(self.config.rule, self.registry)
        self.discovery = self._build_discovery(extra=[], respect_gitignore=True)

    def configure(self, args: argparse.Namespace) -> Optional[str]:
        """
        Apply command-line overrides.

        Returns:
            Error message or None if the overrides are valid
        """
        overrides = getattr(args, 'rule', None) or []
        if overrides:
            options = self.config.rule.to_dict()
            for item in overrides:
                if '=' not in item:
                    return f"Invalid rule override '{item}'. Use KEY=VALUE"
                key, value = item.split('=', 1)
                key = key.strip()
                if key not in OPTION_KEYS and key not in LEGACY_OPTION_KEYS:
                    return f"Unknown rule option: {key}. Valid: {', '.join(OPTION_KEYS)}"
                parsed = parse_option_value(value)
                if key == "ignoredVariables" and not isinstance(parsed, list):
                    parsed = [str(parsed)] if parsed else []
                options[key] = parsed
            rule_options = RuleOptions.from_dict(options)
            error = rule_options.validate()
            if error:
                return error
            self.config.rule = rule_options
            self.rule = OneTimeVarsRule(rule_options, self.registry)

        if getattr(args, 'format', None):
            self.format = args.format
        self.full = getattr(args, 'full', False)
        self.discovery = self._build_discovery(
            extra=getattr(args, 'exclude', None) or [],
            respect_gitignore=not getattr(args, 'no_gitignore', False),
        )
        return None

    def _build_discovery(self, extra: List[str], respect_gitignore: bool) -> SourceDiscovery:
        exclusions = ExclusionConfig(
            include_tests=self.config.files.include_tests,
            extra=list(self.config.files.exclude) + list(extra),
        )
        return SourceDiscovery(self.registry, exclusions, respect_gitignore=respect_gitignore)


def _configure_logging(verbosity: int) -> None:
    """Route the onetime loggers to stderr: WARNING, -v INFO, -vv DEBUG."""
    level = logging.WARNING
    if verbosity == 1:
        level = logging.INFO
    elif verbosity > 1:
        level = logging.DEBUG

    root = logging.getLogger("onetime")
    root.setLevel(level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
    else:
        for handler in root.handlers:
            handler.setLevel(level)


def build_parser() -> argparse.ArgumentParser:
    """Main parser with every registered command."""
    parser = argparse.ArgumentParser(
        prog="onetime",
        description="onetime -- find and inline variables that are used only once",
        epilog="Exit status: 0 clean, 1 findings, 2 errors.",
    )

    parser.add_argument(
        '--project', '-p',
        default=os.environ.get("ONETIME_PROJECT_PATH", "."),
        help='Project directory holding .onetime/config.yaml (default: ONETIME_PROJECT_PATH or current)'
    )
    parser.add_argument(
        '--verbose', '-v',
        action='count',
        default=0,
        help='More logging on stderr (-v info, -vv debug)'
    )
    parser.add_argument(
        '--version', '-V',
        action='version',
        version=f'onetime {__version__}'
    )

    subparsers = parser.add_subparsers(dest='command', help='Commands')

    from .commands import register_all
    register_all(subparsers)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the onetime CLI.

    Parser definitions and dispatch logic live in the command modules.

    Returns:
        Process exit status
    """
    from .commands import dispatch

    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.verbose)

    if not args.command:
        parser.print_help()
        return 0

    cli = LintCLI(Path(args.project))
    error = cli.configure(args)
    if error:
        print(f"Error: {error}", file=sys.stderr)
        return 2

    try:
        return dispatch(args.command, cli, args)
    except KeyError as e:
        print(f"Error: {e}", file=sys.stderr)
        parser.print_help()
        return 2


if __name__ == '__main__':
    sys.exit(main())

"""
Commands — CLI command implementations with self-registration

Each command module:
1. Defines XxxCommand class (handler implementation)
2. Exports register_parser(subparsers) to configure its argparse
3. Exports handle(cli, args) returning the process exit status

Adding a command means adding a module to COMMAND_MODULES.
"""

import importlib
import logging
from typing import Any, Callable, Dict, List

from .base import BaseCommand, add_lint_arguments

logger = logging.getLogger(__name__)

# Order determines help display order
COMMAND_MODULES = [
    'check',
    'fix',
    'config_cmd',
]

# Handler registry: command_name -> handle function
_handlers: Dict[str, Callable] = {}


def register_all(subparsers) -> None:
    """
    Discover and register all command parsers.

    Imports each module in COMMAND_MODULES, calls its register_parser() and
    records its handle() for dispatch.

    Args:
        subparsers: argparse subparsers object from main parser
    """
    _handlers.clear()

    for module_name in COMMAND_MODULES:
        try:
            module = importlib.import_module(f'.{module_name}', __package__)
        except ImportError as e:
            logger.warning("Could not load command module '%s': %s", module_name, e)
            continue

        if hasattr(module, 'register_parser'):
            module.register_parser(subparsers)

        if hasattr(module, 'handle'):
            # 'config_cmd' -> 'config'
            cmd_name = getattr(module, 'COMMAND_NAME', module_name.replace('_cmd', ''))
            _handlers[cmd_name] = module.handle


def dispatch(command: str, cli: Any, args: Any) -> int:
    """
    Dispatch command to its registered handler.

    Returns:
        Exit status from the handler

    Raises:
        KeyError: If command not registered
    """
    if command not in _handlers:
        raise KeyError(f"Unknown command: {command}. Available: {list(_handlers.keys())}")

    return _handlers[command](cli, args)


def get_registered_commands() -> List[str]:
    """Get list of registered command names."""
    return list(_handlers.keys())


__all__ = ['BaseCommand', 'add_lint_arguments', 'register_all', 'dispatch', 'get_registered_commands']

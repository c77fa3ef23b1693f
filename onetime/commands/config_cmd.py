"""
ConfigCommand — Display and modify configuration

Handles configuration operations:
- Displaying the effective configuration
- Reading one value (--get)
- Setting a value in the project or user config (--set, --user)
"""

from ..commands.base import EXIT_ERROR, EXIT_OK, BaseCommand
from ..presentation.symbols import safe_print


class ConfigCommand(BaseCommand):
    """Command for configuration management."""

    def show_config(self) -> int:
        """Show current configuration."""
        safe_print(self.config_manager.display())
        return EXIT_OK

    def get_config(self, key: str) -> int:
        """Print one value, e.g. rule.allowInsideCallback."""
        value = self.config_manager.get(key)
        if value is None:
            safe_print(f"{self.symbols.check_fail} Unknown setting: {key}")
            return EXIT_ERROR
        safe_print(value)
        return EXIT_OK

    def set_config(self, key: str, value: str, scope: str = "project") -> int:
        """Set a configuration value and save it to the chosen layer."""
        symbols = self.symbols
        error = self.config_manager.set(key, value, scope)
        if error:
            safe_print(f"{symbols.check_fail} {error}")
            return EXIT_ERROR

        if scope == "project":
            saved_to = self.config_manager.project_config_path
        else:
            saved_to = self.config_manager.user_config_path
        safe_print(f"{symbols.check_pass} Set {key} = {value}")
        safe_print(f"  {symbols.arrow} {saved_to}")
        return EXIT_OK


# =============================================================================
# Command Registration (Self-Registration Pattern)
# =============================================================================

COMMAND_NAME = 'config'


def register_parser(subparsers):
    """Register config command parser."""
    p = subparsers.add_parser('config', help='View or set configuration')
    p.add_argument('--set', metavar='KEY=VALUE',
                   help='Set config value (e.g., rule.allowInsideCallback=false)')
    p.add_argument('--get', metavar='KEY',
                   help='Print one config value (e.g., display.format)')
    p.add_argument('--user', action='store_true',
                   help='Apply to user config instead of project')
    return p


def handle(cli, args):
    """Handle config command dispatch."""
    command = ConfigCommand(cli)
    if args.set:
        if '=' not in args.set:
            safe_print("Error: Use format KEY=VALUE (e.g., rule.ignoreArrayVariables=3)")
            return EXIT_ERROR
        key, value = args.set.split('=', 1)
        return command.set_config(key, value, "user" if args.user else "project")
    if args.get:
        return command.get_config(args.get)
    return command.show_config()

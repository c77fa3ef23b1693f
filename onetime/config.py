"""
Configuration — Rule options and settings management

Config hierarchy (highest to lowest priority):
  1. Environment variables
  2. Project config (.onetime/config.yaml)
  3. User config (~/.onetime/config.yaml)
  4. Defaults

The `rule` section holds the no-one-time-vars options using the same
camelCase keys as the ESLint rule, e.g.:

    rule:
      ignoredVariables: [self, that]
      ignoreArrayVariables: 3
      allowInsideCallback: false
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Union

import yaml

from .presentation.symbols import get_symbols

logger = logging.getLogger(__name__)


# camelCase option key -> RuleOptions attribute
OPTION_KEYS = {
    "ignoredVariables": "ignored_variables",
    "ignoreFunctionVariables": "ignore_function_variables",
    "ignoreArrayVariables": "ignore_array_variables",
    "ignoreObjectVariables": "ignore_object_variables",
    "ignoreObjectDestructuring": "ignore_object_destructuring",
    "ignoreExportedVariables": "ignore_exported_variables",
    "allowInsideCallback": "allow_inside_callback",
    "maxInitializerLength": "max_initializer_length",
    "maxObjectProperties": "max_object_properties",
    "maxPropertyLength": "max_property_length",
}

# Older releases called the callback relaxation `allowInsideFunctions`
LEGACY_OPTION_KEYS = {
    "allowInsideFunctions": "allow_inside_callback",
}

BOOLEAN_OPTIONS = (
    "ignore_function_variables",
    "ignore_object_variables",
    "ignore_object_destructuring",
    "ignore_exported_variables",
    "allow_inside_callback",
)

INTEGER_OPTIONS = (
    "max_initializer_length",
    "max_object_properties",
    "max_property_length",
)


@dataclass
class RuleOptions:
    """
    Options interpreted by the engine.

    Attributes:
        ignored_variables: Names never reported
        ignore_function_variables: Exempt function-valued bindings
        ignore_array_variables: True exempts every array literal; a number N
            exempts array literals with more than N elements
        ignore_object_variables: Exempt every object literal
        ignore_object_destructuring: Exempt names bound by object patterns
        ignore_exported_variables: Exempt module-exported bindings
        allow_inside_callback: Exempt reads that cross a closure boundary
        max_initializer_length: Longest initializer (chars) worth inlining
        max_object_properties: Most properties an inlined object literal may have
        max_property_length: Longest single property an inlined object may have
    """
    ignored_variables: Set[str] = field(default_factory=set)
    ignore_function_variables: bool = True
    ignore_array_variables: Union[bool, int] = False
    ignore_object_variables: bool = False
    ignore_object_destructuring: bool = False
    ignore_exported_variables: bool = True
    allow_inside_callback: bool = True
    max_initializer_length: int = 80
    max_object_properties: int = 3
    max_property_length: int = 40

    def validate(self) -> Optional[str]:
        """Validate options. Returns error message or None if valid."""
        for name in BOOLEAN_OPTIONS:
            if not isinstance(getattr(self, name), bool):
                return f"Option '{name}' must be true or false"
        for name in INTEGER_OPTIONS:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                return f"Option '{name}' must be a non-negative integer"
        limit = self.ignore_array_variables
        if not isinstance(limit, bool) and (not isinstance(limit, int) or limit < 0):
            return "Option 'ignore_array_variables' must be a boolean or a non-negative integer"
        if not all(isinstance(n, str) for n in self.ignored_variables):
            return "Option 'ignored_variables' must be a list of names"
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to camelCase option dictionary."""
        result: Dict[str, Any] = {}
        for key, attr in OPTION_KEYS.items():
            value = getattr(self, attr)
            if isinstance(value, set):
                value = sorted(value)
            result[key] = value
        return result

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'RuleOptions':
        """
        Create from an option dictionary.

        Accepts camelCase keys (ESLint style), snake_case attribute names and
        the legacy `allowInsideFunctions` key. Unknown keys are ignored.
        """
        options = cls()
        for key, value in (data or {}).items():
            attr = OPTION_KEYS.get(key) or LEGACY_OPTION_KEYS.get(key)
            if attr is None and key in OPTION_KEYS.values():
                attr = key
            if attr is None:
                logger.debug("Ignoring unknown rule option %r", key)
                continue
            if attr == "ignored_variables":
                value = set(value or [])
            setattr(options, attr, value)
        return options


@dataclass
class DisplayConfig:
    """Display preferences."""
    symbols: str = "auto"  # "unicode" | "ascii" | "auto"
    format: str = "list"   # "list" | "json" | "summary"

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        valid_symbols = ("unicode", "ascii", "auto")
        if self.symbols not in valid_symbols:
            return f"Unknown symbols setting '{self.symbols}'. Valid: {', '.join(valid_symbols)}"

        valid_formats = ("list", "json", "summary")
        if self.format not in valid_formats:
            return f"Unknown format '{self.format}'. Valid: {', '.join(valid_formats)}"
        return None


@dataclass
class FilesConfig:
    """Which files a directory walk picks up."""
    exclude: List[str] = field(default_factory=list)  # extra glob patterns
    include_tests: bool = True
    max_file_size: Optional[int] = None  # None = language default

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if self.max_file_size is not None and (
                isinstance(self.max_file_size, bool)
                or not isinstance(self.max_file_size, int)
                or self.max_file_size <= 0):
            return "files.max_file_size must be a positive integer"
        return None


@dataclass
class Config:
    """Application configuration."""
    rule: RuleOptions = field(default_factory=RuleOptions)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    files: FilesConfig = field(default_factory=FilesConfig)

    def validate(self) -> Optional[str]:
        """First validation error across sections, or None."""
        for section in (self.rule, self.display, self.files):
            error = section.validate()
            if error:
                return error
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "rule": self.rule.to_dict(),
            "display": {
                "symbols": self.display.symbols,
                "format": self.display.format
            },
            "files": {
                "exclude": list(self.files.exclude),
                "include_tests": self.files.include_tests,
                "max_file_size": self.files.max_file_size
            }
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        display_data = data.get("display", {}) or {}
        files_data = data.get("files", {}) or {}

        return cls(
            rule=RuleOptions.from_dict(data.get("rule", {})),
            display=DisplayConfig(
                symbols=display_data.get("symbols", "auto"),
                format=display_data.get("format", "list")
            ),
            files=FilesConfig(
                exclude=list(files_data.get("exclude", []) or []),
                include_tests=files_data.get("include_tests", True),
                max_file_size=files_data.get("max_file_size")
            )
        )


def parse_option_value(raw: str) -> Any:
    """
    Parse a command-line option value.

    "true"/"false" become booleans, digits become ints, and anything with
    a comma (or the `ignoredVariables` list) is split into a list.
    """
    lowered = raw.strip().lower()
    if lowered in ("true", "yes", "on"):
        return True
    if lowered in ("false", "no", "off"):
        return False
    if lowered.isdigit():
        return int(lowered)
    if "," in raw:
        return [part.strip() for part in raw.split(",") if part.strip()]
    return raw.strip()


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Environment (ONETIME_IGNORED_VARIABLES, ONETIME_FORMAT, ONETIME_SYMBOLS)
      2. Project config (.onetime/config.yaml)
      3. User config (~/.onetime/config.yaml)
      4. Defaults
    """

    PROJECT_CONFIG_DIR = ".onetime"
    PROJECT_CONFIG_FILE = "config.yaml"

    def __init__(self, project_dir: Optional[Path] = None, user_config_dir: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self.user_config_dir = Path(user_config_dir) if user_config_dir else Path.home() / ".onetime"
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self.user_config_dir / self.PROJECT_CONFIG_FILE

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        config_data: Dict[str, Any] = {}

        # Layer 1: User config
        config_data = self._merge(config_data, self._read(self.user_config_path))

        # Layer 2: Project config (higher priority)
        config_data = self._merge(config_data, self._read(self.project_config_path))

        # Layer 3: Environment overrides
        if os.environ.get("ONETIME_IGNORED_VARIABLES"):
            names = [n.strip() for n in os.environ["ONETIME_IGNORED_VARIABLES"].split(",") if n.strip()]
            config_data.setdefault("rule", {})["ignoredVariables"] = names
        if os.environ.get("ONETIME_FORMAT"):
            config_data.setdefault("display", {})["format"] = os.environ["ONETIME_FORMAT"]
        if os.environ.get("ONETIME_SYMBOLS"):
            config_data.setdefault("display", {})["symbols"] = os.environ["ONETIME_SYMBOLS"]

        self._config = Config.from_dict(config_data)
        return self._config

    def _read(self, path: Path) -> Dict[str, Any]:
        """Read one YAML layer; a malformed file is skipped with a warning."""
        if not path.exists():
            return {}
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level must be a mapping", path)
            return {}
        return data

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self.project_config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(self.project_config_path, 'w', encoding="utf-8") as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)

        self._config = config

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self.user_config_dir.mkdir(parents=True, exist_ok=True)

        with open(self.user_config_path, 'w', encoding="utf-8") as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False, sort_keys=False)

        self._config = config

    def set(self, key: str, value: str, scope: str = "project") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "rule.allowInsideCallback")
            value: Value to set (parsed with parse_option_value)
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'display.format')"

        section, setting = parts

        if section == "rule":
            attr = OPTION_KEYS.get(setting) or LEGACY_OPTION_KEYS.get(setting)
            if attr is None and setting in OPTION_KEYS.values():
                attr = setting
            if attr is None:
                return f"Unknown rule option: {setting}. Valid: {', '.join(OPTION_KEYS)}"
            parsed = parse_option_value(value)
            if attr == "ignored_variables":
                parsed = set(parsed if isinstance(parsed, list) else [str(parsed)] if parsed else [])
            setattr(config.rule, attr, parsed)
            error = config.rule.validate()
            if error:
                return error

        elif section == "display":
            if setting == "symbols":
                config.display.symbols = value
            elif setting == "format":
                config.display.format = value
            else:
                return f"Unknown display setting: {setting}. Valid: symbols, format"
            error = config.display.validate()
            if error:
                return error

        elif section == "files":
            if setting == "exclude":
                parsed = parse_option_value(value)
                config.files.exclude = parsed if isinstance(parsed, list) else [str(parsed)]
            elif setting == "include_tests":
                config.files.include_tests = value.lower() in ('true', '1', 'yes')
            elif setting == "max_file_size":
                config.files.max_file_size = parse_option_value(value)
            else:
                return f"Unknown files setting: {setting}. Valid: exclude, include_tests, max_file_size"
            error = config.files.validate()
            if error:
                return error
        else:
            return f"Unknown section: {section}. Valid: rule, display, files"

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)

        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value as display text."""
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return None

        section, setting = parts
        data = config.to_dict().get(section)
        if not isinstance(data, dict):
            return None
        if section == "rule" and setting not in data:
            setting = {v: k for k, v in OPTION_KEYS.items()}.get(setting, setting)
        if setting not in data:
            return None
        value = data[setting]
        if isinstance(value, bool):
            return str(value).lower()
        if isinstance(value, list):
            return ",".join(str(v) for v in value)
        return None if value is None else str(value)

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def display(self) -> str:
        """Format config for display."""
        config = self.load()
        symbols = get_symbols(config.display.symbols)

        lines = ["Rule options (no-one-time-vars):"]
        for key, value in config.rule.to_dict().items():
            if isinstance(value, bool):
                shown = f"{symbols.check_pass} on" if value else "off"
            elif isinstance(value, list):
                shown = ", ".join(value) if value else "(none)"
            else:
                shown = str(value)
            lines.append(f"  {key}: {shown}")

        lines.extend([
            "",
            "Display:",
            f"  Symbols: {config.display.symbols}",
            f"  Format: {config.display.format}",
            "",
            "Files:",
            f"  Extra excludes: {', '.join(config.files.exclude) or '(none)'}",
            f"  Include tests: {config.files.include_tests}",
            f"  Max file size: {config.files.max_file_size or 'language default'}",
            "",
            "Config files:",
            f"  User: {self.user_config_path}",
            f"  Project: {self.project_config_path}",
        ])

        return "\n".join(lines)

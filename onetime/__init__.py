"""
onetime — Finds and inlines JavaScript/TypeScript variables used only once

A lint rule (`no-one-time-vars`) with an automatic fix, built on tree-sitter.

Usage:
    onetime check src/
    onetime fix src/ --diff
    onetime config --set rule.ignoredVariables=self,that

    from onetime import check_source, fix_source
    fix_source("const a = 1; use(a);")      # "use(1);"
"""

__version__ = "0.1.0"

# Engine
from .core.engine import (
    MESSAGE, RULE_ID, Finding, FixResult, OneTimeVarsRule,
    check_source, fix_source,
)
from .core.fixer import Edit, Fix, TextRange, apply_fixes

# Configuration
from .config import Config, ConfigManager, RuleOptions

# Errors
from .errors import (
    OneTimeError, ParserUnavailableError, SourceTooLargeError,
    UnsupportedLanguageError, UnsupportedRewrite,
)

# Services
from .services.discovery import SourceDiscovery

__all__ = [
    "__version__",
    "RULE_ID", "MESSAGE", "Finding", "FixResult", "OneTimeVarsRule",
    "check_source", "fix_source",
    "Edit", "Fix", "TextRange", "apply_fixes",
    "Config", "ConfigManager", "RuleOptions",
    "OneTimeError", "ParserUnavailableError", "SourceTooLargeError",
    "UnsupportedLanguageError", "UnsupportedRewrite",
    "SourceDiscovery",
]

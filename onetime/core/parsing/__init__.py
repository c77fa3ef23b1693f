"""
Parsing module — tree-sitter host for the engine.

- LanguageConfig: Per-language grammar and file rules
- ParserRegistry: Extension-based routing
- ExclusionConfig: Directory-walk exclude patterns
- SourceParser: Lazy, cached tree-sitter parsers

Usage:
    from onetime.core.parsing import SourceParser, default_registry

    registry = default_registry()
    config = registry.require(Path("src/app.ts"))
    tree = SourceParser().parse(source_bytes, config)
"""

from .config import LanguageConfig, matches_any
from .exclusions import ExclusionConfig
from .parser import SourceParser
from .registry import ParserRegistry, default_registry

__all__ = [
    'LanguageConfig',
    'ParserRegistry',
    'ExclusionConfig',
    'SourceParser',
    'default_registry',
    'matches_any',
]

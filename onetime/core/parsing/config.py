"""
Parsing configuration data structures.

Defines LanguageConfig: everything the engine needs to know about one
tree-sitter grammar. New dialects are added via config, not code changes.
"""

from dataclasses import dataclass, field
from fnmatch import fnmatch
from typing import FrozenSet, List, Set


@dataclass
class LanguageConfig:
    """
    Configuration for checking one language.

    Attributes:
        name: Human-readable name (e.g., "JavaScript", "TSX")
        tree_sitter_name: Grammar name for tree-sitter-language-pack
        extensions: File extensions this config handles (e.g., {'.js'})
        max_file_size: Refuse files larger than this (bytes, default 300KB)
        exclude_patterns: Glob patterns skipped when walking directories
        exclusion_key: Key into ExclusionConfig's per-language patterns
        type_contexts: Node types whose subtrees are type positions
    """
    # Identity
    name: str
    tree_sitter_name: str
    extensions: Set[str]

    max_file_size: int = 300_000  # 300KB default

    # Exclusions
    exclude_patterns: List[str] = field(default_factory=list)
    exclusion_key: str = "javascript"

    # Grammar details the analyzer cares about
    type_contexts: FrozenSet[str] = frozenset()

    def matches_extension(self, ext: str) -> bool:
        """Check if this config handles the given extension."""
        return ext.lower() in self.extensions

    def should_exclude(self, rel_path: str) -> bool:
        """Check if a relative (posix) path matches one of the exclude patterns."""
        return matches_any(rel_path, self.exclude_patterns)


def matches_any(rel_path: str, patterns: List[str]) -> bool:
    """
    Match a relative posix path against glob patterns.

    `**/` also matches at the top level, so `**/dist/*` excludes both
    `dist/app.js` and `web/dist/app.js`.
    """
    for pattern in patterns:
        if fnmatch(rel_path, pattern):
            return True
        if pattern.startswith('**/') and fnmatch(rel_path, pattern[3:]):
            return True
    return False

"""
Exclusion patterns for directory walks.

One ExclusionConfig per run: defaults for every language plus the
user's extra patterns from `files.exclude`.

Usage:
    from onetime.core.parsing.exclusions import ExclusionConfig

    exclusions = ExclusionConfig(include_tests=False, extra=['**/legacy/*'])
    patterns = exclusions.get_patterns('typescript')
"""

from typing import Dict, List, Optional, Set


class ExclusionConfig:
    """
    Exclude patterns for one run.

    Combines:
    - Common patterns applied to all languages
    - Language-specific patterns
    - Test file patterns (unless tests are included)
    - Extra patterns from configuration
    """

    # =========================================================================
    # Default Patterns
    # =========================================================================

    DEFAULT_COMMON: List[str] = [
        # Version control
        '**/.git/*',
        '**/.hg/*',
        '**/.svn/*',

        # Build artifacts
        '**/build/*',
        '**/dist/*',
        '**/out/*',

        # Coverage/reports
        '**/coverage/*',

        # Tool caches
        '**/.cache/*',
        '**/.onetime/*',
    ]

    DEFAULT_LANGUAGE: Dict[str, List[str]] = {
        'javascript': [
            '**/node_modules/*',
            '**/bower_components/*',
            '**/vendor/*',
            '**/*.min.js',
            '**/*.bundle.js',
        ],
        'typescript': [
            '**/node_modules/*',
            '**/*.d.ts',  # Declarations have no runtime bindings
            '**/.next/*',
            '**/.turbo/*',
        ],
    }

    DEFAULT_TEST_PATTERNS: Dict[str, List[str]] = {
        'javascript': [
            '**/*.test.js',
            '**/*.spec.js',
            '**/__tests__/*',
        ],
        'typescript': [
            '**/*.test.ts',
            '**/*.test.tsx',
            '**/*.spec.ts',
            '**/*.spec.tsx',
            '**/__tests__/*',
        ],
    }

    def __init__(self, include_tests: bool = True, extra: Optional[List[str]] = None):
        self.include_tests = include_tests
        self._common = list(self.DEFAULT_COMMON)
        self._extra: List[str] = []
        for pattern in extra or []:
            self.add(pattern)

    def add(self, pattern: str) -> None:
        """Add an extra pattern for every language."""
        if pattern not in self._extra:
            self._extra.append(pattern)

    def remove(self, pattern: str) -> bool:
        """Remove an extra or common pattern. Returns True if removed."""
        for patterns in (self._extra, self._common):
            if pattern in patterns:
                patterns.remove(pattern)
                return True
        return False

    def get_patterns(self, language: str) -> List[str]:
        """
        All exclude patterns for a language.

        Args:
            language: Exclusion key (e.g., 'javascript', 'typescript')

        Returns:
            Sorted, deduplicated pattern list
        """
        patterns: Set[str] = set(self._common)
        patterns.update(self.DEFAULT_LANGUAGE.get(language, []))
        patterns.update(self._extra)
        if not self.include_tests:
            patterns.update(self.DEFAULT_TEST_PATTERNS.get(language, []))
        return sorted(patterns)

    def summary(self) -> Dict[str, object]:
        """Counts for display."""
        return {
            'common_count': len(self._common),
            'extra': list(self._extra),
            'include_tests': self.include_tests,
        }

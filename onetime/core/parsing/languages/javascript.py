"""
JavaScript language configuration.

Covers plain and module JavaScript, with JSX (.js, .jsx, .mjs, .cjs).
The JavaScript grammar has no type positions.
"""

from ..config import LanguageConfig
from ..exclusions import ExclusionConfig


JAVASCRIPT_CONFIG = LanguageConfig(
    name="JavaScript",
    tree_sitter_name="javascript",
    extensions={'.js', '.jsx', '.mjs', '.cjs'},
    max_file_size=300_000,  # 300KB
    exclude_patterns=list(ExclusionConfig.DEFAULT_LANGUAGE['javascript']),
    exclusion_key="javascript",
)

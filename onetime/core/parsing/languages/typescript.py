"""
TypeScript language configurations.

TypeScript (.ts, .mts, .cts) and TSX (.tsx) use separate grammars from
tree-sitter-language-pack but share everything else.

Identifiers inside type positions name types, not values, and are never
counted. The one exception, `typeof x` in a type, is handled by the
analyzer itself.
"""

from ..config import LanguageConfig
from ..exclusions import ExclusionConfig


# =============================================================================
# Type Positions
# =============================================================================

TYPESCRIPT_TYPE_CONTEXTS = frozenset({
    'type_annotation',
    'opting_type_annotation',
    'omitting_type_annotation',
    'adding_type_annotation',
    'asserts_annotation',
    'type_predicate_annotation',
    'type_arguments',
    'type_parameters',
    'type_alias_declaration',
    'interface_declaration',
    'implements_clause',
    'extends_type_clause',
    'index_signature',
    'generic_type',
    'nested_type_identifier',
})


# =============================================================================
# Language Configs
# =============================================================================

TYPESCRIPT_CONFIG = LanguageConfig(
    name="TypeScript",
    tree_sitter_name="typescript",
    extensions={'.ts', '.mts', '.cts'},
    max_file_size=300_000,  # 300KB
    exclude_patterns=list(ExclusionConfig.DEFAULT_LANGUAGE['typescript']),
    exclusion_key="typescript",
    type_contexts=TYPESCRIPT_TYPE_CONTEXTS,
)

TSX_CONFIG = LanguageConfig(
    name="TSX",
    tree_sitter_name="tsx",
    extensions={'.tsx'},
    max_file_size=300_000,
    exclude_patterns=list(ExclusionConfig.DEFAULT_LANGUAGE['typescript']),
    exclusion_key="typescript",
    type_contexts=TYPESCRIPT_TYPE_CONTEXTS,
)

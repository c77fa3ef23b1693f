"""
Core — The analysis-and-rewrite engine

Leaf-first:
- Nodes: Closed NodeKind categorisation of tree-sitter nodes
- Scope: Scope keys and the per-run scope tree
- Bindings: Declared names, registration policy, (name, scope) registry
- References: Identifier occurrences and their attribution
- Analyzer: Two-pass traversal producing an Analysis
- Eligibility: Exclusion policy for single-use bindings
- Precedence: When an inlined initializer needs parentheses
- Fixer: Removal + substitution edits and their application
- Engine: OneTimeVarsRule facade and Finding
- Parsing: tree-sitter host (language configs, registry, parser cache)
"""

from .nodes import NodeKind, classify
from .scope import LoopSpan, Scope, ScopeKey, ScopeKind, ScopeTree
from .bindings import Binding, BindingKind, BindingOrigin, BindingRegistry, Exclusion, RegistrationPolicy
from .references import Reference, ReferenceRole, ReferenceWalker
from .analyzer import Analysis, Analyzer
from .eligibility import EligibilityFilter
from .fixer import Edit, Fix, FixSynthesizer, TextRange, apply_fixes
from .engine import (
    MESSAGE, RULE_ID, Finding, FixResult, OneTimeVarsRule,
    check_source, fix_source,
)

__all__ = [
    # Nodes & scopes
    "NodeKind", "classify",
    "LoopSpan", "Scope", "ScopeKey", "ScopeKind", "ScopeTree",
    # Bindings & references
    "Binding", "BindingKind", "BindingOrigin", "BindingRegistry", "Exclusion", "RegistrationPolicy",
    "Reference", "ReferenceRole", "ReferenceWalker",
    # Analysis
    "Analysis", "Analyzer", "EligibilityFilter",
    # Fixes
    "Edit", "Fix", "FixSynthesizer", "TextRange", "apply_fixes",
    # Engine
    "MESSAGE", "RULE_ID", "Finding", "FixResult", "OneTimeVarsRule",
    "check_source", "fix_source",
]

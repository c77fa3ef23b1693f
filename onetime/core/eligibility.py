"""
Eligibility — Decides which single-use bindings are reported

Checks run in a fixed order and the first match excludes. The ignore-list
comes first, so a name that is both ignored and otherwise reportable is
never reported.
"""

from typing import Callable, List, Optional, TYPE_CHECKING

from .bindings import Binding, BindingKind, BindingRegistry, Exclusion
from .nodes import NodeKind, classify, unwrap_expression
from .scope import ScopeTree

if TYPE_CHECKING:
    from ..config import RuleOptions
    from .references import Reference


class EligibilityFilter:
    """
    Applies the exclusion policy to bindings read exactly once.

    Usage:
        eligibility = EligibilityFilter(options, analysis.scopes)
        for binding in eligibility.reportable(analysis.registry):
            ...
    """

    def __init__(self, options: 'RuleOptions', scopes: ScopeTree):
        self.options = options
        self.scopes = scopes
        self._checks: List[Callable[[Binding, 'Reference'], Optional[Exclusion]]] = [
            self._ignored,
            self._rejected,
            self._crosses_callback,
            self._inside_for_loop,
            self._awaited,
            self._exported,
            self._object_destructuring,
            self._unstable,
            self._read_out_of_order,
            self._inside_while_loop,
        ]

    def check(self, binding: Binding) -> Optional[Exclusion]:
        """
        Find the first exclusion that applies.

        Args:
            binding: A binding read exactly once

        Returns:
            The Exclusion, or None when the binding should be reported

        Raises:
            ValueError: If the binding is not read exactly once
        """
        reference = binding.last_reference
        if binding.use_count != 1 or reference is None:
            raise ValueError(f"'{binding.name}' is read {binding.use_count} times, not once")
        for check in self._checks:
            exclusion = check(binding, reference)
            if exclusion is not None:
                return exclusion
        return None

    def reportable(self, registry: BindingRegistry) -> List[Binding]:
        """Single-use bindings that survive every check, in registration order."""
        return [b for b in registry.single_use() if self.check(b) is None]

    # ===== Checks (in order) =====

    def _ignored(self, binding: Binding, reference: 'Reference') -> Optional[Exclusion]:
        if binding.name in self.options.ignored_variables:
            return Exclusion.IGNORED
        return None

    def _rejected(self, binding: Binding, reference: 'Reference') -> Optional[Exclusion]:
        return binding.rejection

    def _crosses_callback(self, binding: Binding, reference: 'Reference') -> Optional[Exclusion]:
        if not self.options.allow_inside_callback:
            return None
        if reference.function_key != binding.function_key:
            return Exclusion.CALLBACK
        return None

    def _inside_for_loop(self, binding: Binding, reference: 'Reference') -> Optional[Exclusion]:
        if any(loop.is_for_family for loop in binding.loops):
            return Exclusion.LOOP
        if any(loop.is_for_family for loop in reference.loops):
            return Exclusion.LOOP
        return None

    def _awaited(self, binding: Binding, reference: 'Reference') -> Optional[Exclusion]:
        initializer = unwrap_expression(binding.initializer)
        if initializer is not None and classify(initializer) is NodeKind.AWAIT:
            return Exclusion.AWAIT
        return None

    def _exported(self, binding: Binding, reference: 'Reference') -> Optional[Exclusion]:
        if binding.exported and self.options.ignore_exported_variables:
            return Exclusion.EXPORTED
        return None

    def _object_destructuring(self, binding: Binding, reference: 'Reference') -> Optional[Exclusion]:
        if binding.kind is BindingKind.OBJECT_PROPERTY and self.options.ignore_object_destructuring:
            return Exclusion.OBJECT_DESTRUCTURING
        return None

    def _unstable(self, binding: Binding, reference: 'Reference') -> Optional[Exclusion]:
        if binding.reassigned:
            return Exclusion.REASSIGNED
        if binding.redeclared:
            return Exclusion.REDECLARED
        if binding.malformed:
            return Exclusion.MALFORMED
        if binding.fallback_reads:
            return Exclusion.FALLBACK_READ
        return None

    def _read_out_of_order(self, binding: Binding, reference: 'Reference') -> Optional[Exclusion]:
        declarator = binding.declaration_node
        if declarator is not None and reference.node.start_byte < declarator.end_byte:
            return Exclusion.READ_BEFORE_DECLARATION
        # A hoisted `var` read outside the block that assigns it
        lexical = binding.lexical_key
        if lexical is not None and not self.scopes.is_ancestor(lexical, reference.scope_key):
            return Exclusion.OUTSIDE_DECLARING_BLOCK
        return None

    def _inside_while_loop(self, binding: Binding, reference: 'Reference') -> Optional[Exclusion]:
        declared_in = set(binding.loops)
        for loop in reference.loops:
            if not loop.is_for_family and loop not in declared_in:
                return Exclusion.WHILE_LOOP
        return None

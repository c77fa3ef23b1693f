"""
References — Identifier occurrences and their attribution to bindings

The analyzer collects one Reference per identifier occurrence during its
first pass; the ReferenceWalker then resolves each one:

  1. along the scope chain (governing key, then each enclosing key)
  2. failing that, by bare name (first registered binding with that name)

Only reads move usage counts. Declaration targets, non-shorthand property
keys and member property names are recorded but never counted.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Set, Tuple, TYPE_CHECKING

from .bindings import Binding, BindingRegistry
from .scope import LoopSpan, ScopeKey, ScopeTree

if TYPE_CHECKING:
    from tree_sitter import Node

logger = logging.getLogger(__name__)


class ReferenceRole(Enum):
    """Syntactic role of one identifier occurrence."""
    DECLARATION_TARGET = "declaration-target"
    READ = "read"
    OBJECT_PROPERTY_KEY = "object-property-key"
    OBJECT_PROPERTY_SHORTHAND = "object-property-shorthand"
    MEMBER_PROPERTY_NAME = "member-property-name"
    ASSIGNMENT_TARGET = "assignment-target"

    @property
    def counts(self) -> bool:
        """Whether an occurrence in this role is a use of a variable."""
        return self in (ReferenceRole.READ,
                        ReferenceRole.OBJECT_PROPERTY_SHORTHAND,
                        ReferenceRole.ASSIGNMENT_TARGET)


@dataclass(eq=False)
class Reference:
    """One identifier occurrence."""
    node: 'Node'
    name: str
    role: ReferenceRole
    scope_key: ScopeKey
    function_key: Optional[ScopeKey] = None
    loops: Tuple[LoopSpan, ...] = ()
    in_error: bool = False
    in_type: bool = False  # value read from a type position (`typeof x`)
    binding: Optional[Binding] = None
    fallback: bool = False

    @property
    def span(self) -> Tuple[int, int]:
        return (self.node.start_byte, self.node.end_byte)

    @property
    def parent(self) -> Optional['Node']:
        return self.node.parent


class ReferenceWalker:
    """
    Attributes collected references to registered bindings.

    Usage:
        walker = ReferenceWalker(registry, scopes)
        walker.attribute(references)
    """

    def __init__(self, registry: BindingRegistry, scopes: ScopeTree):
        self.registry = registry
        self.scopes = scopes
        self._counted: Set[Tuple[int, int]] = set()

    def resolve(self, reference: Reference) -> Tuple[Optional[Binding], bool]:
        """
        Find the binding a reference refers to.

        Returns:
            (binding, fallback): fallback is True when only the bare-name
            lookup matched
        """
        binding = self.registry.lookup(reference.name, self.scopes.chain(reference.scope_key))
        if binding is not None:
            return binding, False
        binding = self.registry.lookup_by_name(reference.name)
        return binding, binding is not None

    def attribute(self, references: Iterable[Reference]) -> None:
        for reference in references:
            if reference.role.counts:
                self.visit(reference)

    def visit(self, reference: Reference) -> Optional[Binding]:
        """Count one occurrence against its binding (at most once per span)."""
        if reference.span in self._counted:
            return reference.binding
        self._counted.add(reference.span)

        binding, fallback = self.resolve(reference)
        if binding is None:
            return None

        reference.binding = binding
        reference.fallback = fallback
        binding.use_count += 1
        binding.last_reference = reference

        if fallback:
            binding.fallback_reads += 1
            logger.debug("'%s' at byte %d attributed by name only", reference.name, reference.span[0])
        if reference.role is ReferenceRole.ASSIGNMENT_TARGET:
            binding.reassigned = True
        if reference.in_error:
            binding.malformed = True

        parent = reference.parent
        if parent is not None and parent.type in ('export_specifier', 'export_statement'):
            binding.exported = True
        return binding

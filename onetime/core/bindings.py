"""
Bindings — Declared names and the registry that owns them

A Binding is one declared name in one scope. The registry addresses every
binding by (name, scope_key), so a `let x` in the then-arm of an `if` and a
`let x` in its else-arm are two unrelated bindings that never share counts.

Registration never drops a declaration: names that can never be reported
(parameters, imports, function-valued variables, oversized initializers...)
are registered with a `rejection` so they still shadow outer names.

Usage:
    registry = BindingRegistry()
    binding = registry.register(Binding(name="x", scope_key=key, ...))
    registry.lookup("x", scopes.chain(read_scope))
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple, TYPE_CHECKING

from .nodes import NodeKind, classify, is_function_value, node_text, significant_children, unwrap_expression
from .scope import LoopSpan, ScopeKey

if TYPE_CHECKING:
    from tree_sitter import Node
    from ..config import RuleOptions
    from .references import Reference


class BindingKind(Enum):
    """How the name was declared."""
    SIMPLE = "simple"
    ARRAY_ELEMENT = "array-pattern-element"
    OBJECT_PROPERTY = "object-pattern-property"


class BindingOrigin(Enum):
    """Which construct introduced the name. Only VARIABLE is ever reported."""
    VARIABLE = "variable"
    PARAMETER = "parameter"
    FUNCTION = "function"
    CLASS = "class"
    CATCH = "catch"
    IMPORT = "import"
    LOOP_VARIABLE = "loop-variable"


class Exclusion(Enum):
    """Why a binding is not reported."""
    # Registration time
    FUNCTION_VALUE = "function-value"
    ARRAY_LITERAL = "array-literal"
    OBJECT_LITERAL = "object-literal"
    INITIALIZER_LENGTH = "initializer-length"
    PATTERN_SHAPE = "pattern-shape"
    SHADOW_ONLY = "shadow-only"
    # Eligibility time
    IGNORED = "ignored"
    CALLBACK = "callback"
    LOOP = "loop"
    AWAIT = "await"
    EXPORTED = "exported"
    OBJECT_DESTRUCTURING = "object-destructuring"
    REASSIGNED = "reassigned"
    REDECLARED = "redeclared"
    MALFORMED = "malformed"
    FALLBACK_READ = "fallback-read"
    READ_BEFORE_DECLARATION = "read-before-declaration"
    OUTSIDE_DECLARING_BLOCK = "outside-declaring-block"
    WHILE_LOOP = "while-loop"


@dataclass(eq=False)
class Binding:
    """
    One declared name.

    Attributes:
        name: Identifier text
        kind: simple, array-pattern-element or object-pattern-property
        origin: Construct that introduced the name
        declaration_node: The variable_declarator (or the declaring node)
        target_node: The identifier node naming the binding
        initializer: Initializer expression, None when declared without value
        scope_key: Scope the name lives in (function scope for `var`)
        lexical_key: Scope the declaration textually sits in
        function_key: Innermost enclosing function or program scope
        loops: Loop constructs enclosing the declaration
        pattern_key: Original property key node for object-pattern bindings
        pattern_index: Zero-based element position for array-pattern bindings
        use_count: Attributed reads (mutated only by ReferenceWalker)
        last_reference: Most recent attributed read
    """
    name: str
    scope_key: ScopeKey
    kind: BindingKind = BindingKind.SIMPLE
    origin: BindingOrigin = BindingOrigin.VARIABLE
    declaration_node: Optional['Node'] = None
    target_node: Optional['Node'] = None
    initializer: Optional['Node'] = None
    lexical_key: Optional[ScopeKey] = None
    function_key: Optional[ScopeKey] = None
    loops: Tuple[LoopSpan, ...] = ()
    pattern_key: Optional['Node'] = None
    pattern_index: Optional[int] = None

    use_count: int = 0
    last_reference: Optional['Reference'] = None

    rejection: Optional[Exclusion] = None
    exported: bool = False
    reassigned: bool = False
    redeclared: bool = False
    malformed: bool = False
    fallback_reads: int = 0

    @property
    def key(self) -> Tuple[str, ScopeKey]:
        return (self.name, self.scope_key)

    @property
    def statement(self) -> Optional['Node']:
        """The declaration statement owning a variable declarator."""
        if self.declaration_node is None or self.origin is not BindingOrigin.VARIABLE:
            return None
        return self.declaration_node.parent

    def position(self) -> Tuple[int, int]:
        """Zero-based (row, column) of the declaration target."""
        anchor = self.target_node or self.declaration_node
        return anchor.start_point if anchor is not None else (0, 0)

    def __repr__(self) -> str:
        row, col = self.position()
        return (f"Binding({self.name!r}, {self.kind.value}, {self.origin.value}, "
                f"line={row + 1}, uses={self.use_count})")


class BindingRegistry:
    """
    Every binding of one source unit, in registration order.

    A second registration under an existing (name, scope_key) does not
    create a new binding: the existing one is marked `redeclared` and
    returned, so both declarations share one usage count.
    """

    def __init__(self):
        self._bindings: Dict[Tuple[str, ScopeKey], Binding] = {}
        self._by_name: Dict[str, List[Binding]] = {}

    def register(self, binding: Binding) -> Binding:
        existing = self._bindings.get(binding.key)
        if existing is not None:
            existing.redeclared = True
            existing.malformed = existing.malformed or binding.malformed
            return existing
        self._bindings[binding.key] = binding
        self._by_name.setdefault(binding.name, []).append(binding)
        return binding

    def get(self, name: str, scope_key: ScopeKey) -> Optional[Binding]:
        return self._bindings.get((name, scope_key))

    def lookup(self, name: str, chain: Iterable[ScopeKey]) -> Optional[Binding]:
        """Nearest binding of `name` along a scope chain (nearest key first)."""
        for key in chain:
            binding = self._bindings.get((name, key))
            if binding is not None:
                return binding
        return None

    def lookup_by_name(self, name: str) -> Optional[Binding]:
        """First registered binding with this name, in any scope."""
        candidates = self._by_name.get(name)
        return candidates[0] if candidates else None

    def single_use(self) -> List[Binding]:
        """Bindings with exactly one attributed read, in registration order."""
        return [b for b in self._bindings.values() if b.use_count == 1]

    def __iter__(self) -> Iterator[Binding]:
        return iter(self._bindings.values())

    def __len__(self) -> int:
        return len(self._bindings)


# =============================================================================
# Registration Policy
# =============================================================================

class RegistrationPolicy:
    """
    Registration-time screening of a variable's initializer.

    Function values, array and object literals and long initializers are
    judged here, once, from the options in force for the run.
    """

    def __init__(self, options: 'RuleOptions', source: bytes):
        self.options = options
        self.source = source

    def screen(self, binding: Binding) -> Optional[Exclusion]:
        """
        Decide whether a freshly declared binding can ever be reported.

        Returns:
            The Exclusion to record on the binding, or None if it stays a candidate
        """
        if binding.origin is not BindingOrigin.VARIABLE:
            return Exclusion.SHADOW_ONLY
        if binding.rejection is not None:
            return binding.rejection

        initializer = binding.initializer
        if initializer is None:
            return None
        if self.options.ignore_function_variables and is_function_value(initializer):
            return Exclusion.FUNCTION_VALUE

        inner = unwrap_expression(initializer)
        kind = classify(inner)
        if kind is NodeKind.ARRAY:
            return self._screen_array(inner)
        if kind is NodeKind.OBJECT:
            return self._screen_object(inner)
        if len(node_text(initializer, self.source)) > self.options.max_initializer_length:
            return Exclusion.INITIALIZER_LENGTH
        return None

    def _screen_array(self, array: 'Node') -> Optional[Exclusion]:
        limit = self.options.ignore_array_variables
        if limit is True:
            return Exclusion.ARRAY_LITERAL
        if limit is False or limit is None:
            return None
        if len(significant_children(array)) > int(limit):
            return Exclusion.ARRAY_LITERAL
        return None

    def _screen_object(self, obj: 'Node') -> Optional[Exclusion]:
        if self.options.ignore_object_variables:
            return Exclusion.OBJECT_LITERAL
        properties = significant_children(obj)
        if len(properties) > self.options.max_object_properties:
            return Exclusion.OBJECT_LITERAL
        for prop in properties:
            if len(node_text(prop, self.source)) > self.options.max_property_length:
                return Exclusion.OBJECT_LITERAL
        return None


def describe_pattern(pattern: 'Node') -> Tuple[Optional['Node'], Optional['Node'], Optional[int]]:
    """
    Inspect a destructuring pattern for single-name eligibility.

    Only `{ a }`, `{ key: a }` and `[, , a]` shapes are inlinable. Rest
    elements, defaults, nested patterns and multi-name patterns are not.

    Returns:
        (target, key_node, index): target is None when the shape is rejected;
        key_node is set for object patterns (the shorthand identifier itself
        for `{ a }`), index for array patterns
    """
    elements = significant_children(pattern)
    if len(elements) != 1:
        return None, None, None
    element = elements[0]

    if pattern.type == 'array_pattern':
        if element.type != 'identifier':
            return None, None, None
        index = 0
        for child in pattern.children:
            if child.type == ',':
                index += 1
            elif child.start_byte == element.start_byte and child.end_byte == element.end_byte:
                break
        return element, None, index

    if element.type == 'shorthand_property_identifier_pattern':
        return element, element, None
    if element.type == 'pair_pattern':
        value = element.child_by_field_name('value')
        key = element.child_by_field_name('key')
        if value is not None and value.type == 'identifier' and key is not None:
            return value, key, None
    return None, None, None

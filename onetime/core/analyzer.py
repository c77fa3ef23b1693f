"""
Analyzer — Two-pass binding analysis of one source unit

Pass 1 walks the syntax tree once in pre-order with an explicit stack:
- opens a scope for every block-like construct (see scope_kind_for)
- registers every declared name in the BindingRegistry
- records every identifier occurrence as a Reference with its role

Pass 2 hands the collected references to the ReferenceWalker, which
attributes reads to bindings.

Nothing survives the run except the returned Analysis: every call builds
its own ScopeTree, BindingRegistry and reference list.

Usage:
    analysis = Analyzer(source, options).run(tree.root_node)
    for binding in analysis.registry.single_use():
        ...
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, NamedTuple, Optional, Tuple, TYPE_CHECKING

from .bindings import (
    Binding, BindingKind, BindingOrigin, BindingRegistry, Exclusion,
    RegistrationPolicy, describe_pattern,
)
from .nodes import (
    JSX_NAME_PARENTS, NodeKind, classify, is_field, node_text, pattern_targets, unwrap_expression,
)
from .references import Reference, ReferenceRole, ReferenceWalker
from .scope import LoopSpan, ScopeKey, ScopeKind, ScopeTree, scope_kind_for

if TYPE_CHECKING:
    from tree_sitter import Node
    from ..config import RuleOptions

logger = logging.getLogger(__name__)

Span = Tuple[int, int]

# Type position tracking
TYPE_NONE = 0
TYPE_POSITION = 1   # identifiers here name types, not values
TYPE_QUERY = 2      # `typeof x` in a type: x is a value read

# TypeScript declarations that only introduce a name
_NAMED_ORIGINS = {
    'enum_declaration': BindingOrigin.CLASS,
    'internal_module': BindingOrigin.CLASS,
    'module': BindingOrigin.CLASS,
    'function_signature': BindingOrigin.FUNCTION,
}


class _Frame(NamedTuple):
    node: 'Node'
    parent: Optional['Node']
    scope: Optional[ScopeKey]
    function: Optional[ScopeKey]
    loops: Tuple[LoopSpan, ...]
    in_error: bool
    type_mode: int


@dataclass
class Analysis:
    """Result of one Analyzer run."""
    source: bytes
    scopes: ScopeTree
    registry: BindingRegistry
    references: List[Reference] = field(default_factory=list)
    function_spans: List[Span] = field(default_factory=list)

    def reads_of(self, binding: Binding) -> List[Reference]:
        """Counted occurrences attributed to a binding."""
        return [r for r in self.references if r.binding is binding and r.role.counts]


class Analyzer:
    """
    Builds scopes, bindings and references for one syntax tree.

    Args:
        source: The exact bytes the tree was parsed from
        options: Rule options (registration thresholds)
        type_contexts: Node types whose subtrees are type positions
    """

    def __init__(self, source: bytes, options: 'RuleOptions',
                 type_contexts: FrozenSet[str] = frozenset()):
        self.source = source
        self.options = options
        self.type_contexts = type_contexts
        self.policy = RegistrationPolicy(options, source)

        self._handlers: Dict[NodeKind, Callable[['Node', _Frame, Optional[ScopeKey]], bool]] = {
            NodeKind.DECLARATOR: self._on_declarator,
            NodeKind.FUNCTION: self._on_function,
            NodeKind.CLASS: self._on_class,
            NodeKind.NAMED_DECLARATION: self._on_named_declaration,
            NodeKind.CATCH: self._on_catch,
            NodeKind.LOOP: self._on_loop,
            NodeKind.IMPORT: self._on_import,
            NodeKind.EXPORT: self._on_export,
            NodeKind.ASSIGNMENT: self._on_assignment,
            NodeKind.UPDATE: self._on_update,
            NodeKind.IDENTIFIER: self._on_identifier,
        }
        self._reset()

    def _reset(self) -> None:
        self.scopes = ScopeTree()
        self.registry = BindingRegistry()
        self.references: List[Reference] = []
        self.function_spans: List[Span] = []
        self._declared: Dict[Span, Optional[Binding]] = {}
        self._assigned: set = set()
        self._ignored: set = set()

    def run(self, root: 'Node') -> Analysis:
        """Analyze a whole tree (normally a `program` node)."""
        self._reset()
        self._collect(root)
        ReferenceWalker(self.registry, self.scopes).attribute(self.references)
        logger.debug("Analyzed %d scopes, %d bindings, %d references",
                     len(self.scopes), len(self.registry), len(self.references))
        return Analysis(
            source=self.source,
            scopes=self.scopes,
            registry=self.registry,
            references=self.references,
            function_spans=self.function_spans,
        )

    # =========================================================================
    # Pass 1
    # =========================================================================

    def _collect(self, root: 'Node') -> None:
        stack = [_Frame(root, None, None, None, (), False, TYPE_NONE)]
        while stack:
            frame = stack.pop()
            node = frame.node
            kind = classify(node)

            type_mode = frame.type_mode
            if node.type == 'type_query':
                type_mode = TYPE_QUERY
            elif type_mode == TYPE_NONE and node.type in self.type_contexts:
                type_mode = TYPE_POSITION

            outer = frame.scope
            scope, function = frame.scope, frame.function
            scope_kind = scope_kind_for(node, frame.parent)
            if scope_kind is not None:
                scope = self.scopes.open(node, scope_kind, outer)
                if scope_kind in (ScopeKind.FUNCTION, ScopeKind.PROGRAM):
                    function = scope
                if scope_kind is ScopeKind.FUNCTION:
                    self.function_spans.append((node.start_byte, node.end_byte))

            loops = frame.loops
            if kind in (NodeKind.LOOP, NodeKind.WHILE_LOOP):
                loops = loops + (LoopSpan.of(node, kind),)

            here = _Frame(node, frame.parent, scope, function, loops,
                          frame.in_error or kind is NodeKind.ERROR, type_mode)

            handler = self._handlers.get(kind)
            if handler is not None and not handler(node, here, outer):
                continue

            for child in reversed(node.children):
                if child.is_named:
                    stack.append(_Frame(child, node, scope, function, loops,
                                        here.in_error, type_mode))

    def _bind(self, target: 'Node', here: _Frame, scope: ScopeKey,
              origin: BindingOrigin, **fields) -> Binding:
        """Register one declared name and mark its occurrence as a declaration target."""
        declaration_node = fields.pop('declaration_node', target)
        binding = Binding(
            name=node_text(target, self.source),
            scope_key=scope,
            origin=origin,
            target_node=target,
            declaration_node=declaration_node,
            lexical_key=here.scope,
            function_key=here.function,
            loops=here.loops,
            malformed=here.in_error or target.is_missing,
            **fields,
        )
        binding.rejection = self.policy.screen(binding)
        binding = self.registry.register(binding)
        self._declared[(target.start_byte, target.end_byte)] = binding
        return binding

    # =========================================================================
    # Declarations
    # =========================================================================

    def _on_declarator(self, node: 'Node', here: _Frame, outer: Optional[ScopeKey]) -> bool:
        name_node = node.child_by_field_name('name')
        if name_node is None:
            return True
        statement = node.parent
        container = statement.parent if statement is not None else None

        hoisted = statement is not None and statement.type == 'variable_declaration'
        scope = self.scopes.function_scope(here.scope) if hoisted else here.scope
        origin = BindingOrigin.VARIABLE
        if container is not None and container.type == 'for_in_statement':
            origin = BindingOrigin.LOOP_VARIABLE
        exported = container is not None and container.type == 'export_statement'
        initializer = node.child_by_field_name('value')
        common = dict(declaration_node=node, initializer=initializer, exported=exported)

        if name_node.type == 'identifier':
            self._bind(name_node, here, scope, origin, **common)
        elif name_node.type in ('object_pattern', 'array_pattern'):
            kind = (BindingKind.ARRAY_ELEMENT if name_node.type == 'array_pattern'
                    else BindingKind.OBJECT_PROPERTY)
            target, key, index = describe_pattern(name_node)
            if target is not None:
                self._bind(target, here, scope, origin, kind=kind,
                           pattern_key=key, pattern_index=index, **common)
            else:
                for target in pattern_targets(name_node):
                    self._bind(target, here, scope, origin, kind=kind,
                               rejection=Exclusion.PATTERN_SHAPE, **common)
        return True

    def _on_function(self, node: 'Node', here: _Frame, outer: Optional[ScopeKey]) -> bool:
        name = node.child_by_field_name('name')
        if name is not None and name.type == 'identifier':
            if node.type in ('function_declaration', 'generator_function_declaration'):
                # Declarations bind in the enclosing scope, expressions in their own
                scope = outer if outer is not None else here.scope
                self._bind(name, here, scope, BindingOrigin.FUNCTION, declaration_node=node)
            else:
                self._bind(name, here, here.scope, BindingOrigin.FUNCTION, declaration_node=node)

        params = node.child_by_field_name('parameters')
        if params is None:
            params = node.child_by_field_name('parameter')
        for target in pattern_targets(params):
            self._bind(target, here, here.scope, BindingOrigin.PARAMETER, declaration_node=node)
        return True

    def _on_class(self, node: 'Node', here: _Frame, outer: Optional[ScopeKey]) -> bool:
        name = node.child_by_field_name('name')
        if name is not None and name.type == 'identifier':
            self._bind(name, here, here.scope, BindingOrigin.CLASS, declaration_node=node)
        return True

    def _on_named_declaration(self, node: 'Node', here: _Frame, outer: Optional[ScopeKey]) -> bool:
        name = node.child_by_field_name('name')
        origin = _NAMED_ORIGINS.get(node.type)
        if origin is not None and name is not None and name.type == 'identifier':
            self._bind(name, here, here.scope, origin, declaration_node=node)
        # Signature parameters have no body to be read in
        for target in pattern_targets(node.child_by_field_name('parameters')):
            self._ignored.add((target.start_byte, target.end_byte))
        return True

    def _on_catch(self, node: 'Node', here: _Frame, outer: Optional[ScopeKey]) -> bool:
        for target in pattern_targets(node.child_by_field_name('parameter')):
            self._bind(target, here, here.scope, BindingOrigin.CATCH, declaration_node=node)
        return True

    def _on_loop(self, node: 'Node', here: _Frame, outer: Optional[ScopeKey]) -> bool:
        if node.type != 'for_in_statement':
            return True
        left = node.child_by_field_name('left')
        if left is None:
            return True
        declaration_kind = node.child_by_field_name('kind')
        if declaration_kind is not None:
            hoisted = declaration_kind.type == 'var'
            scope = self.scopes.function_scope(here.scope) if hoisted else here.scope
            for target in pattern_targets(left):
                self._bind(target, here, scope, BindingOrigin.LOOP_VARIABLE, declaration_node=node)
        else:
            # `for (x of xs)` writes to an existing binding
            self._mark_assigned(left)
        return True

    def _on_import(self, node: 'Node', here: _Frame, outer: Optional[ScopeKey]) -> bool:
        pending = list(node.named_children)
        while pending:
            current = pending.pop()
            if current.type == 'import_specifier':
                local = current.child_by_field_name('alias')
                if local is None:
                    local = current.child_by_field_name('name')
                if local is not None and local.type == 'identifier':
                    self._bind(local, here, here.scope, BindingOrigin.IMPORT, declaration_node=node)
                continue
            for child in current.named_children:
                if child.type == 'identifier' and current.type in (
                        'import_clause', 'namespace_import', 'import_require_clause'):
                    self._bind(child, here, here.scope, BindingOrigin.IMPORT, declaration_node=node)
                else:
                    pending.append(child)
        # Import statements hold no reads
        return False

    def _on_export(self, node: 'Node', here: _Frame, outer: Optional[ScopeKey]) -> bool:
        if node.child_by_field_name('source') is not None:
            # Re-exports name another module's bindings
            return False
        for clause in node.named_children:
            if clause.type != 'export_clause':
                continue
            for specifier in clause.named_children:
                alias = specifier.child_by_field_name('alias')
                if alias is not None:
                    self._ignored.add((alias.start_byte, alias.end_byte))
        return True

    # =========================================================================
    # Writes
    # =========================================================================

    def _mark_assigned(self, target: Optional['Node']) -> None:
        target = unwrap_expression(target)
        if target is None:
            return
        for identifier in pattern_targets(target):
            self._assigned.add((identifier.start_byte, identifier.end_byte))

    def _on_assignment(self, node: 'Node', here: _Frame, outer: Optional[ScopeKey]) -> bool:
        self._mark_assigned(node.child_by_field_name('left'))
        return True

    def _on_update(self, node: 'Node', here: _Frame, outer: Optional[ScopeKey]) -> bool:
        self._mark_assigned(node.child_by_field_name('argument'))
        return True

    # =========================================================================
    # Occurrences
    # =========================================================================

    def _on_identifier(self, node: 'Node', here: _Frame, outer: Optional[ScopeKey]) -> bool:
        role = self._role_of(node, here)
        if role is None:
            return False
        reference = Reference(
            node=node,
            name=node_text(node, self.source),
            role=role,
            scope_key=here.scope,
            function_key=here.function,
            loops=here.loops,
            in_error=here.in_error,
            in_type=here.type_mode == TYPE_QUERY,
        )
        if role is ReferenceRole.DECLARATION_TARGET:
            reference.binding = self._declared.get(reference.span)
        self.references.append(reference)
        return False

    def _role_of(self, node: 'Node', here: _Frame) -> Optional[ReferenceRole]:
        """Classify an identifier occurrence, or None when it is not worth recording."""
        span = (node.start_byte, node.end_byte)
        if span in self._ignored or here.type_mode == TYPE_POSITION:
            return None
        if span in self._declared:
            return ReferenceRole.DECLARATION_TARGET

        parent = here.parent
        parent_type = parent.type if parent is not None else None
        node_type = node.type

        if node_type == 'property_identifier':
            if parent_type == 'member_expression':
                return ReferenceRole.MEMBER_PROPERTY_NAME
            if parent_type == 'pair':
                return ReferenceRole.OBJECT_PROPERTY_KEY
            return None
        if node_type == 'shorthand_property_identifier':
            return ReferenceRole.OBJECT_PROPERTY_SHORTHAND
        if span in self._assigned:
            return ReferenceRole.ASSIGNMENT_TARGET
        if node_type == 'shorthand_property_identifier_pattern':
            return None
        if parent_type in JSX_NAME_PARENTS and is_field(parent, 'name', node):
            # <div> is an intrinsic element, <Widget> a variable
            if node_text(node, self.source)[:1].islower():
                return None
        return ReferenceRole.READ

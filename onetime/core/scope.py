"""
Scope — Scope tree built during one traversal of a source unit

Every block-like construct gets a ScopeKey derived from its own source span.
Parallel constructs (the two arms of an if/else, the cases of a switch) get
distinct keys even though they share textual nesting, so same-named bindings
in sibling arms never collide.

Scopes point to their parent by key only; the ScopeTree owns every Scope and
is discarded together with the traversal that built it.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, NamedTuple, Optional, TYPE_CHECKING

from .nodes import NodeKind, classify, same_node

if TYPE_CHECKING:
    from tree_sitter import Node


class ScopeKind(Enum):
    """What introduced a scope."""
    PROGRAM = "program"
    FUNCTION = "function"
    BLOCK = "block"
    BRANCH = "branch"
    CASE = "case"
    LOOP = "loop"
    CATCH = "catch"
    CLASS = "class"


class ScopeKey(NamedTuple):
    """Identity of a scope: the span and type of the node that opened it."""
    start: int
    end: int
    node_type: str

    @classmethod
    def of(cls, node: 'Node') -> 'ScopeKey':
        return cls(node.start_byte, node.end_byte, node.type)

    def contains(self, start: int, end: int) -> bool:
        """Check whether a byte span lies inside this scope's span."""
        return self.start <= start and end <= self.end


class LoopSpan(NamedTuple):
    """A loop construct enclosing a declaration or a read."""
    start: int
    end: int
    kind: NodeKind  # NodeKind.LOOP (for family) or NodeKind.WHILE_LOOP

    @classmethod
    def of(cls, node: 'Node', kind: NodeKind) -> 'LoopSpan':
        return cls(node.start_byte, node.end_byte, kind)

    @property
    def is_for_family(self) -> bool:
        return self.kind is NodeKind.LOOP


@dataclass
class Scope:
    """One node of the scope tree."""
    key: ScopeKey
    kind: ScopeKind
    parent: Optional[ScopeKey] = None
    start_row: int = 0

    @property
    def is_function_scope(self) -> bool:
        """Function and program scopes receive hoisted `var` bindings."""
        return self.kind in (ScopeKind.FUNCTION, ScopeKind.PROGRAM)

    def describe(self) -> str:
        """Short label for debug output, e.g. 'branch@12'."""
        return f"{self.kind.value}@{self.start_row + 1}"


_KIND_SCOPES = {
    NodeKind.PROGRAM: ScopeKind.PROGRAM,
    NodeKind.FUNCTION: ScopeKind.FUNCTION,
    NodeKind.FIELD: ScopeKind.FUNCTION,
    NodeKind.BLOCK: ScopeKind.BLOCK,
    NodeKind.BRANCH: ScopeKind.BRANCH,
    NodeKind.SWITCH_CASE: ScopeKind.CASE,
    NodeKind.LOOP: ScopeKind.LOOP,
    NodeKind.CATCH: ScopeKind.CATCH,
}


def scope_kind_for(node: 'Node', parent: Optional['Node'] = None) -> Optional[ScopeKind]:
    """
    Decide whether a node opens a scope.

    The then-arm of an `if` opens a BRANCH scope keyed by its own start,
    whatever statement it is. Class expressions open a scope for their
    own name; class declarations bind their name in the enclosing scope.

    Args:
        node: Candidate node
        parent: Its parent, when the caller already holds it

    Returns:
        ScopeKind if the node opens a scope, None otherwise
    """
    if parent is not None and parent.type == 'if_statement':
        if same_node(parent.child_by_field_name('consequence'), node):
            return ScopeKind.BRANCH
    kind = classify(node)
    if kind is NodeKind.CLASS:
        return ScopeKind.CLASS if node.type == 'class' else None
    return _KIND_SCOPES.get(kind)


class ScopeTree:
    """
    All scopes of one source unit, addressed by key.

    Usage:
        tree = ScopeTree()
        root = tree.open(program_node, ScopeKind.PROGRAM, None)
        block = tree.open(block_node, ScopeKind.BLOCK, root)
        list(tree.chain(block))   # [block, root]
    """

    def __init__(self):
        self._scopes: Dict[ScopeKey, Scope] = {}
        self.root: Optional[ScopeKey] = None

    def open(self, node: 'Node', kind: ScopeKind, parent: Optional[ScopeKey]) -> ScopeKey:
        """
        Register the scope opened by `node`.

        Args:
            node: Scope-introducing syntax node
            kind: What kind of construct it is
            parent: Key of the enclosing scope (None for the program)

        Returns:
            The new scope's key
        """
        key = ScopeKey.of(node)
        if key not in self._scopes:
            self._scopes[key] = Scope(key=key, kind=kind, parent=parent,
                                      start_row=node.start_point[0])
        if parent is None and self.root is None:
            self.root = key
        return key

    def get(self, key: ScopeKey) -> Optional[Scope]:
        return self._scopes.get(key)

    def parent(self, key: ScopeKey) -> Optional[ScopeKey]:
        scope = self._scopes.get(key)
        return scope.parent if scope else None

    def chain(self, key: Optional[ScopeKey]) -> Iterator[ScopeKey]:
        """Yield `key` and then every enclosing scope key, nearest first."""
        while key is not None:
            yield key
            key = self.parent(key)

    def function_scope(self, key: ScopeKey) -> ScopeKey:
        """Nearest enclosing function or program scope (where `var` hoists)."""
        for candidate in self.chain(key):
            scope = self._scopes[candidate]
            if scope.is_function_scope:
                return candidate
        return key

    def is_ancestor(self, outer: ScopeKey, inner: ScopeKey) -> bool:
        """True if `outer` is `inner` or encloses it."""
        return any(k == outer for k in self.chain(inner))

    def describe(self, key: ScopeKey) -> str:
        scope = self._scopes.get(key)
        return scope.describe() if scope else "?"

    def __len__(self) -> int:
        return len(self._scopes)

    def __contains__(self, key: ScopeKey) -> bool:
        return key in self._scopes

    def __iter__(self) -> Iterator[Scope]:
        return iter(self._scopes.values())

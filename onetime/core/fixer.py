"""
Fixer — Builds and applies the rewrite for a reported binding

A Fix is two edits produced together: remove the declaration, substitute
the single read with the initializer's source text. Either both are
emitted or the binding is reported without a fix (UnsupportedRewrite).

Edits are byte ranges over the exact source the tree was parsed from.
apply_fixes() applies every non-overlapping fix of a unit in one pass.

Usage:
    synthesizer = FixSynthesizer(source)
    fix = synthesizer.synthesize(binding)
    new_source, applied, deferred = apply_fixes(source, [fix])
"""

from dataclasses import dataclass
from typing import Iterable, List, Tuple, TYPE_CHECKING

from ..errors import UnsupportedRewrite
from .bindings import Binding, BindingKind, BindingOrigin
from .nodes import JSX_NAME_PARENTS, node_text, same_node
from .precedence import (
    ASSIGNMENT, MEMBER, expression_precedence, needs_parentheses, operator_of, parenthesize,
)
from .references import ReferenceRole

if TYPE_CHECKING:
    from tree_sitter import Node
    from .references import Reference


DECLARATION_TYPES = ('lexical_declaration', 'variable_declaration')

# A statement in these positions cannot simply vanish: `if (a) let x = 1;`
SINGLE_STATEMENT_BODIES = frozenset({
    'if_statement', 'else_clause', 'for_statement', 'for_in_statement',
    'while_statement', 'do_statement', 'labeled_statement', 'with_statement',
})

LOOP_HEADERS = frozenset({'for_statement', 'for_in_statement'})

# First characters that continue an unterminated previous line
CONTINUATION_STARTS = frozenset(c.encode() for c in '([`+-/')

# Statements that can end in `}` and still take a following `(` or `[`
OPEN_ENDED_STATEMENTS = frozenset({
    'expression_statement', 'lexical_declaration', 'variable_declaration',
    'export_statement', 'type_alias_declaration',
})


@dataclass(frozen=True)
class TextRange:
    """Half-open byte range [start, end)."""
    start: int
    end: int

    def overlaps(self, other: 'TextRange') -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class Edit:
    """Replace `range` with `text`."""
    range: TextRange
    text: str

    def to_dict(self) -> dict:
        return {"start": self.range.start, "end": self.range.end, "text": self.text}


@dataclass(frozen=True)
class Fix:
    """The (removal, substitution) pair for one binding."""
    name: str
    edits: Tuple[Edit, ...]

    @property
    def removal(self) -> Edit:
        return self.edits[0]

    @property
    def substitution(self) -> Edit:
        return self.edits[1]

    def overlaps(self, other: 'Fix') -> bool:
        return any(mine.range.overlaps(theirs.range)
                   for mine in self.edits for theirs in other.edits)

    def to_dict(self) -> dict:
        return {"name": self.name, "edits": [e.to_dict() for e in self.edits]}


class FixSynthesizer:
    """
    Builds fixes for reported bindings of one source unit.

    Args:
        source: The exact bytes the analyzed tree was parsed from
    """

    def __init__(self, source: bytes):
        self.source = source

    def synthesize(self, binding: Binding) -> Fix:
        """
        Build the fix for a reported binding.

        Raises:
            UnsupportedRewrite: If no safe rewrite exists for this shape
        """
        reference = binding.last_reference
        if reference is None:
            raise UnsupportedRewrite(binding.name, "no read to substitute")
        self._check_supported(binding, reference)

        removal = self._removal(binding)
        substitution = self._substitution(binding, reference)
        if removal.range.overlaps(substitution.range):
            raise UnsupportedRewrite(binding.name, "read sits inside its own declaration")
        return Fix(name=binding.name, edits=(removal, substitution))

    # ===== Guards =====

    def _check_supported(self, binding: Binding, reference: 'Reference') -> None:
        name = binding.name
        if binding.origin is not BindingOrigin.VARIABLE:
            raise UnsupportedRewrite(name, f"{binding.origin.value} bindings are not inlined")
        if binding.exported:
            raise UnsupportedRewrite(name, "exported declaration")

        statement = binding.statement
        if statement is None or statement.type not in DECLARATION_TYPES:
            raise UnsupportedRewrite(name, "declaration is not a variable statement")
        container = statement.parent
        if container is not None and container.type in LOOP_HEADERS:
            raise UnsupportedRewrite(name, "loop header declaration")
        if container is not None and container.type == 'ambient_declaration':
            raise UnsupportedRewrite(name, "ambient declaration")

        if reference.role is ReferenceRole.ASSIGNMENT_TARGET:
            raise UnsupportedRewrite(name, "read is also a write")
        if reference.in_type:
            raise UnsupportedRewrite(name, "read in a type position")

        parent = reference.node.parent
        if parent is not None and parent.type == 'export_specifier':
            raise UnsupportedRewrite(name, "read in an export specifier")
        if parent is not None and parent.type == 'unary_expression' and operator_of(parent) == 'delete':
            raise UnsupportedRewrite(name, "operand of delete")

        node = reference.node
        while parent is not None and parent.type in ('member_expression', 'nested_identifier'):
            node, parent = parent, parent.parent
        if parent is not None and parent.type in JSX_NAME_PARENTS:
            raise UnsupportedRewrite(name, "JSX tag name")

        if binding.kind is not BindingKind.SIMPLE and binding.initializer is None:
            raise UnsupportedRewrite(name, "destructuring without a value")

    # ===== Removal =====

    def _removal(self, binding: Binding) -> Edit:
        declarator = binding.declaration_node
        statement = declarator.parent
        declarators = [c for c in statement.named_children if c.type == 'variable_declarator']

        if len(declarators) == 1:
            return self._remove_statement(statement)

        index = next(i for i, d in enumerate(declarators) if same_node(d, declarator))
        if index == 0:
            # `a = 1, b = 2` -> `b = 2`
            return Edit(TextRange(declarator.start_byte, declarators[1].start_byte), "")
        # `a = 1, b = 2` -> `a = 1`
        return Edit(TextRange(declarators[index - 1].end_byte, declarator.end_byte), "")

    def _remove_statement(self, statement: 'Node') -> Edit:
        start, end = statement.start_byte, statement.end_byte
        container = statement.parent
        if container is not None and container.type in SINGLE_STATEMENT_BODIES:
            return Edit(TextRange(start, end), ";")

        source = self.source
        line_start = source.rfind(b'\n', 0, start) + 1
        line_end = source.find(b'\n', end)
        if line_end == -1:
            line_end = len(source)

        # Without semicolons the removed statement may be all that keeps
        # `a = 1` and `[x].map(f)` apart; leave a `;` in its place
        replacement = ";" if self._joins_neighbours(statement) else ""

        if not source[line_start:start].strip() and not source[end:line_end].strip():
            # Drop the whole line
            return Edit(TextRange(line_start, min(line_end + 1, len(source))), replacement)

        while end < line_end and source[end] in b' \t':
            end += 1
        return Edit(TextRange(start, end), replacement)

    def _joins_neighbours(self, statement: 'Node') -> bool:
        """
        Would removing the statement glue its neighbours into one expression?

        True when the previous statement is left unterminated and the next
        one starts with a token that continues an expression.
        """
        following = statement.next_sibling
        while following is not None and following.type == 'comment':
            following = following.next_sibling
        if following is None or not following.is_named:
            return False
        if self.source[following.start_byte:following.start_byte + 1] not in CONTINUATION_STARTS:
            return False

        previous = statement.prev_sibling
        while previous is not None and previous.type == 'comment':
            previous = previous.prev_sibling
        if previous is None or not previous.is_named:
            return False
        text = node_text(previous, self.source).rstrip()
        if text.endswith(';'):
            return False
        return not (text.endswith('}') and previous.type not in OPEN_ENDED_STATEMENTS)

    # ===== Substitution =====

    def _substitution(self, binding: Binding, reference: 'Reference') -> Edit:
        use = reference.node
        initializer = binding.initializer

        if binding.kind is BindingKind.SIMPLE:
            text = node_text(initializer, self.source) if initializer is not None else "undefined"
            expression, precedence = initializer, None
        else:
            text = self._pattern_access(binding)
            expression, precedence = None, MEMBER

        if reference.role is ReferenceRole.OBJECT_PROPERTY_SHORTHAND:
            if precedence is None:
                precedence = expression_precedence(expression)
            if precedence < ASSIGNMENT:
                text = parenthesize(text)
            text = f"{binding.name}: {text}"
        elif needs_parentheses(expression, text, use, precedence):
            text = parenthesize(text)

        return Edit(TextRange(use.start_byte, use.end_byte), text)

    def _pattern_access(self, binding: Binding) -> str:
        """`init.key`, `init["key"]` or `init[index]` for a pattern-bound name."""
        initializer = binding.initializer
        base = node_text(initializer, self.source)
        if expression_precedence(initializer) < MEMBER:
            base = parenthesize(base)

        if binding.kind is BindingKind.ARRAY_ELEMENT:
            return f"{base}[{binding.pattern_index}]"

        key = binding.pattern_key
        if key is None:
            raise UnsupportedRewrite(binding.name, "pattern property has no key")
        key_text = node_text(key, self.source)
        if key.type in ('property_identifier', 'shorthand_property_identifier_pattern'):
            return f"{base}.{key_text}"
        if key.type in ('string', 'number'):
            return f"{base}[{key_text}]"
        if key.type == 'computed_property_name':
            return f"{base}{key_text}"
        raise UnsupportedRewrite(binding.name, f"unsupported pattern key '{key_text}'")


def apply_fixes(source: bytes, fixes: Iterable[Fix]) -> Tuple[bytes, List[Fix], List[Fix]]:
    """
    Apply fixes in one pass, skipping any that overlap an earlier one.

    Args:
        source: Bytes the fixes were computed against
        fixes: Candidate fixes, in report order

    Returns:
        (new_source, applied, deferred)
    """
    applied: List[Fix] = []
    deferred: List[Fix] = []
    for fix in fixes:
        if any(fix.overlaps(other) for other in applied):
            deferred.append(fix)
        else:
            applied.append(fix)

    edits = sorted((edit for fix in applied for edit in fix.edits), key=lambda e: e.range.start)
    pieces = []
    cursor = 0
    for edit in edits:
        pieces.append(source[cursor:edit.range.start])
        pieces.append(edit.text.encode('utf-8'))
        cursor = edit.range.end
    pieces.append(source[cursor:])
    return b"".join(pieces), applied, deferred
